"""Tests for the write-operation invalidation map."""

import pytest

from learnsphere.cache.invalidation import WriteOperation, invalidation_keys


class TestInvalidationKeys:
    """Test which keys each write deletes."""

    def test_create_subject(self) -> None:
        assert invalidation_keys(WriteOperation.CREATE_SUBJECT) == ["all_subjects_cache"]

    def test_add_content(self) -> None:
        keys = invalidation_keys(WriteOperation.ADD_CONTENT, "s1")
        assert keys == ["subject_content_s1"]

    def test_update_progress(self) -> None:
        keys = invalidation_keys(WriteOperation.UPDATE_PROGRESS, "s1")
        assert keys == ["subject_s1_cache"]

    def test_create_branch(self) -> None:
        keys = invalidation_keys(WriteOperation.CREATE_BRANCH)
        assert keys == ["all_subjects_cache", "branches_cache"]

    def test_delete_branch(self) -> None:
        keys = invalidation_keys(WriteOperation.DELETE_BRANCH)
        assert keys == ["all_subjects_cache", "branches_cache"]

    def test_delete_subject(self) -> None:
        keys = invalidation_keys(WriteOperation.DELETE_SUBJECT, "s1")
        assert keys == ["subject_content_s1"]

    def test_search_keys_never_invalidated(self) -> None:
        """Search and suggestions expire by TTL only."""
        for operation in WriteOperation:
            keys = invalidation_keys(operation, "s1")
            assert not any(k.startswith(("search:", "suggestions:")) for k in keys)

    @pytest.mark.parametrize(
        "operation",
        [
            WriteOperation.ADD_CONTENT,
            WriteOperation.UPDATE_PROGRESS,
            WriteOperation.DELETE_SUBJECT,
        ],
    )
    def test_subject_scoped_requires_id(self, operation: WriteOperation) -> None:
        with pytest.raises(ValueError):
            invalidation_keys(operation)
