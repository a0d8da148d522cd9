"""Write-operation to cache-key invalidation map.

Search and suggestion keys are deliberately absent: they are only ever
expired by TTL, so search results may lag a content change by up to the
search TTL.
"""

from __future__ import annotations

from enum import Enum

from learnsphere.cache.keys import CacheKeys


class WriteOperation(str, Enum):
    """Write operations that invalidate cached reads."""

    CREATE_SUBJECT = "create_subject"
    ADD_CONTENT = "add_content"
    UPDATE_PROGRESS = "update_progress"
    CREATE_BRANCH = "create_branch"
    DELETE_BRANCH = "delete_branch"
    DELETE_SUBJECT = "delete_subject"


def invalidation_keys(operation: WriteOperation, subject_id: str | None = None) -> list[str]:
    """Keys that must be deleted after a write operation commits.

    Args:
        operation: The committed write
        subject_id: Subject the write touched, for subject-scoped operations

    Raises:
        ValueError: If a subject-scoped operation is missing subject_id
    """
    if operation is WriteOperation.CREATE_SUBJECT:
        return [CacheKeys.all_subjects()]
    if operation is WriteOperation.CREATE_BRANCH or operation is WriteOperation.DELETE_BRANCH:
        return [CacheKeys.all_subjects(), CacheKeys.branches()]

    if subject_id is None:
        raise ValueError(f"{operation.value} requires a subject_id")

    if operation is WriteOperation.ADD_CONTENT:
        return [CacheKeys.subject_content(subject_id)]
    if operation is WriteOperation.UPDATE_PROGRESS:
        return [CacheKeys.subject(subject_id)]
    # DELETE_SUBJECT: one step of a branch cascade
    return [CacheKeys.subject_content(subject_id)]
