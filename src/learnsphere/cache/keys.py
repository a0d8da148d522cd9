"""Cache key schema for LearnSphere.

Keys are unprefixed and must stay byte-for-byte stable: read paths and the
invalidation map derive the same strings, and a mismatch silently turns an
invalidation into a no-op.

    all_subjects_cache                      flat subject list
    branches_cache                          branch list
    subject_content_<subjectId>             subject detail with content
    subject_<subjectId>_cache               per-subject record (progress writes)
    search:<q>:<type>:<branch>:<limit>      global search results
    suggestions:<q>                         autocomplete suggestions
    login_fail:<email>                      failed-login counter
    website_access_count                    page visit counter
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    ALL_SUBJECTS = "all_subjects_cache"
    BRANCHES = "branches_cache"
    ACCESS_COUNT = "website_access_count"

    @classmethod
    def all_subjects(cls) -> str:
        """Key for the flat subject list."""
        return cls.ALL_SUBJECTS

    @classmethod
    def branches(cls) -> str:
        """Key for the branch list."""
        return cls.BRANCHES

    @classmethod
    def subject_content(cls, subject_id: str) -> str:
        """Key for a subject detail including its content items."""
        return f"subject_content_{subject_id}"

    @classmethod
    def subject(cls, subject_id: str) -> str:
        """Key for a single subject record."""
        return f"subject_{subject_id}_cache"

    @classmethod
    def search(cls, query: str, search_type: str, branch: str, limit: int) -> str:
        """Key for global search results.

        Every parameter that changes the result set is part of the key.
        """
        return f"search:{query}:{search_type}:{branch}:{limit}"

    @classmethod
    def suggestions(cls, query: str) -> str:
        """Key for autocomplete suggestions."""
        return f"suggestions:{query}"

    @classmethod
    def login_failures(cls, identity: str) -> str:
        """Key for the failed-login counter of an identity (email)."""
        return f"login_fail:{normalize_identity(identity)}"

    @classmethod
    def access_count(cls) -> str:
        """Key for the website visit counter."""
        return cls.ACCESS_COUNT


def normalize_identity(identity: str) -> str:
    """Normalize a login identity (email) for keying."""
    return identity.strip().lower()
