"""Search across branches, subjects and content.

Global search and suggestions are cached by every distinguishing
parameter and expire by TTL only; writes do not invalidate them.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.api.errors import BadRequestError
from learnsphere.cache import CacheKeys, ContentCache
from learnsphere.config import settings
from learnsphere.core.models import BranchOut, SubjectSummary
from learnsphere.persistence import BranchRepository, ContentRepository, SubjectRepository

logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 5


class SearchType(str, Enum):
    ALL = "all"
    SUBJECTS = "subjects"
    CONTENT = "content"
    BRANCHES = "branches"


class SearchService:
    def __init__(self, session: AsyncSession, cache: ContentCache):
        self.cache = cache
        self.branches = BranchRepository(session)
        self.subjects = SubjectRepository(session)
        self.contents = ContentRepository(session)

    async def global_search(
        self,
        query: str | None,
        search_type: SearchType = SearchType.ALL,
        branch_id: str | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Case-insensitive substring search.

        Args:
            query: At least ``search_min_query_length`` characters once trimmed
            search_type: Which collections to search
            branch_id: Restrict subjects to one branch
            limit: Per-collection result cap

        Raises:
            BadRequestError: If the query is too short
        """
        q = (query or "").strip()
        minimum = settings.search_min_query_length
        if len(q) < minimum:
            raise BadRequestError(f"Search query must be at least {minimum} characters long")
        limit = limit or settings.search_default_limit
        key = CacheKeys.search(q, search_type.value, branch_id or "", limit)

        async def load() -> dict[str, Any]:
            results: dict[str, Any] = {"subjects": [], "content": [], "branches": []}
            if search_type in (SearchType.ALL, SearchType.SUBJECTS):
                rows = await self.subjects.search(q, branch_id, limit)
                results["subjects"] = [SubjectSummary.model_validate(r).dump() for r in rows]
            if search_type in (SearchType.ALL, SearchType.CONTENT):
                pairs = await self.contents.search(q, limit)
                results["content"] = [
                    {
                        "_id": content.id,
                        "title": content.title,
                        "category": content.category,
                        "link": content.link,
                        "subjectId": content.subject_id,
                        "subjectName": subject_name,
                    }
                    for content, subject_name in pairs
                ]
            if search_type in (SearchType.ALL, SearchType.BRANCHES):
                rows = await self.branches.search(q, limit)
                results["branches"] = [BranchOut.model_validate(r).dump() for r in rows]

            total = sum(len(items) for items in results.values())
            return {"query": q, "type": search_type.value, "totalResults": total, "results": results}

        return await self.cache.read_through(key, load, settings.search_cache_ttl)

    async def suggestions(self, query: str | None) -> list[dict[str, str]]:
        """Up to five branch and five subject names for type-ahead."""
        q = (query or "").strip()
        if not q:
            return []

        async def load() -> list[dict[str, str]]:
            branches = await self.branches.search(q, SUGGESTION_LIMIT)
            subjects = await self.subjects.search(q, None, SUGGESTION_LIMIT)
            return [{"text": b.name, "type": "branch"} for b in branches] + [
                {"text": s.name, "type": "subject"} for s in subjects
            ]

        return await self.cache.read_through(
            CacheKeys.suggestions(q), load, settings.suggestions_cache_ttl
        )

    async def filter_subjects(
        self,
        branch_id: str | None = None,
        year: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Subjects matching every given filter. Not cached."""
        rows = await self.subjects.filter(
            branch_id=branch_id,
            year=year,
            category=category,
            limit=limit or settings.search_default_limit,
        )
        return [SubjectSummary.model_validate(row).dump() for row in rows]
