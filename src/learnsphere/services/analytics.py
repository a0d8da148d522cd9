"""Admin dashboard: summary, growth over time and engagement per branch."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.cache import CacheKeys, CacheUnavailableError, ContentCache
from learnsphere.persistence import (
    BranchRepository,
    ContentRepository,
    SubjectRepository,
    UserRepository,
    UserRole,
)


class AnalyticsService:
    def __init__(self, session: AsyncSession, cache: ContentCache):
        self.cache = cache
        self.branches = BranchRepository(session)
        self.subjects = SubjectRepository(session)
        self.contents = ContentRepository(session)
        self.users = UserRepository(session)

    async def _website_visits(self) -> int:
        try:
            raw = await self.cache.cache.get(CacheKeys.access_count())
        except CacheUnavailableError:
            return 0
        return int(raw) if raw is not None else 0

    async def summary(self) -> dict[str, Any]:
        """Totals, content by category, completion stats and subjects per branch."""
        by_category = await self.contents.count_by_category()
        by_branch = await self.subjects.count_by_branch()
        return {
            "totals": {
                "branches": await self.branches.count(),
                "subjects": await self.subjects.count(),
                "content": await self.contents.count(),
                "users": await self.users.count_by_role(UserRole.USER.value),
                "admins": await self.users.count_by_role(UserRole.ADMIN.value),
                "websiteVisits": await self._website_visits(),
            },
            "contentDistribution": [
                {"category": category, "count": count}
                for category, count in sorted(by_category.items())
            ],
            "completionStats": await self.subjects.completion_stats(),
            "subjectsByBranch": [
                {"branch": name, "count": count} for name, count in by_branch
            ],
        }

    async def growth(self, months: int = 12) -> dict[str, Any]:
        """Subjects and content created per calendar month, oldest first.

        Covers the latest ``months`` months that have at least one row.
        """

        def _series(rows: list[tuple[int, int, int]]) -> list[dict[str, int]]:
            return [{"year": y, "month": m, "count": count} for y, m, count in rows]

        return {
            "contentGrowth": _series(await self.contents.created_per_month(months)),
            "subjectGrowth": _series(await self.subjects.created_per_month(months)),
        }

    async def engagement(self) -> dict[str, Any]:
        """Account counts and content volume per branch."""
        per_branch = await self.subjects.content_per_branch()
        return {
            "totalUsers": await self.users.count_by_role(UserRole.USER.value),
            "adminCount": await self.users.count_by_role(UserRole.ADMIN.value),
            "contentPerBranch": [
                {
                    "branchName": name,
                    "subjectCount": subjects,
                    "totalContent": content,
                    "contentPerSubject": content / subjects if subjects else 0.0,
                }
                for name, subjects, content in per_branch
            ],
        }
