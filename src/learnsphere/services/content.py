"""Public read path for subjects and their content."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.api.errors import NotFoundError
from learnsphere.cache import CacheKeys, CacheUnavailableError, ContentCache
from learnsphere.config import settings
from learnsphere.core.models import ContentOut, SubjectDetail, SubjectSummary
from learnsphere.persistence import ContentRepository, SubjectRepository


class ContentService:
    def __init__(self, session: AsyncSession, cache: ContentCache):
        self.cache = cache
        self.subjects = SubjectRepository(session)
        self.contents = ContentRepository(session)

    async def list_subjects(self) -> list[dict[str, Any]]:
        """Flat subject list, cached under ``all_subjects_cache``."""

        async def load() -> list[dict[str, Any]]:
            rows = await self.subjects.list_all()
            return [SubjectSummary.model_validate(row).dump() for row in rows]

        return await self.cache.read_through(
            CacheKeys.all_subjects(), load, settings.content_cache_ttl
        )

    async def get_subject_content(self, subject_id: str) -> dict[str, Any]:
        """Subject with its content, cached under ``subject_content_<id>``.

        Raises NotFoundError (and caches nothing) for an unknown subject.
        """

        async def load() -> dict[str, Any]:
            subject = await self.subjects.get(subject_id)
            if subject is None:
                raise NotFoundError("Subject", subject_id)
            items = await self.contents.list_for_subject(subject_id)
            detail = SubjectDetail.model_validate(subject)
            detail.content = [ContentOut.model_validate(item) for item in items]
            return detail.dump()

        return await self.cache.read_through(
            CacheKeys.subject_content(subject_id), load, settings.content_cache_ttl
        )

    async def access_count(self) -> int:
        """Website visit counter, 0 when unset or the cache is down."""
        try:
            raw = await self.cache.cache.get(CacheKeys.access_count())
        except CacheUnavailableError:
            return 0
        return int(raw) if raw is not None else 0
