"""Shared FastAPI dependencies for LearnSphere routers.

Builds the per-request collaborators (cache, fanout, services) from the
process-wide Redis client, database session factory and fanout slot, so
handlers receive everything explicitly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.cache import CacheClient, ContentCache, get_redis
from learnsphere.config import settings
from learnsphere.events import NotificationFanout, get_fanout
from learnsphere.persistence import get_session
from learnsphere.security.lockout import LoginAttemptTracker
from learnsphere.services import (
    AdminService,
    AnalyticsService,
    AuthService,
    ContentService,
    SearchService,
)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_cache_client() -> CacheClient:
    return CacheClient(await get_redis())


async def get_content_cache(
    client: Annotated[CacheClient, Depends(get_cache_client)],
) -> ContentCache:
    return ContentCache(client)


def get_notification_fanout() -> NotificationFanout | None:
    """The installed fanout, or None before startup."""
    return get_fanout()


async def get_login_tracker(
    client: Annotated[CacheClient, Depends(get_cache_client)],
) -> LoginAttemptTracker:
    return LoginAttemptTracker(
        client,
        max_attempts=settings.login_max_attempts,
        lockout_seconds=settings.login_lockout_seconds,
    )


CacheDep = Annotated[ContentCache, Depends(get_content_cache)]


async def get_admin_service(
    session: SessionDep,
    cache: CacheDep,
    fanout: Annotated[NotificationFanout | None, Depends(get_notification_fanout)],
) -> AdminService:
    return AdminService(session, cache, fanout)


async def get_content_service(session: SessionDep, cache: CacheDep) -> ContentService:
    return ContentService(session, cache)


async def get_search_service(session: SessionDep, cache: CacheDep) -> SearchService:
    return SearchService(session, cache)


async def get_analytics_service(session: SessionDep, cache: CacheDep) -> AnalyticsService:
    return AnalyticsService(session, cache)


async def get_auth_service(
    session: SessionDep,
    tracker: Annotated[LoginAttemptTracker, Depends(get_login_tracker)],
) -> AuthService:
    return AuthService(session, tracker)
