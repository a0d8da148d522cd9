"""Shared fixtures: fake Redis, in-memory SQLite and an ASGI test client."""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from learnsphere.cache import CacheClient, ContentCache
from learnsphere.events import NotificationFanout, Subscriber, set_fanout
from learnsphere.persistence import Base
from learnsphere.security.tokens import create_access_token


@pytest.fixture
def fake_redis() -> fakeredis.FakeAsyncRedis:
    """Isolated in-memory Redis per test."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


@pytest.fixture
def cache_client(fake_redis: fakeredis.FakeAsyncRedis) -> CacheClient:
    return CacheClient(fake_redis)


@pytest.fixture
def content_cache(cache_client: CacheClient) -> ContentCache:
    return ContentCache(cache_client)


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fanout() -> NotificationFanout:
    return NotificationFanout()


@pytest.fixture
def make_connection():
    """Factory for fake push connections recording what they receive."""

    def _make() -> MagicMock:
        connection = MagicMock()
        connection.send_bytes = AsyncMock()
        return connection

    return _make


@pytest.fixture
def subscriber(make_connection) -> Subscriber:
    return Subscriber(connection=make_connection())


@pytest.fixture
async def app_client(
    monkeypatch: pytest.MonkeyPatch,
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    fake_redis: fakeredis.FakeAsyncRedis,
    fanout: NotificationFanout,
) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client against the app wired to the in-memory backends.

    The lifespan is not run; the backends it would create are installed
    directly in their process-wide slots.
    """
    from learnsphere.api.app import create_app
    from learnsphere.cache import redis as redis_module
    from learnsphere.persistence import db as db_module

    monkeypatch.setattr(redis_module, "_redis_client", fake_redis)
    monkeypatch.setattr(db_module, "_engine", engine)
    monkeypatch.setattr(db_module, "_session_factory", session_factory)
    set_fanout(fanout)

    transport = httpx.ASGITransport(app=create_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    set_fanout(None)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('admin-1', 'admin')}"}


@pytest.fixture
def user_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-1', 'user')}"}
