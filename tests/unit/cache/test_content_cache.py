"""Tests for the read-through content cache."""

from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest

from learnsphere.cache import CacheClient, CacheUnavailableError, ContentCache


@pytest.fixture
def unavailable_cache() -> ContentCache:
    """ContentCache over a client that is always down."""
    client = MagicMock(spec=CacheClient)
    error = CacheUnavailableError("down")
    client.get = AsyncMock(side_effect=error)
    client.set = AsyncMock(side_effect=error)
    client.delete = AsyncMock(side_effect=error)
    client.delete_pattern = AsyncMock(side_effect=error)
    return ContentCache(client)


class TestReadThrough:
    """Test cache-aside reads."""

    @pytest.mark.asyncio
    async def test_miss_loads_and_populates(
        self, content_cache: ContentCache, cache_client: CacheClient
    ) -> None:
        """A miss calls the loader and stores its result with the TTL."""
        loader = AsyncMock(return_value=[{"_id": "s1"}])

        value = await content_cache.read_through("all_subjects_cache", loader, ttl=3600)

        assert value == [{"_id": "s1"}]
        loader.assert_awaited_once()
        assert orjson.loads(await cache_client.get("all_subjects_cache")) == [{"_id": "s1"}]
        assert 0 < await cache_client.ttl("all_subjects_cache") <= 3600

    @pytest.mark.asyncio
    async def test_hit_skips_loader(self, content_cache: ContentCache) -> None:
        """A hit is served without touching the loader."""
        await content_cache.set("branches_cache", [{"name": "Physics"}], ttl=60)
        loader = AsyncMock()

        value = await content_cache.read_through("branches_cache", loader, ttl=60)

        assert value == [{"name": "Physics"}]
        loader.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_loader_error_is_not_cached(
        self, content_cache: ContentCache, cache_client: CacheClient
    ) -> None:
        """Loader exceptions propagate and leave the key absent."""
        loader = AsyncMock(side_effect=LookupError("missing"))

        with pytest.raises(LookupError):
            await content_cache.read_through("subject_content_x", loader, ttl=60)

        assert await cache_client.get("subject_content_x") is None

    @pytest.mark.asyncio
    async def test_none_is_not_cached(
        self, content_cache: ContentCache, cache_client: CacheClient
    ) -> None:
        loader = AsyncMock(return_value=None)
        assert await content_cache.read_through("k", loader, ttl=60) is None
        assert await cache_client.get("k") is None

    @pytest.mark.asyncio
    async def test_unavailable_backend_falls_through(
        self, unavailable_cache: ContentCache
    ) -> None:
        """An unreachable cache behaves as a miss and never raises."""
        loader = AsyncMock(return_value={"ok": True})

        value = await unavailable_cache.read_through("k", loader, ttl=60)

        assert value == {"ok": True}
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_a_miss(
        self, content_cache: ContentCache, cache_client: CacheClient
    ) -> None:
        await cache_client.set("k", b"not json", ttl=60)
        loader = AsyncMock(return_value=[1])
        assert await content_cache.read_through("k", loader, ttl=60) == [1]


class TestInvalidate:
    """Test invalidation."""

    @pytest.mark.asyncio
    async def test_invalidate_removes_entries(self, content_cache: ContentCache) -> None:
        """A read after invalidation never returns the old value."""
        await content_cache.set("all_subjects_cache", ["old"], ttl=60)
        await content_cache.set("branches_cache", ["old"], ttl=60)

        removed = await content_cache.invalidate("all_subjects_cache", "branches_cache")

        assert removed == 2
        loader = AsyncMock(return_value=["new"])
        assert await content_cache.read_through("all_subjects_cache", loader, ttl=60) == ["new"]

    @pytest.mark.asyncio
    async def test_invalidate_missing_key(self, content_cache: ContentCache) -> None:
        assert await content_cache.invalidate("nothing_here") == 0

    @pytest.mark.asyncio
    async def test_invalidate_pattern(self, content_cache: ContentCache) -> None:
        await content_cache.set("suggestions:ph", ["a"], ttl=60)
        await content_cache.set("suggestions:ma", ["b"], ttl=60)
        assert await content_cache.invalidate_pattern("suggestions:*") == 2

    @pytest.mark.asyncio
    async def test_invalidate_swallows_backend_errors(
        self, unavailable_cache: ContentCache
    ) -> None:
        assert await unavailable_cache.invalidate("k") == 0
        assert await unavailable_cache.invalidate_pattern("k*") == 0

    @pytest.mark.asyncio
    async def test_set_reports_failure(self, unavailable_cache: ContentCache) -> None:
        assert await unavailable_cache.set("k", [1], ttl=60) is False
