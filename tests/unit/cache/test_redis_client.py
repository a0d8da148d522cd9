"""Tests for the Redis cache client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from learnsphere.cache.redis import CacheClient, CacheUnavailableError


@pytest.fixture
def broken_client() -> CacheClient:
    """Client whose backend refuses every command."""
    redis = MagicMock()
    error = RedisConnectionError("connection refused")
    for name in ("get", "set", "delete", "incr", "expire", "ttl", "ping"):
        setattr(redis, name, AsyncMock(side_effect=error))
    return CacheClient(redis)


class TestCacheClient:
    """Test CacheClient against fakeredis."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache_client: CacheClient) -> None:
        """Values round-trip as bytes."""
        await cache_client.set("k", b"v", ttl=60)
        assert await cache_client.get("k") == b"v"

    @pytest.mark.asyncio
    async def test_set_applies_ttl(self, cache_client: CacheClient) -> None:
        await cache_client.set("k", b"v", ttl=60)
        ttl = await cache_client.ttl("k")
        assert 0 < ttl <= 60

    @pytest.mark.asyncio
    async def test_ttl_of_missing_key(self, cache_client: CacheClient) -> None:
        assert await cache_client.ttl("missing") == -2

    @pytest.mark.asyncio
    async def test_delete_counts_removed_keys(self, cache_client: CacheClient) -> None:
        await cache_client.set("a", b"1", ttl=60)
        await cache_client.set("b", b"2", ttl=60)
        assert await cache_client.delete("a", "b", "c") == 2
        assert await cache_client.get("a") is None

    @pytest.mark.asyncio
    async def test_delete_without_keys(self, cache_client: CacheClient) -> None:
        assert await cache_client.delete() == 0

    @pytest.mark.asyncio
    async def test_delete_pattern(self, cache_client: CacheClient) -> None:
        await cache_client.set("search:a:all::50", b"1", ttl=60)
        await cache_client.set("search:b:all::50", b"2", ttl=60)
        await cache_client.set("branches_cache", b"3", ttl=60)
        assert await cache_client.delete_pattern("search:*") == 2
        assert await cache_client.get("branches_cache") == b"3"

    @pytest.mark.asyncio
    async def test_incr_creates_counter(self, cache_client: CacheClient) -> None:
        assert await cache_client.incr("n") == 1
        assert await cache_client.incr("n") == 2

    @pytest.mark.asyncio
    async def test_health_check(self, cache_client: CacheClient) -> None:
        assert await cache_client.health_check() is True


class TestCacheClientFailures:
    """Backend errors surface as CacheUnavailableError."""

    @pytest.mark.asyncio
    async def test_get_raises_unavailable(self, broken_client: CacheClient) -> None:
        with pytest.raises(CacheUnavailableError):
            await broken_client.get("k")

    @pytest.mark.asyncio
    async def test_incr_raises_unavailable(self, broken_client: CacheClient) -> None:
        with pytest.raises(CacheUnavailableError):
            await broken_client.incr("k")

    @pytest.mark.asyncio
    async def test_delete_raises_unavailable(self, broken_client: CacheClient) -> None:
        with pytest.raises(CacheUnavailableError):
            await broken_client.delete("k")

    @pytest.mark.asyncio
    async def test_health_check_reports_false(self, broken_client: CacheClient) -> None:
        assert await broken_client.health_check() is False
