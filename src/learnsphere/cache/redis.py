"""Redis cache client for LearnSphere.

Wraps the redis-py asyncio client with the handful of primitives the rest
of the server needs. Backend failures surface as a single
CacheUnavailableError so callers can fail open without knowing about
redis exception types.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from learnsphere.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Module-level connection pool
_redis_client: Redis | None = None


class CacheUnavailableError(Exception):
    """Raised when the cache backend cannot serve a request."""


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management. Creating
    the client does not connect; the first command does.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            encoding="utf-8",
            decode_responses=False,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class CacheClient:
    """Key/value operations with TTL semantics."""

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> bytes | None:
        try:
            return cast(bytes | None, await self.client.get(key))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"GET {key} failed: {e}") from e

    async def set(self, key: str, value: bytes | str, ttl: int) -> None:
        """SET key value EX ttl."""
        try:
            await self.client.set(key, value, ex=ttl)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"SET {key} failed: {e}") from e

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        if not keys:
            return 0
        try:
            return cast(int, await self.client.delete(*keys))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"DEL {' '.join(keys)} failed: {e}") from e

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern.

        Uses SCAN to avoid blocking on large keyspaces.
        """
        deleted = 0
        try:
            async for key in self.client.scan_iter(match=pattern):
                deleted += cast(int, await self.client.delete(key))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"pattern delete {pattern} failed: {e}") from e
        return deleted

    async def incr(self, key: str) -> int:
        """Atomically increment a counter, creating it at 1."""
        try:
            return cast(int, await self.client.incr(key))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"INCR {key} failed: {e}") from e

    async def expire(self, key: str, seconds: int) -> bool:
        try:
            return bool(await self.client.expire(key, seconds))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"EXPIRE {key} failed: {e}") from e

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -2 if missing, -1 if no expiry."""
        try:
            return cast(int, await self.client.ttl(key))
        except (RedisError, OSError) as e:
            raise CacheUnavailableError(f"TTL {key} failed: {e}") from e

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except Exception:
            return False
