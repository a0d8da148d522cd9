"""Read-through cache for content queries.

Cache-aside over CacheClient:
- Hits are decoded and returned without touching the database
- Misses (including an unreachable backend) fall through to the loader,
  whose result is written back with the caller's TTL
- Writes invalidate by deleting whole entries; nothing is patched in place

Every backend failure is logged and swallowed here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import orjson

from learnsphere.cache.redis import CacheClient, CacheUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContentCache:
    """JSON-valued cache for list and detail queries."""

    def __init__(self, cache: CacheClient):
        self.cache = cache

    async def get(self, key: str) -> Any | None:
        """Return the decoded entry, or None on miss or backend failure."""
        try:
            raw = await self.cache.get(key)
        except CacheUnavailableError as e:
            logger.warning(f"Cache read skipped for {key}: {e}")
            return None

        if raw is None:
            logger.debug(f"Cache miss: {key}")
            return None

        try:
            value = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning(f"Discarding undecodable cache entry: {key}")
            return None

        logger.debug(f"Cache hit: {key}")
        return value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Write a full entry. Returns False if the backend refused it."""
        try:
            await self.cache.set(key, orjson.dumps(value), ttl)
            return True
        except CacheUnavailableError as e:
            logger.warning(f"Cache write skipped for {key}: {e}")
            return False

    async def read_through(self, key: str, loader: Callable[[], Awaitable[T]], ttl: int) -> T:
        """Serve from cache, or load and populate.

        The loader is the database query; its exceptions (e.g. not found)
        propagate and nothing is cached for them.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        value = await loader()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def invalidate(self, *keys: str) -> int:
        """Delete entries. Returns the number removed (0 on backend failure)."""
        try:
            deleted = await self.cache.delete(*keys)
        except CacheUnavailableError as e:
            logger.warning(f"Cache invalidation failed for {', '.join(keys)}: {e}")
            return 0
        logger.debug(f"Invalidated {deleted} cache entries: {', '.join(keys)}")
        return deleted

    async def invalidate_pattern(self, pattern: str) -> int:
        """Delete every entry matching a glob pattern."""
        try:
            return await self.cache.delete_pattern(pattern)
        except CacheUnavailableError as e:
            logger.warning(f"Cache invalidation failed for pattern {pattern}: {e}")
            return 0
