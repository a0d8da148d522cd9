"""Cache layer for LearnSphere.

Redis-backed, cache-aside:
- CacheClient: thin key/value client with TTL primitives
- ContentCache: read-through JSON cache with explicit invalidation
- invalidation_keys: which keys each write operation must delete
"""

from learnsphere.cache.content import ContentCache
from learnsphere.cache.invalidation import WriteOperation, invalidation_keys
from learnsphere.cache.keys import CacheKeys, normalize_identity
from learnsphere.cache.redis import CacheClient, CacheUnavailableError, close_redis, get_redis

__all__ = [
    "CacheClient",
    "CacheKeys",
    "CacheUnavailableError",
    "ContentCache",
    "WriteOperation",
    "close_redis",
    "get_redis",
    "invalidation_keys",
    "normalize_identity",
]
