"""Cache layer for the saved-items list.

Two tiers sit in front of the durable store:
- LocalCache: process-local, bounded, short TTL, cleared wholesale on mutation
- RedisCache: shared across instances, longer TTL, invalidated per owner
  with SCAN + batched DEL
- Pub/Sub broadcast clears local caches on the other instances
"""

from mylist.cache.invalidation import (
    CacheInvalidationBroadcaster,
    InvalidationMessage,
    InvalidationResult,
    ListCacheInvalidator,
)
from mylist.cache.keys import CacheKeys
from mylist.cache.local import LocalCache
from mylist.cache.redis import RedisCache, close_redis, get_redis

__all__ = [
    # Core cache
    "CacheKeys",
    "LocalCache",
    "RedisCache",
    "get_redis",
    "close_redis",
    # Invalidation
    "CacheInvalidationBroadcaster",
    "InvalidationMessage",
    "InvalidationResult",
    "ListCacheInvalidator",
]
