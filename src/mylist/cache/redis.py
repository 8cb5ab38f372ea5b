"""Redis cache implementation for list pages.

Provides async Redis operations for the shared cache tier.
Uses redis-py async client for connection pooling.

Every call is bounded by a timeout. Connection errors, protocol errors and
timeouts surface as ``DependencyUnavailableError(component="shared_cache")``
so callers can degrade instead of failing the request.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar, cast

import orjson
import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from mylist.config import settings
from mylist.core.errors import DependencyUnavailableError
from mylist.core.model import CachedPage

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Module-level connection pool
_redis_client: Redis | None = None

SHARED_CACHE = "shared_cache"


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,  # Pages are stored as orjson bytes
            socket_timeout=settings.redis_timeout,
            socket_connect_timeout=settings.redis_timeout,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class RedisCache:
    """Shared cache tier for list pages.

    Pages are stored as orjson bytes of their wire (camelCase) form with
    SETEX, so every instance and format version reads the same layout.
    """

    def __init__(
        self,
        client: Redis,
        ttl: int = 300,
        timeout: float = 0.5,
        scan_count: int = 100,
        batch_size: int = 100,
    ):
        self.client = client
        self.ttl = ttl
        self.timeout = timeout
        self.scan_count = scan_count
        self.batch_size = batch_size

    async def _call(self, operation: str, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(factory(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise DependencyUnavailableError(
                SHARED_CACHE, f"Redis {operation} timed out after {self.timeout}s"
            ) from e
        except (RedisError, OSError) as e:
            raise DependencyUnavailableError(SHARED_CACHE, f"Redis {operation} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Page caching
    # -------------------------------------------------------------------------

    async def get_page(self, key: str) -> CachedPage | None:
        """Get a cached page, or None on miss.

        An entry that no longer parses as a page is treated as a miss.
        """
        raw = await self._call("GET", lambda: self.client.get(key))
        if raw is None:
            return None
        try:
            return CachedPage.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, PydanticValidationError):
            logger.warning(f"Discarding unreadable cached page {key}")
            return None

    async def set_page(self, key: str, page: CachedPage, ttl: int | None = None) -> None:
        """Cache a page with TTL."""
        payload = orjson.dumps(page.model_dump(mode="json", by_alias=True))
        await self._call("SETEX", lambda: self.client.setex(key, ttl or self.ttl, payload))

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching ``pattern``.

        Walks the keyspace with SCAN so no single call blocks Redis, and
        deletes in batches of at most ``batch_size`` keys.
        Returns the number of keys deleted.
        """
        deleted = 0
        pending: list[bytes | str] = []
        cursor: int = 0

        while True:
            cursor, found = await self._call(
                "SCAN",
                lambda: self.client.scan(cursor=cursor, match=pattern, count=self.scan_count),
            )
            pending.extend(found)

            while len(pending) >= self.batch_size:
                batch, pending = pending[: self.batch_size], pending[self.batch_size :]
                deleted += await self._delete_batch(batch)

            if int(cursor) == 0:
                break

        if pending:
            deleted += await self._delete_batch(pending)

        return deleted

    async def _delete_batch(self, keys: list[bytes | str]) -> int:
        return cast(int, await self._call("DEL", lambda: self.client.delete(*keys)))

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self._call("PING", lambda: cast(Awaitable[bool], self.client.ping()))
            return True
        except DependencyUnavailableError:
            return False
