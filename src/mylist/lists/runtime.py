"""Runtime wiring for the list engines.

Builds one LocalCache per process and shares it between the read path,
the invalidator and the Pub/Sub listener.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mylist.cache.invalidation import CacheInvalidationBroadcaster, ListCacheInvalidator
from mylist.cache.local import LocalCache
from mylist.cache.redis import RedisCache, get_redis
from mylist.config import Settings, settings
from mylist.lists.cache_engine import ListCacheEngine
from mylist.lists.mutation_engine import ListMutationEngine
from mylist.lists.store import StoreGateway
from mylist.persistence.db import get_session_factory

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


@dataclass
class ListRuntime:
    """Engines and cache tiers of one running instance."""

    store: StoreGateway
    local: LocalCache
    shared: RedisCache | None
    broadcaster: CacheInvalidationBroadcaster | None
    cache_engine: ListCacheEngine
    mutation_engine: ListMutationEngine


def build_runtime(
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: Redis | None,
    config: Settings = settings,
) -> ListRuntime:
    """Assemble engines from explicit collaborators.

    Passing ``redis_client=None`` runs with the local tier only.
    """
    store = StoreGateway(session_factory, timeout=config.store_timeout)
    local = LocalCache(maxsize=config.local_cache_size, default_ttl=config.local_cache_ttl)

    shared: RedisCache | None = None
    broadcaster: CacheInvalidationBroadcaster | None = None
    if redis_client is not None:
        shared = RedisCache(
            redis_client,
            ttl=config.cache_ttl,
            timeout=config.redis_timeout,
            scan_count=config.invalidation_scan_count,
            batch_size=config.invalidation_batch_size,
        )
        if config.enable_invalidation_broadcast:
            broadcaster = CacheInvalidationBroadcaster(
                redis_client, instance_id=config.instance_id, timeout=config.redis_timeout
            )

    invalidator = ListCacheInvalidator(local, shared, broadcaster)
    if broadcaster is not None:
        broadcaster.add_handler(invalidator.handle_remote_invalidation)

    cache_engine = ListCacheEngine(
        store,
        local,
        shared,
        invalidator,
        local_ttl=config.local_cache_ttl,
        shared_ttl=config.cache_ttl,
        max_page_size=config.max_page_size,
        cache_version=config.cache_version,
    )
    mutation_engine = ListMutationEngine(store, cache_engine)

    return ListRuntime(
        store=store,
        local=local,
        shared=shared,
        broadcaster=broadcaster,
        cache_engine=cache_engine,
        mutation_engine=mutation_engine,
    )


_runtime: ListRuntime | None = None


async def get_runtime() -> ListRuntime:
    """Get or create the process-wide runtime from settings."""
    global _runtime
    if _runtime is None:
        _runtime = build_runtime(get_session_factory(), await get_redis())
    return _runtime


async def start_runtime() -> ListRuntime:
    """Create the runtime and start listening for remote invalidations."""
    runtime = await get_runtime()
    if runtime.broadcaster is not None:
        try:
            await runtime.broadcaster.start()
        except (RedisError, OSError) as e:
            logger.warning(f"Cache invalidation broadcaster not started: {e}")
    return runtime


async def stop_runtime() -> None:
    """Stop background listeners and drop the runtime."""
    global _runtime
    if _runtime is None:
        return
    if _runtime.broadcaster is not None:
        await _runtime.broadcaster.stop()
    _runtime = None
