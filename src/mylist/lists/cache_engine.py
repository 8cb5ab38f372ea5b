"""Tiered read path for owners' lists.

Reads go Local Cache -> Shared Cache -> Durable Store. A hit on a slower
tier populates every faster tier:
- local hit: returned immediately
- shared hit: copied into the local cache with the short local TTL
- miss on both: the enrichment query runs, then both tiers are populated

Shared-cache failures never fail a read. They are logged and the lookup
falls through to the next tier. Store failures propagate.
"""

from __future__ import annotations

import logging

from mylist.cache.invalidation import InvalidationResult, ListCacheInvalidator
from mylist.cache.keys import CacheKeys
from mylist.cache.local import LocalCache
from mylist.cache.redis import RedisCache
from mylist.config import settings
from mylist.core.errors import DependencyUnavailableError
from mylist.core.model import CachedPage, ListStats, clamp_pagination
from mylist.lists.store import StoreGateway
from mylist.persistence.repositories import ListRepository

logger = logging.getLogger(__name__)


class ListCacheEngine:
    """Serves paginated, content-enriched list pages through two cache tiers."""

    def __init__(
        self,
        store: StoreGateway,
        local: LocalCache,
        shared: RedisCache | None,
        invalidator: ListCacheInvalidator | None = None,
        *,
        local_ttl: int = settings.local_cache_ttl,
        shared_ttl: int = settings.cache_ttl,
        max_page_size: int = settings.max_page_size,
        cache_version: str = settings.cache_version,
    ) -> None:
        self.store = store
        self.local = local
        self.shared = shared
        self.invalidator = invalidator or ListCacheInvalidator(local, shared)
        self.local_ttl = local_ttl
        self.shared_ttl = shared_ttl
        self.max_page_size = max_page_size
        self.cache_version = cache_version

    def page_key(self, owner_id: str, page: int, page_size: int) -> str:
        return CacheKeys.page(owner_id, page, page_size, version=self.cache_version)

    async def get_page(self, owner_id: str, page: int, page_size: int) -> CachedPage:
        """Return one page of ``owner_id``'s list.

        ``page`` and ``page_size`` are clamped to ``[1, ..]`` and
        ``[1, max_page_size]`` before the cache key is computed.
        """
        page, page_size = clamp_pagination(page, page_size, self.max_page_size)
        key = self.page_key(owner_id, page, page_size)

        cached = self.local.get(key)
        if cached is not None:
            logger.debug(f"Local cache HIT {key}")
            return cached

        shared_page = await self._shared_get(key)
        if shared_page is not None:
            logger.debug(f"Shared cache HIT {key}")
            self.local.set(key, shared_page, self.local_ttl)
            return shared_page

        logger.debug(f"Cache MISS {key}")
        result = await self._load_page(owner_id, page, page_size)

        self.local.set(key, result, self.local_ttl)
        await self._shared_set(key, result)
        return result

    async def _load_page(self, owner_id: str, page: int, page_size: int) -> CachedPage:
        offset = (page - 1) * page_size
        membership_slice = await self.store.run(
            "get_page",
            lambda session: ListRepository(session).get_slice(owner_id, offset, page_size),
        )
        return CachedPage.build(
            items=membership_slice.items,
            total=membership_slice.total,
            page=page,
            page_size=page_size,
        )

    async def _shared_get(self, key: str) -> CachedPage | None:
        if self.shared is None:
            return None
        try:
            return await self.shared.get_page(key)
        except DependencyUnavailableError as e:
            logger.warning(f"Shared cache read failed, falling back to store: {e}")
            return None

    async def _shared_set(self, key: str, page: CachedPage) -> None:
        if self.shared is None:
            return
        try:
            await self.shared.set_page(key, page, self.shared_ttl)
        except DependencyUnavailableError as e:
            logger.warning(f"Shared cache write failed: {e}")

    async def invalidate(self, owner_id: str) -> InvalidationResult:
        """Drop every cached page of ``owner_id`` from both tiers. Never raises."""
        return await self.invalidator.invalidate_owner(owner_id)

    async def get_stats(self, owner_id: str) -> ListStats:
        """Count the owner's memberships by kind. Not cached."""
        by_kind = await self.store.run(
            "get_stats",
            lambda session: ListRepository(session).count_by_kind(owner_id),
        )
        return ListStats(total=by_kind.movie + by_kind.tvshow, by_kind=by_kind)
