"""Add/remove operations on owners' lists.

Each successful mutation invalidates the owner's cached pages before it
returns, so a read issued after the mutation's response never sees a page
cached before it. Invalidation failures are logged, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from mylist.core.errors import NotFoundError
from mylist.core.model import ContentKind, ListMembership
from mylist.lists.cache_engine import ListCacheEngine
from mylist.lists.store import StoreGateway
from mylist.persistence.repositories import ContentRepository, ListRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class ListMutationEngine:
    """Performs list mutations and triggers cache invalidation."""

    def __init__(
        self,
        store: StoreGateway,
        cache_engine: ListCacheEngine,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.cache_engine = cache_engine
        self.clock = clock

    async def add_item(self, owner_id: str, content_id: str, kind: ContentKind) -> ListMembership:
        """Add a content item to the owner's list.

        Raises:
            NotFoundError: If no content with ``content_id`` exists for ``kind``
            AlreadyExistsError: If the owner already saved this content
        """
        added_at = self.clock()

        async def _add(session: AsyncSession) -> ListMembership:
            if not await ContentRepository(session).exists(content_id, kind):
                raise NotFoundError(f"{kind.value} with id {content_id} not found")
            return await ListRepository(session).add(owner_id, content_id, kind, added_at)

        membership = await self.store.run("add_item", _add)
        await self.cache_engine.invalidate(owner_id)
        logger.info(f"Added {kind.value} {content_id} to list of {owner_id}")
        return membership

    async def remove_item(self, owner_id: str, content_id: str) -> None:
        """Remove a content item from the owner's list.

        Raises:
            NotFoundError: If the item is not in the owner's list
        """
        deleted = await self.store.run(
            "remove_item",
            lambda session: ListRepository(session).delete(owner_id, content_id),
        )
        if deleted == 0:
            raise NotFoundError("Item not found in your list")

        await self.cache_engine.invalidate(owner_id)
        logger.info(f"Removed item {content_id} from list of {owner_id}")

    async def clear_items(self, owner_id: str) -> int:
        """Remove every item from the owner's list. Returns the number removed."""
        deleted = await self.store.run(
            "clear_items",
            lambda session: ListRepository(session).delete_all(owner_id),
        )
        await self.cache_engine.invalidate(owner_id)
        logger.info(f"Cleared {deleted} items from list of {owner_id}")
        return deleted
