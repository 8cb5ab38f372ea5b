"""Cache invalidation for list pages.

Invalidating an owner:
1. Clears this instance's local cache (it has no per-owner index).
2. Deletes every shared-cache key under the owner's prefix via SCAN + DEL.
3. Broadcasts the invalidation over Redis Pub/Sub so that other instances
   clear their local caches as well.

Each step is best-effort: failures are logged and never raised, and the
bounded TTLs of both tiers cap staleness when a step is skipped.

Example:
    broadcaster = CacheInvalidationBroadcaster(redis, instance_id="a1b2c3d4")
    invalidator = ListCacheInvalidator(local, shared, broadcaster)
    broadcaster.add_handler(invalidator.handle_remote_invalidation)
    await broadcaster.start()

    result = await invalidator.invalidate_owner("user-1")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

import orjson
from redis.exceptions import RedisError

from mylist.cache.keys import CacheKeys
from mylist.core.errors import DependencyUnavailableError
from mylist.core.ids import InvalidOwnerSegment, decode_owner_segment, encode_owner_segment

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.client import PubSub

    from mylist.cache.local import LocalCache
    from mylist.cache.redis import RedisCache

logger = logging.getLogger(__name__)

# Pub/Sub channel name
INVALIDATION_CHANNEL = "mylist:cache:invalidation"


@dataclass
class InvalidationMessage:
    """Cache invalidation message."""

    owner_b64: str
    instance_id: str

    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return orjson.dumps({"owner_b64": self.owner_b64, "instance_id": self.instance_id})

    @classmethod
    def from_bytes(cls, data: bytes) -> "InvalidationMessage":
        """Deserialize from JSON bytes."""
        parsed = orjson.loads(data)
        return cls(owner_b64=parsed["owner_b64"], instance_id=parsed["instance_id"])

    @property
    def owner_id(self) -> str | None:
        try:
            return decode_owner_segment(self.owner_b64)
        except InvalidOwnerSegment:
            return None


@dataclass
class InvalidationResult:
    """Outcome of one owner invalidation."""

    local_cleared: bool = False
    shared_deleted: int | None = None  # None when the shared tier was unreachable
    broadcast: bool = False


# Handler type for invalidation callbacks
InvalidationHandler = Callable[[InvalidationMessage], Awaitable[None]]


class CacheInvalidationBroadcaster:
    """Broadcasts and receives invalidation messages via Redis Pub/Sub.

    Messages published by this instance are ignored on receipt, since the
    publisher already cleared its own local cache.
    """

    def __init__(
        self,
        client: Redis,
        instance_id: str,
        channel: str = INVALIDATION_CHANNEL,
        timeout: float = 0.5,
    ):
        self.client = client
        self.instance_id = instance_id
        self.channel = channel
        self.timeout = timeout
        self._handlers: list[InvalidationHandler] = []
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._pubsub: PubSub | None = None

    def add_handler(self, handler: InvalidationHandler) -> None:
        """Register a handler for invalidation messages."""
        self._handlers.append(handler)
        handler_name = getattr(handler, "__name__", handler.__class__.__name__)
        logger.info(f"Registered invalidation handler: {handler_name}")

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start listening for invalidation messages."""
        if self._running:
            return

        pubsub = self.client.pubsub()
        await pubsub.subscribe(self.channel)
        self._pubsub = pubsub

        self._running = True
        self._task = asyncio.create_task(self._listen_loop())
        logger.info(f"Started cache invalidation broadcaster on channel {self.channel}")

    async def stop(self) -> None:
        """Stop listening for invalidation messages."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._pubsub:
            await self._pubsub.unsubscribe(self.channel)
            await self._pubsub.aclose()
            self._pubsub = None

        logger.info("Stopped cache invalidation broadcaster")

    async def _listen_loop(self) -> None:
        """Main loop for receiving invalidation messages."""
        while self._running and self._pubsub:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )

                if message is None:
                    continue

                if message["type"] == "message":
                    await self.handle_message(message["data"])

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in invalidation listener: {e}")
                await asyncio.sleep(1)

    async def handle_message(self, data: bytes) -> None:
        """Handle an incoming invalidation message."""
        try:
            msg = InvalidationMessage.from_bytes(data)
        except (orjson.JSONDecodeError, KeyError, TypeError) as e:
            logger.error(f"Failed to parse invalidation message: {e}")
            return

        if msg.instance_id == self.instance_id:
            return

        logger.debug(f"Received invalidation for {msg.owner_b64} from {msg.instance_id}")
        for handler in self._handlers:
            try:
                await handler(msg)
            except Exception as e:
                logger.error(f"Invalidation handler failed: {e}")

    async def publish(self, owner_id: str) -> int:
        """Publish an owner invalidation to all instances.

        Returns the number of subscribers that received the message.
        """
        message = InvalidationMessage(
            owner_b64=encode_owner_segment(owner_id), instance_id=self.instance_id
        )
        count = cast(
            int,
            await asyncio.wait_for(
                self.client.publish(self.channel, message.to_bytes()), timeout=self.timeout
            ),
        )
        logger.debug(f"Published invalidation {message.owner_b64} to {count} subscribers")
        return count


class ListCacheInvalidator:
    """Removes every cached page of an owner from both cache tiers."""

    def __init__(
        self,
        local: LocalCache,
        shared: RedisCache | None,
        broadcaster: CacheInvalidationBroadcaster | None = None,
    ) -> None:
        self.local = local
        self.shared = shared
        self.broadcaster = broadcaster

    async def invalidate_owner(self, owner_id: str) -> InvalidationResult:
        """Invalidate all cached pages for ``owner_id``.

        Safe to call repeatedly and while cache tiers are degraded.
        """
        result = InvalidationResult()

        self.local.clear()
        result.local_cleared = True

        if self.shared is not None:
            try:
                result.shared_deleted = await self.shared.delete_pattern(
                    CacheKeys.owner_pattern(owner_id)
                )
                if result.shared_deleted:
                    logger.info(
                        f"Invalidated {result.shared_deleted} cache entries for owner {owner_id}"
                    )
            except DependencyUnavailableError as e:
                logger.warning(f"Shared cache invalidation abandoned for {owner_id}: {e}")

        if self.broadcaster is not None:
            try:
                await self.broadcaster.publish(owner_id)
                result.broadcast = True
            except (RedisError, OSError, asyncio.TimeoutError) as e:
                logger.warning(f"Invalidation broadcast failed for {owner_id}: {e}")

        return result

    async def handle_remote_invalidation(self, message: InvalidationMessage) -> None:
        """Clear the local cache when another instance invalidated an owner."""
        self.local.clear()
        owner = message.owner_id or message.owner_b64
        logger.debug(
            f"Cleared local cache after remote invalidation of {owner} by {message.instance_id}"
        )
