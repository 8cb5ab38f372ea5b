"""Global pytest configuration and fixtures.

Provides:
- A file-backed aiosqlite engine per test, with tables created
- An in-memory asyncio Redis double (GET/SETEX/DEL/SCAN/PUBLISH/Pub/Sub)
- Runtime builders wiring the list engines to both
"""

from __future__ import annotations

import asyncio
import fnmatch
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mylist.config import Settings
from mylist.core.model import ContentKind
from mylist.lists.runtime import ListRuntime, build_runtime
from mylist.persistence.db import init_db, make_session_factory, session_context
from mylist.persistence.repositories import ContentRepository, ListRepository


class FakePubSub:
    """Subscriber half of the Redis double."""

    def __init__(self, server: FakeRedis):
        self.server = server
        self.channels: set[str] = set()
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def subscribe(self, *channels: str) -> None:
        for channel in channels:
            self.channels.add(channel)
            self.server.subscribers.setdefault(channel, []).append(self)

    async def unsubscribe(self, *channels: str) -> None:
        for channel in channels or tuple(self.channels):
            self.channels.discard(channel)
            subscribers = self.server.subscribers.get(channel, [])
            if self in subscribers:
                subscribers.remove(self)

    async def get_message(
        self, ignore_subscribe_messages: bool = False, timeout: float = 0.0
    ) -> dict[str, Any] | None:
        try:
            return await asyncio.wait_for(self.queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    async def aclose(self) -> None:
        await self.unsubscribe()


class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis`` with bytes responses.

    Expiry follows ``now``, which tests can move forward with ``advance``.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expires: dict[str, datetime] = {}
        self.subscribers: dict[str, list[FakePubSub]] = {}
        self.published: list[tuple[str, bytes]] = []
        self.delete_calls: list[int] = []
        self.scan_calls = 0
        self._cursors: dict[int, str] = {}
        self._next_cursor = 0
        self.now = datetime.now(UTC)

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def _alive(self, key: str) -> bool:
        expires = self.expires.get(key)
        if expires is not None and expires <= self.now:
            self.data.pop(key, None)
            self.expires.pop(key, None)
        return key in self.data

    async def get(self, key: str) -> bytes | None:
        return self.data.get(key) if self._alive(key) else None

    async def setex(self, key: str, ttl: int, value: bytes | str) -> bool:
        self.data[key] = value.encode() if isinstance(value, str) else value
        self.expires[key] = self.now + timedelta(seconds=ttl)
        return True

    async def set(self, key: str, value: bytes | str) -> bool:
        self.data[key] = value.encode() if isinstance(value, str) else value
        self.expires.pop(key, None)
        return True

    async def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        expires = self.expires.get(key)
        return -1 if expires is None else int((expires - self.now).total_seconds())

    async def delete(self, *keys: bytes | str) -> int:
        self.delete_calls.append(len(keys))
        deleted = 0
        for key in keys:
            name = key.decode() if isinstance(key, bytes) else key
            if self._alive(name):
                del self.data[name]
                self.expires.pop(name, None)
                deleted += 1
        return deleted

    async def scan(
        self, cursor: int = 0, match: str | None = None, count: int | None = None
    ) -> tuple[int, list[bytes]]:
        """Resumable scan; keys deleted between calls never shift later ones."""
        self.scan_calls += 1
        after = self._cursors.pop(cursor, None) if cursor else None
        names = sorted(k for k in list(self.data) if self._alive(k))
        if after is not None:
            names = [k for k in names if k > after]
        window = names[: count or 10]
        found = [k.encode() for k in window if match is None or fnmatch.fnmatchcase(k, match)]
        if len(names) <= len(window):
            return 0, found
        self._next_cursor += 1
        self._cursors[self._next_cursor] = window[-1]
        return self._next_cursor, found

    async def ping(self) -> bool:
        return True

    async def publish(self, channel: str, message: bytes) -> int:
        self.published.append((channel, message))
        subscribers = self.subscribers.get(channel, [])
        for subscriber in subscribers:
            subscriber.queue.put_nowait({"type": "message", "channel": channel, "data": message})
        return len(subscribers)

    def pubsub(self) -> FakePubSub:
        return FakePubSub(self)

    async def aclose(self) -> None:
        return None


def _enable_serialized_transactions(engine: AsyncEngine) -> None:
    """Make pysqlite start real write transactions so concurrent inserts serialize."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        instance_id="test-instance",
        database_url="sqlite+aiosqlite://",
        cache_ttl=300,
        local_cache_ttl=30,
        local_cache_size=50,
        max_page_size=100,
        store_timeout=5.0,
        redis_timeout=0.5,
    )


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'mylist.db'}",
        connect_args={"timeout": 10},
    )
    _enable_serialized_transactions(db_engine)
    await init_db(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def runtime(
    session_factory: async_sessionmaker[AsyncSession],
    fake_redis: FakeRedis,
    test_settings: Settings,
) -> ListRuntime:
    return build_runtime(session_factory, fake_redis, test_settings)  # type: ignore[arg-type]


class Catalog:
    """Test helper inserting catalog content and memberships directly."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]):
        self.factory = factory

    async def add_movie(self, title: str = "The Matrix", year: int = 1999) -> str:
        async with session_context(self.factory) as session:
            return await ContentRepository(session).add_movie(
                title=title,
                description=f"{title} description",
                release_date=datetime(year, 1, 1, tzinfo=UTC),
                director="Director",
                genres=["Action"],
                actors=["Actor"],
            )

    async def add_show(self, title: str = "The Office") -> str:
        async with session_context(self.factory) as session:
            return await ContentRepository(session).add_show(
                title=title, description=f"{title} description", genres=["Comedy"]
            )

    async def add_membership(
        self,
        owner_id: str,
        content_id: str,
        kind: ContentKind = ContentKind.MOVIE,
        added_at: datetime | None = None,
    ) -> None:
        async with session_context(self.factory) as session:
            await ListRepository(session).add(
                owner_id, content_id, kind, added_at or datetime.now(UTC)
            )


@pytest.fixture
def catalog(session_factory: async_sessionmaker[AsyncSession]) -> Catalog:
    return Catalog(session_factory)
