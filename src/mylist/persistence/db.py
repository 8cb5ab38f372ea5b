"""Async engine and sessions for the list store.

Production runs on PostgreSQL through asyncpg. Any other SQLAlchemy async
URL (``sqlite+aiosqlite`` in tests) gets a plain engine without pool or
driver timeout options.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mylist.config import Settings, settings
from mylist.persistence.tables import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(config: Settings = settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` derived from settings."""
    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": config.env == "dev" and config.log_level.upper() == "DEBUG",
    }
    if config.database_url.startswith("postgresql+asyncpg"):
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
            pool_recycle=config.db_pool_recycle,
            # asyncpg: connect timeout and per-statement timeout
            connect_args={
                "timeout": config.store_timeout,
                "command_timeout": config.store_timeout,
            },
        )
    return options


def get_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(settings.database_url, **engine_options())
    return _engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def session_context(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """One session and one transaction.

    Commits when the block exits normally and rolls back when it raises.

    Usage:
        async with session_context() as session:
            await ListRepository(session).add(...)
    """
    async with (factory or get_session_factory())() as session, session.begin():
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def health_check(factory: async_sessionmaker[AsyncSession] | None = None) -> bool:
    """True when the store answers a trivial query."""
    try:
        async with session_context(factory) as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        return False
    return True
