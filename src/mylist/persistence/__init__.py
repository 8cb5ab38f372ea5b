"""Persistence layer: async SQLAlchemy engine, tables and repositories."""

from mylist.persistence.db import (
    close_db,
    get_engine,
    get_session_factory,
    health_check,
    init_db,
    session_context,
)
from mylist.persistence.repositories import ContentRepository, ListRepository

__all__ = [
    "ContentRepository",
    "ListRepository",
    "close_db",
    "get_engine",
    "get_session_factory",
    "health_check",
    "init_db",
    "session_context",
]
