"""SQLAlchemy ORM models for list persistence.

- movies / tv_shows: read-only catalog content owned by the catalog service
- list_memberships: one row per (owner, content) pair

JSON columns become JSONB on PostgreSQL and plain JSON elsewhere.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JsonDocument = JSON().with_variant(JSONB(), "postgresql")

# SQLite only auto-increments INTEGER PRIMARY KEY columns
SequenceId = BigInteger().with_variant(Integer(), "sqlite")

OWNER_ID_MAX_LENGTH = 255


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def new_content_id() -> str:
    return uuid4().hex


class MovieTable(Base):
    """Movie catalog table."""

    __tablename__ = "movies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_content_id)
    title: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    genres: Mapped[list[str]] = mapped_column(JsonDocument, nullable=False, default=list)
    release_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    director: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    actors: Mapped[list[str]] = mapped_column(JsonDocument, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class TVShowTable(Base):
    """TV show catalog table.

    Episodes are stored inline as a JSON array.
    """

    __tablename__ = "tv_shows"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_content_id)
    title: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    genres: Mapped[list[str]] = mapped_column(JsonDocument, nullable=False, default=list)
    episodes: Mapped[list[dict[str, Any]]] = mapped_column(
        JsonDocument, nullable=False, default=list
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ListMembershipTable(Base):
    """Saved-items table.

    The unique constraint on (owner_id, content_id) is the only guard
    against duplicate adds; inserts rely on it atomically.
    """

    __tablename__ = "list_memberships"

    # Insertion sequence, used as the stable tie-breaker for equal added_at
    id: Mapped[int] = mapped_column(SequenceId, primary_key=True, autoincrement=True)

    owner_id: Mapped[str] = mapped_column(String(OWNER_ID_MAX_LENGTH), nullable=False)
    content_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content_kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "content_id", name="uq_list_owner_content"),
        # Serves the owner filter + newest-first ordering of the page query
        Index("idx_list_owner_added", "owner_id", "added_at"),
    )
