"""Repository pattern for list persistence.

The page query is shaped so one statement returns both the requested slice
and the owner's total row count:
- a window ``count(*) OVER ()`` carries the total on every returned row
- both content tables are LEFT JOINed, each only for rows of its kind
- ordering is newest-first with the insertion sequence as tie-breaker

Only when the requested page lies past the end (no rows come back) does a
separate COUNT run to recover the total.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mylist.core.errors import AlreadyExistsError
from mylist.core.model import (
    ContentKind,
    EnrichedMembership,
    Episode,
    KindCounts,
    ListMembership,
    Movie,
    MovieContent,
    ShowContent,
    TVShow,
)
from mylist.persistence.tables import ListMembershipTable, MovieTable, TVShowTable

logger = logging.getLogger(__name__)

TableT = TypeVar("TableT")


@dataclass
class MembershipSlice:
    """One page of enriched memberships plus the owner's total count."""

    items: list[EnrichedMembership]
    total: int


class BaseRepository(Generic[TableT]):
    """Base repository bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session


def movie_from_row(row: MovieTable) -> Movie:
    return Movie(
        id=row.id,
        title=row.title,
        description=row.description,
        genres=row.genres,
        release_date=row.release_date,
        director=row.director,
        actors=row.actors,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def show_from_row(row: TVShowTable) -> TVShow:
    return TVShow(
        id=row.id,
        title=row.title,
        description=row.description,
        genres=row.genres,
        episodes=[Episode.model_validate(episode) for episode in row.episodes],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def membership_from_row(row: ListMembershipTable) -> ListMembership:
    return ListMembership(
        owner_id=row.owner_id,
        content_id=row.content_id,
        content_kind=ContentKind(row.content_kind),
        added_at=row.added_at,
    )


def enrich(
    row: ListMembershipTable, movie: MovieTable | None, show: TVShowTable | None
) -> EnrichedMembership:
    """Join one membership with the content record of its kind.

    A missing or unreadable content record yields ``content=None`` for that
    row only; the rest of the page is unaffected.
    """
    kind = ContentKind(row.content_kind)
    content: MovieContent | ShowContent | None = None
    try:
        if kind is ContentKind.MOVIE:
            if movie is not None:
                content = MovieContent(payload=movie_from_row(movie))
        elif kind is ContentKind.SHOW:
            if show is not None:
                content = ShowContent(payload=show_from_row(show))
        else:  # pragma: no cover - ContentKind is closed
            raise ValueError(f"Unhandled content kind: {kind}")
    except PydanticValidationError as e:
        logger.warning(
            f"Unreadable {kind.value} record {row.content_id}, serving it without content: "
            f"{e.error_count()} invalid fields"
        )

    return EnrichedMembership(
        owner_id=row.owner_id,
        content_id=row.content_id,
        content_kind=kind,
        added_at=row.added_at,
        content=content,
    )


class ListRepository(BaseRepository[ListMembershipTable]):
    """Repository for list membership operations."""

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def get_slice(self, owner_id: str, offset: int, limit: int) -> MembershipSlice:
        """Return ``limit`` enriched memberships after ``offset``, newest first."""
        total_col = func.count().over().label("total")
        stmt = (
            select(ListMembershipTable, MovieTable, TVShowTable, total_col)
            .outerjoin(
                MovieTable,
                and_(
                    MovieTable.id == ListMembershipTable.content_id,
                    ListMembershipTable.content_kind == ContentKind.MOVIE.value,
                ),
            )
            .outerjoin(
                TVShowTable,
                and_(
                    TVShowTable.id == ListMembershipTable.content_id,
                    ListMembershipTable.content_kind == ContentKind.SHOW.value,
                ),
            )
            .where(ListMembershipTable.owner_id == owner_id)
            .order_by(ListMembershipTable.added_at.desc(), ListMembershipTable.id.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()

        if rows:
            total = int(rows[0].total)
        elif offset > 0:
            total = await self.count(owner_id)
        else:
            total = 0

        items = [enrich(row[0], row[1], row[2]) for row in rows]
        return MembershipSlice(items=items, total=total)

    async def count(self, owner_id: str) -> int:
        stmt = select(func.count()).where(ListMembershipTable.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_by_kind(self, owner_id: str) -> KindCounts:
        """Aggregate counts of the owner's memberships grouped by content kind."""
        stmt = (
            select(ListMembershipTable.content_kind, func.count())
            .where(ListMembershipTable.owner_id == owner_id)
            .group_by(ListMembershipTable.content_kind)
        )
        result = await self.session.execute(stmt)
        counts: dict[str, int] = {kind: int(count) for kind, count in result.all()}
        return KindCounts(
            movie=counts.get(ContentKind.MOVIE.value, 0),
            tvshow=counts.get(ContentKind.SHOW.value, 0),
        )

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def add(
        self, owner_id: str, content_id: str, kind: ContentKind, added_at: datetime
    ) -> ListMembership:
        """Insert a membership.

        Raises:
            AlreadyExistsError: If the (owner, content) unique constraint rejects the row
        """
        row = ListMembershipTable(
            owner_id=owner_id,
            content_id=content_id,
            content_kind=kind.value,
            added_at=added_at,
        )
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise AlreadyExistsError("This item is already in your list") from e
        return membership_from_row(row)

    async def delete(self, owner_id: str, content_id: str) -> int:
        """Delete one membership. Returns the number of rows deleted."""
        stmt = (
            delete(ListMembershipTable)
            .where(
                ListMembershipTable.owner_id == owner_id,
                ListMembershipTable.content_id == content_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def delete_all(self, owner_id: str) -> int:
        """Delete every membership of an owner. Returns the number of rows deleted."""
        stmt = (
            delete(ListMembershipTable)
            .where(ListMembershipTable.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]


class ContentRepository(BaseRepository[Any]):
    """Read access to catalog content, plus inserts used for seeding."""

    @staticmethod
    def _table_for(kind: ContentKind) -> type[MovieTable] | type[TVShowTable]:
        if kind is ContentKind.MOVIE:
            return MovieTable
        if kind is ContentKind.SHOW:
            return TVShowTable
        raise ValueError(f"Unhandled content kind: {kind}")  # pragma: no cover

    async def exists(self, content_id: str, kind: ContentKind) -> bool:
        """Check whether ``content_id`` exists in the collection for ``kind``."""
        table = self._table_for(kind)
        stmt = select(table.id).where(table.id == content_id).limit(1)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def add_movie(
        self,
        title: str,
        description: str,
        release_date: datetime,
        director: str,
        genres: list[str] | None = None,
        actors: list[str] | None = None,
    ) -> str:
        """Insert a movie. Returns its id."""
        row = MovieTable(
            title=title,
            description=description,
            genres=genres or [],
            release_date=release_date,
            director=director,
            actors=actors or [],
        )
        self.session.add(row)
        await self.session.flush()
        return row.id

    async def add_show(
        self,
        title: str,
        description: str,
        genres: list[str] | None = None,
        episodes: list[Episode] | None = None,
    ) -> str:
        """Insert a TV show. Returns its id."""
        row = TVShowTable(
            title=title,
            description=description,
            genres=genres or [],
            episodes=[e.model_dump(mode="json", by_alias=True) for e in episodes or []],
        )
        self.session.add(row)
        await self.session.flush()
        return row.id
