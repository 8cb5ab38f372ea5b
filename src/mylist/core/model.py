"""Domain models for the saved-items list.

All models use Pydantic v2. Field names are snake_case in Python and
camelCase on the wire (``populate_by_name`` accepts both).
Enriched content is a discriminated union on ``kind`` so the enrichment
join handles movies and shows exhaustively instead of inspecting shapes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from math import ceil
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ListModel(BaseModel):
    """Base model for all list domain values."""

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "validate_default": True,
    }


class ContentKind(str, Enum):
    """Which content collection a membership points into."""

    MOVIE = "movie"
    SHOW = "tvshow"


# -----------------------------------------------------------------------------
# Catalog content (read-only reference data)
# -----------------------------------------------------------------------------


class Movie(ListModel):
    id: str
    title: str
    description: str
    # Unvalidated catalog vocabulary
    genres: list[str] = Field(default_factory=list)
    release_date: datetime = Field(..., alias="releaseDate")
    director: str
    actors: list[str] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class Episode(ListModel):
    episode_number: int = Field(..., alias="episodeNumber")
    season_number: int = Field(..., alias="seasonNumber")
    release_date: datetime = Field(..., alias="releaseDate")
    director: str
    actors: list[str] = Field(default_factory=list)


class TVShow(ListModel):
    id: str
    title: str
    description: str
    genres: list[str] = Field(default_factory=list)
    episodes: list[Episode] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class MovieContent(ListModel):
    kind: Literal["movie"] = "movie"
    payload: Movie


class ShowContent(ListModel):
    kind: Literal["tvshow"] = "tvshow"
    payload: TVShow


Content = Annotated[MovieContent | ShowContent, Field(discriminator="kind")]


# -----------------------------------------------------------------------------
# List membership and derived views
# -----------------------------------------------------------------------------


class ListMembership(ListModel):
    """A single saved item linking an owner to a content item."""

    owner_id: str = Field(..., alias="userId")
    content_id: str = Field(..., alias="contentId")
    content_kind: ContentKind = Field(..., alias="contentType")
    added_at: datetime = Field(..., alias="addedAt")


class EnrichedMembership(ListMembership):
    """Membership joined with its content record at read time.

    ``content`` is None when the referenced record no longer exists.
    """

    content: Content | None = None


class CachedPage(ListModel):
    """One page of an owner's list, as served from any cache tier."""

    model_config = {**ListModel.model_config, "frozen": True}

    items: list[EnrichedMembership]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")

    @classmethod
    def build(
        cls, items: list[EnrichedMembership], total: int, page: int, page_size: int
    ) -> "CachedPage":
        return cls(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        )


class KindCounts(ListModel):
    movie: int = 0
    tvshow: int = 0


class ListStats(ListModel):
    total: int
    by_kind: KindCounts = Field(default_factory=KindCounts, alias="byType")


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` rows at ``page_size`` per page."""
    if total <= 0:
        return 0
    return ceil(total / page_size)


# Largest OFFSET a BIGINT bind parameter (and an orjson integer) can carry
MAX_ROW_OFFSET = 2**63 - 1


def clamp_pagination(page: int, page_size: int, max_page_size: int) -> tuple[int, int]:
    """Clamp requested page and page size into the accepted range.

    ``page`` is capped so that ``page * page_size`` never exceeds
    ``MAX_ROW_OFFSET``; such a page lies past the end of any list.
    """
    page_size = min(max(page_size, 1), max_page_size)
    page = min(max(page, 1), MAX_ROW_OFFSET // page_size)
    return page, page_size
