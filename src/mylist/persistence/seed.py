"""Sample catalog and list entries for local development.

``seed_database`` wipes the catalog and list tables, then inserts a small
catalog of movies and TV shows plus a few saved items for sample owners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mylist.core.model import ContentKind, Episode
from mylist.persistence.db import session_context
from mylist.persistence.repositories import ContentRepository, ListRepository
from mylist.persistence.tables import ListMembershipTable, MovieTable, TVShowTable

logger = logging.getLogger(__name__)

SAMPLE_OWNERS = ["john_doe", "jane_smith", "test_user"]


def _date(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


MOVIES = [
    {
        "title": "The Matrix",
        "description": "A computer programmer discovers that reality is a simulation",
        "genres": ["SciFi", "Action"],
        "release_date": _date("1999-03-31"),
        "director": "Lana Wachowski, Lilly Wachowski",
        "actors": ["Keanu Reeves", "Laurence Fishburne", "Carrie-Anne Moss"],
    },
    {
        "title": "Inception",
        "description": (
            "A skilled thief who steals corporate secrets through dream-sharing technology"
        ),
        "genres": ["SciFi", "Action", "Drama"],
        "release_date": _date("2010-07-16"),
        "director": "Christopher Nolan",
        "actors": ["Leonardo DiCaprio", "Marion Cotillard", "Ellen Page"],
    },
    {
        "title": "Titanic",
        "description": "An epic romance and disaster film about the sinking of the RMS Titanic",
        "genres": ["Romance", "Drama"],
        "release_date": _date("1997-12-19"),
        "director": "James Cameron",
        "actors": ["Leonardo DiCaprio", "Kate Winslet", "Billy Zane"],
    },
    {
        "title": "The Shining",
        "description": (
            "A family isolated in a snowbound hotel confronts supernatural forces and each other"
        ),
        "genres": ["Horror", "Drama"],
        "release_date": _date("1980-05-23"),
        "director": "Stanley Kubrick",
        "actors": ["Jack Nicholson", "Shelley Duvall", "Danny Lloyd"],
    },
    {
        "title": "Forrest Gump",
        "description": "The life story of a man with a low IQ but a good heart",
        "genres": ["Comedy", "Drama"],
        "release_date": _date("1994-07-06"),
        "director": "Robert Zemeckis",
        "actors": ["Tom Hanks", "Gary Sinise", "Sally Field"],
    },
    {
        "title": "Interstellar",
        "description": "A team of explorers travel through a wormhole in space to save humanity",
        "genres": ["SciFi", "Drama", "Action"],
        "release_date": _date("2014-11-07"),
        "director": "Christopher Nolan",
        "actors": ["Matthew McConaughey", "Anne Hathaway", "Jessica Chastain"],
    },
    {
        "title": "The Dark Knight",
        "description": "Batman faces a new nemesis: the Joker, a criminal mastermind",
        "genres": ["Action", "Drama"],
        "release_date": _date("2008-07-18"),
        "director": "Christopher Nolan",
        "actors": ["Christian Bale", "Heath Ledger", "Aaron Eckhart"],
    },
    {
        "title": "Pulp Fiction",
        "description": (
            "The lives of two mob hitmen, a boxer, a gangster's wife, "
            "and a pair of diner bandits intertwine"
        ),
        "genres": ["Drama", "Action"],
        "release_date": _date("1994-10-14"),
        "director": "Quentin Tarantino",
        "actors": ["John Travolta", "Samuel L. Jackson", "Uma Thurman"],
    },
]


def _episode(season: int, number: int, released: str, director: str, actors: list[str]) -> Episode:
    return Episode(
        season_number=season,
        episode_number=number,
        release_date=_date(released),
        director=director,
        actors=actors,
    )


SHOWS = [
    {
        "title": "Breaking Bad",
        "description": "A high school chemistry teacher turned meth kingpin",
        "genres": ["Drama", "Action"],
        "episodes": [
            _episode(1, 1, "2008-01-20", "Vince Gilligan", ["Bryan Cranston", "Aaron Paul"]),
            _episode(1, 2, "2008-01-27", "Vince Gilligan", ["Bryan Cranston", "Aaron Paul"]),
        ],
    },
    {
        "title": "Game of Thrones",
        "description": "Noble families vie for control of the Seven Kingdoms",
        "genres": ["Fantasy", "Drama", "Action"],
        "episodes": [
            _episode(
                1, 1, "2011-04-17", "Tim Van Patten",
                ["Emilia Clarke", "Kit Harington", "Lena Headey"],
            ),
            _episode(
                1, 2, "2011-04-24", "Tim Van Patten",
                ["Emilia Clarke", "Kit Harington", "Lena Headey"],
            ),
        ],
    },
    {
        "title": "Stranger Things",
        "description": "When a young boy disappears, friends discover weird clues and forces",
        "genres": ["SciFi", "Drama", "Horror"],
        "episodes": [
            _episode(
                1, 1, "2016-07-15", "The Duffer Brothers",
                ["Winona Ryder", "David Harbour", "Finn Wolfhard"],
            ),
        ],
    },
    {
        "title": "The Office",
        "description": "A mockumentary about everyday office workers",
        "genres": ["Comedy"],
        "episodes": [
            _episode(
                1, 1, "2005-03-24", "Greg Daniels",
                ["Steve Carell", "Rainn Wilson", "John Krasinski"],
            ),
        ],
    },
]


@dataclass
class SeedReport:
    """Ids created by a seeding run, keyed by title."""

    movies: dict[str, str] = field(default_factory=dict)
    shows: dict[str, str] = field(default_factory=dict)
    memberships: int = 0
    owners: list[str] = field(default_factory=lambda: list(SAMPLE_OWNERS))


async def _clear(session: AsyncSession) -> None:
    for table in (ListMembershipTable, MovieTable, TVShowTable):
        await session.execute(delete(table))


async def seed_database(factory: async_sessionmaker[AsyncSession] | None = None) -> SeedReport:
    """Replace catalog and list contents with the sample data set."""
    report = SeedReport()

    async with session_context(factory) as session:
        await _clear(session)

        content = ContentRepository(session)
        for movie in MOVIES:
            report.movies[movie["title"]] = await content.add_movie(**movie)  # type: ignore[arg-type]
        for show in SHOWS:
            report.shows[show["title"]] = await content.add_show(**show)  # type: ignore[arg-type]

        movie_ids = list(report.movies.values())
        show_ids = list(report.shows.values())
        john, jane = SAMPLE_OWNERS[0], SAMPLE_OWNERS[1]
        entries = [
            (john, movie_ids[0], ContentKind.MOVIE, "2024-01-20"),
            (john, movie_ids[1], ContentKind.MOVIE, "2024-01-21"),
            (john, show_ids[0], ContentKind.SHOW, "2024-01-22"),
            (jane, movie_ids[2], ContentKind.MOVIE, "2024-01-20"),
            (jane, show_ids[1], ContentKind.SHOW, "2024-01-21"),
        ]
        lists = ListRepository(session)
        for owner_id, content_id, kind, added in entries:
            await lists.add(owner_id, content_id, kind, _date(added))
        report.memberships = len(entries)

    logger.info(
        f"Seeded {len(report.movies)} movies, {len(report.shows)} shows "
        f"and {report.memberships} list items"
    )
    return report
