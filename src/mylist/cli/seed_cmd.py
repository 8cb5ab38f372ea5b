"""CLI command for loading sample data.

Usage:
    mylist seed
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from mylist.persistence.db import close_db, init_db
from mylist.persistence.seed import SeedReport, seed_database

app = typer.Typer(help="Load the sample catalog and list entries")


@app.callback(invoke_without_command=True)
def seed() -> None:
    """Create tables and replace their contents with the sample data set.

    Existing catalog and list rows are deleted first.
    """
    report = asyncio.run(_seed())
    _print_report(report)


async def _seed() -> SeedReport:
    try:
        await init_db()
        return await seed_database()
    finally:
        await close_db()


def _print_report(report: SeedReport) -> None:
    console = Console()
    console.print(
        f"[green]Seeded[/green] {len(report.movies)} movies, {len(report.shows)} TV shows, "
        f"{report.memberships} list items"
    )

    table = Table(title="Sample content")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Id", style="dim")
    for title, content_id in report.movies.items():
        table.add_row("movie", title, content_id)
    for title, content_id in report.shows.items():
        table.add_row("tvshow", title, content_id)
    console.print(table)

    console.print("Sample owners (send as the user-id header): " + ", ".join(report.owners))
