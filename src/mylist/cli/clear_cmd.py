"""CLI command for emptying one owner's list.

Usage:
    mylist clear-list john_doe
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from mylist.cache.redis import close_redis, get_redis
from mylist.core.errors import DependencyUnavailableError
from mylist.lists.runtime import build_runtime
from mylist.persistence.db import close_db, get_session_factory

app = typer.Typer(help="Remove every item from one owner's list")


@app.callback(invoke_without_command=True)
def clear_list(
    owner_id: str = typer.Argument(..., help="Owner whose list is emptied"),
) -> None:
    """Delete all memberships of OWNER_ID and invalidate its cached pages."""
    console = Console()
    try:
        deleted = asyncio.run(_clear(owner_id))
    except DependencyUnavailableError as e:
        console.print(f"[red]Store unavailable:[/red] {e}")
        raise typer.Exit(code=1) from e
    console.print(f"Removed [bold]{deleted}[/bold] items from the list of {owner_id}")


async def _clear(owner_id: str) -> int:
    try:
        runtime = build_runtime(get_session_factory(), await get_redis())
        return await runtime.mutation_engine.clear_items(owner_id)
    finally:
        await close_redis()
        await close_db()
