"""CLI command for running the API server.

Usage:
    mylist serve
    mylist serve --port 3000 --workers 4 --env production
    mylist serve --reload --log-level debug
"""

from __future__ import annotations

import os

import typer
from rich.console import Console
from rich.table import Table

from mylist.config import settings

app = typer.Typer(help="Run the MyList API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
    env: str = typer.Option(
        settings.env,
        "--env",
        "-e",
        help="Deployment environment; anything but 'dev' logs JSON",
    ),
    reload: bool = typer.Option(False, "--reload", "-r", help="Restart on code changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of worker processes"),
    log_level: str = typer.Option(
        settings.log_level,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
) -> None:
    """Run the MyList API server under uvicorn.

    Environment and log level are exported as MYLIST_* variables so that
    reloaded and worker processes configure logging the same way.
    """
    import uvicorn

    if reload and workers > 1:
        raise typer.BadParameter("--reload runs a single process", param_hint="--workers")

    os.environ["MYLIST_ENV"] = env
    os.environ["MYLIST_LOG_LEVEL"] = log_level.upper()

    summary = Table.grid(padding=(0, 2))
    summary.add_row("Listening", f"http://{host}:{port}")
    summary.add_row("Environment", env)
    summary.add_row("Workers", "1 (reload)" if reload else str(workers))
    summary.add_row("Docs", f"http://{host}:{port}/docs")
    console = Console()
    console.print("[bold]Starting MyList server[/bold]")
    console.print(summary)

    uvicorn.run(
        "mylist.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level.lower(),
        # Requests are logged by the correlation middleware
        access_log=False,
    )
