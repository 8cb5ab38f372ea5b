"""CLI commands for the list service.

Provides command-line interface using Typer:
- mylist serve: Run the API server
- mylist seed: Load the sample catalog and list entries
- mylist clear-list: Remove every item from one owner's list

Usage:
    mylist --help
    mylist serve --port 3000
    mylist seed
    mylist clear-list john_doe
"""

import typer

from mylist.cli.clear_cmd import app as clear_app
from mylist.cli.seed_cmd import app as seed_app
from mylist.cli.serve import app as serve_app

# Main CLI application
app = typer.Typer(
    name="mylist",
    help="MyList: personal saved-items list service",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(seed_app, name="seed")
app.add_typer(clear_app, name="clear-list")


@app.callback()
def callback() -> None:
    """MyList: personal saved-items list service."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
