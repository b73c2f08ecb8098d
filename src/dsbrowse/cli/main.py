"""Main CLI application entry point."""

from __future__ import annotations

from typing import Annotated

import typer

from dsbrowse.cli.commands import inference, tree, types, upload, watch
from dsbrowse.cli.common import setup_logging

app = typer.Typer(
    name="dsbrowse",
    help="Browse remote datasets, upload CSV files and manage type inference.",
    no_args_is_help=True,
)


@app.callback()
def _main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    setup_logging(verbose)


# Register commands
app.command()(tree.tree)
app.command()(types.types)
app.command()(watch.watch)
app.command()(upload.upload)
app.add_typer(inference.app, name="inference")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
