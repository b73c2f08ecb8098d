"""Types command - per-column type selection for a dataset."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from dsbrowse.cli.common import DatasetArg, console, get_client, load_dataset, run_async
from dsbrowse.core.models.base import TypeTag
from dsbrowse.session import BrowserSession
from dsbrowse.tree.models import ColumnPreference, Node
from dsbrowse.tree.synchronizer import TreeSynchronizer
from dsbrowse.typing.selection import FRIENDLY_NAMES, exception_count


def types(
    dataset: DatasetArg,
    tolerance: Annotated[
        float | None,
        typer.Option(
            "--tolerance",
            "-t",
            min=0,
            help="Exception tolerance (default: the dataset's saved tolerance)",
        ),
    ] = None,
) -> None:
    """Show the selected type of every column and its exception counts."""

    async def _run() -> tuple[BrowserSession, Node]:
        sync = TreeSynchronizer()
        async with get_client() as client:
            node = await load_dataset(sync, client, dataset)
        session = BrowserSession(sync)
        session.navigate(node.path)
        if tolerance is not None:
            session.window = session.window.with_changes(tolerance=tolerance)
        return session, node

    session, node = run_async(_run())
    schema = node.schema_data
    columns = session.window.preferred_types or [
        ColumnPreference.automatic(name) for name in (schema.column_types if schema else {})
    ]

    table = Table(title=f"{node.path} (tolerance {session.window.tolerance:g})")
    table.add_column("Column", style="cyan")
    table.add_column("Type")
    table.add_column("Override", justify="center")
    table.add_column("Exceptions")
    table.add_column("Values")

    for column in columns:
        tag, values = session.column_type(column.name)
        reported = schema.exception_counts(column.name) if schema else {}
        counts = ", ".join(
            f"{t.value}={exception_count(schema, column.name, t)}"
            for t in TypeTag
            if t.value in reported
        )
        table.add_row(
            column.name,
            f"{FRIENDLY_NAMES[tag]} ({tag.value})",
            "x" if column.is_overridden else "",
            counts,
            ", ".join(values) if tag == TypeTag.CATEGORY else "",
        )

    console.print(table)
