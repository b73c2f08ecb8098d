"""Upload command - send a local CSV file as a new dataset."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn

from dsbrowse.cli.common import console, get_client, run_async
from dsbrowse.client.upload import upload_file
from dsbrowse.tree.synchronizer import TreeSynchronizer


def upload(
    file: Annotated[
        Path,
        typer.Argument(
            help="CSV file to upload",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    folder: Annotated[
        str,
        typer.Option("--folder", "-f", help="Remote folder to upload into"),
    ] = "",
) -> None:
    """Upload a CSV file as a new dataset.

    The header line names the columns; every column starts out automatic.
    """
    data = file.read_bytes()

    async def _run() -> None:
        sync = TreeSynchronizer()
        with Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(file.name, total=len(data))

            def _on_progress(sent: int, total: int) -> None:
                progress.update(task, completed=sent, total=total)

            async with get_client() as client:
                target = await sync.ensure_path(folder, client.fetch_children)
                if target is None or not target.is_folder:
                    console.print(f"[red]Not a folder:[/red] {folder}")
                    raise typer.Exit(1)
                result = await upload_file(
                    client, sync, target.path, file.name, data, on_progress=_on_progress
                )

        if not result.success:
            console.print(f"[red]{result.error}[/red]")
            raise typer.Exit(1)
        console.print(f"File uploaded to {result.unwrap()}")

    run_async(_run())
