"""Tree command - show the remote folder/dataset tree."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.tree import Tree as RichTree

from dsbrowse.cli.common import console, get_client, run_async
from dsbrowse.tree.models import Node
from dsbrowse.tree.synchronizer import TreeSynchronizer


def node_label(node: Node) -> str:
    if node.dataset is None:
        return f"[bold]{node.name}/[/bold]" if node.path else "[bold]/[/bold]"
    state = node.dataset
    upload = "ready" if state.completed else "uploading"
    return (
        f"{node.name} [dim]({state.row_count} rows, {upload}, "
        f"inference {state.inference_status.value.lower()})[/dim]"
    )


def _render(node: Node, branch: RichTree) -> None:
    # Folders first, then datasets, each alphabetically
    for child in sorted(node.children.values(), key=lambda n: (n.is_dataset, n.name)):
        _render(child, branch.add(node_label(child)))


def tree(
    path: Annotated[
        str,
        typer.Argument(help="Folder to expand down to"),
    ] = "",
) -> None:
    """Show the remote tree, loading every folder along PATH.

    Examples:

        dsbrowse tree

        dsbrowse tree sales/2024
    """

    async def _run() -> TreeSynchronizer:
        sync = TreeSynchronizer()
        async with get_client() as client:
            if await sync.ensure_path(path, client.fetch_children) is None:
                console.print(f"[red]Not found:[/red] {path}")
                raise typer.Exit(1)
        return sync

    sync = run_async(_run())
    root = RichTree(node_label(sync.root))
    _render(sync.root, root)
    console.print(root)
