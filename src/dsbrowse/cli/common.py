"""Shared CLI utilities and constants."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

import typer
from dotenv import load_dotenv
from rich.console import Console

from dsbrowse.client.remote import RemoteClient
from dsbrowse.core.config import get_settings
from dsbrowse.core.logging import configure_logging
from dsbrowse.tree.models import Node
from dsbrowse.tree.synchronizer import TreeSynchronizer

# Load .env file from current directory (API URL, token)
load_dotenv()

# Shared console instance
console = Console()

DatasetArg = Annotated[
    str,
    typer.Argument(help="Slash-delimited path of a dataset, e.g. sales/2024/orders.csv"),
]


def setup_logging(verbose: bool = False) -> None:
    settings = get_settings()
    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
    )


def get_client() -> RemoteClient:
    return RemoteClient.from_settings()


T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


async def load_dataset(sync: TreeSynchronizer, client: RemoteClient, path: str) -> Node:
    """Load the tree down to ``path`` and return it, exiting if it is not a dataset."""
    node = await sync.ensure_path(path, client.fetch_children)
    if node is None:
        console.print(f"[red]Not found:[/red] {path}")
        raise typer.Exit(1)
    if not node.is_dataset:
        console.print(f"[red]Not a dataset:[/red] {path}")
        raise typer.Exit(1)
    return node
