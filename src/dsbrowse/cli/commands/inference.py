"""Inference commands - status, start and reset of a dataset's inference job."""

from __future__ import annotations

from typing import Annotated

import typer

from dsbrowse.cli.common import DatasetArg, console, get_client, load_dataset, run_async
from dsbrowse.core.models.base import InferenceCommand
from dsbrowse.inference.controller import InferenceJobController, InferenceProgress
from dsbrowse.session import parse_value_list
from dsbrowse.tree.models import DEFAULT_NA_VALUES, Node, SchemaConfig
from dsbrowse.tree.synchronizer import TreeSynchronizer

app = typer.Typer(help="Inspect and control a dataset's type inference job.")

NaValuesOption = Annotated[
    str | None,
    typer.Option("--na-values", help="Comma-separated missing-value markers"),
]
MaxCategoriesOption = Annotated[
    int | None,
    typer.Option("--max-categories", min=1, help="Max distinct values for a category"),
]


def print_progress(path: str, progress: InferenceProgress) -> None:
    upload = "Upload Completed" if progress.upload_complete else "Upload In Progress"
    console.print(f"[bold]{path}[/bold]")
    console.print(f"  {upload} ({progress.uploaded_rows} rows)")
    if progress.inference_complete:
        console.print(f"  Inference Complete ({progress.inferred_rows} rows)")
    else:
        status = progress.status.value.lower()
        console.print(f"  Inference {status} ({progress.inferred_rows} rows)")

    actions = [
        name for name, ok in (("start", progress.can_start), ("reset", progress.can_reset)) if ok
    ]
    console.print(f"  Available: {', '.join(actions) or 'none'}")


def _schema_config(node: Node, na_values: str | None, max_categories: int | None) -> SchemaConfig:
    """Options override the dataset's saved schema settings."""
    schema = node.schema_data
    if na_values is not None:
        values = parse_value_list(na_values)
    else:
        values = schema.na_values if schema else list(DEFAULT_NA_VALUES)
    return SchemaConfig(
        na_values=values,
        max_categories=max_categories or (schema.max_categories if schema else 100),
    )


def _send(
    dataset: str,
    command: InferenceCommand,
    na_values: str | None,
    max_categories: int | None,
) -> None:
    async def _run() -> None:
        sync = TreeSynchronizer()
        async with get_client() as client:
            node = await load_dataset(sync, client, dataset)
            controller = InferenceJobController(sync, client.fetch_children, client)
            progress = controller.progress(node)
            starting = command == InferenceCommand.START
            allowed = progress.can_start if starting else progress.can_reset
            if not allowed:
                console.print(f"[yellow]Nothing to {command.value} for {dataset}[/yellow]")
                raise typer.Exit(1)

            config = _schema_config(node, na_values, max_categories)
            if starting:
                result = await controller.start(node, config)
            else:
                result = await controller.reset(node, config)
            if not result.success:
                console.print(f"[red]{command.value.capitalize()} failed:[/red] {result.error}")
                raise typer.Exit(1)
            console.print(f"Inference for {dataset}: {result.unwrap().value.lower()}")

    run_async(_run())


@app.command("status")
def status(dataset: DatasetArg) -> None:
    """Show upload and inference progress."""

    async def _run() -> tuple[Node, InferenceProgress]:
        sync = TreeSynchronizer()
        async with get_client() as client:
            node = await load_dataset(sync, client, dataset)
            controller = InferenceJobController(sync, client.fetch_children, client)
            return node, controller.progress(node)

    node, progress = run_async(_run())
    print_progress(node.path, progress)


@app.command("start")
def start(
    dataset: DatasetArg,
    na_values: NaValuesOption = None,
    max_categories: MaxCategoriesOption = None,
) -> None:
    """Start (or restart) type inference."""
    _send(dataset, InferenceCommand.START, na_values, max_categories)


@app.command("reset")
def reset(
    dataset: DatasetArg,
    na_values: NaValuesOption = None,
    max_categories: MaxCategoriesOption = None,
) -> None:
    """Stop type inference and discard its progress."""
    _send(dataset, InferenceCommand.RESET, na_values, max_categories)
