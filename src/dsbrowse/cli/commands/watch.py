"""Watch command - poll a dataset until inference completes."""

from __future__ import annotations

import asyncio

from dsbrowse.cli.commands.inference import print_progress
from dsbrowse.cli.common import DatasetArg, console, get_client, load_dataset, run_async
from dsbrowse.inference.controller import InferenceJobController
from dsbrowse.tree.models import Node
from dsbrowse.tree.synchronizer import TreeSynchronizer


def watch(dataset: DatasetArg) -> None:
    """Poll a dataset until its upload and inference are complete or idle.

    Stop early with Ctrl+C.
    """

    async def _run() -> None:
        sync = TreeSynchronizer()
        async with get_client() as client:
            node = await load_dataset(sync, client, dataset)
            controller = InferenceJobController(sync, client.fetch_children, client)
            stop = asyncio.Event()

            def _on_change(changed: Node) -> None:
                progress = controller.progress(changed)
                print_progress(changed.path, progress)
                if progress.inference_complete:
                    stop.set()

            progress = controller.progress(node)
            print_progress(node.path, progress)
            if progress.inference_complete:
                return
            await controller.watch(node.path, stop, on_change=_on_change)

            final = controller.progress(node)
            if not final.inference_complete:
                status = final.status.value.lower()
                console.print(f"[yellow]Inference {status}: nothing left to watch[/yellow]")

    try:
        run_async(_run())
    except KeyboardInterrupt:
        console.print("[dim]Stopped watching[/dim]")
