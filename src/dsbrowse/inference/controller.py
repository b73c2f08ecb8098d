"""Inference job control for dataset nodes.

Job state transitions happen on the backend:

    NOT_STARTED -> PENDING -> STARTED -> SUCCESS | STOPPED

STOPPED and SUCCESS go back to PENDING on an explicit start; STARTED,
PENDING and SUCCESS go to STOPPED on an explicit reset. The controller polls
the remote status into the node and sends commands. After a command is
accepted the local status is set to the expected next state until a poll
reports the real one.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from dsbrowse.core.config import Settings, get_settings
from dsbrowse.core.logging import get_logger, log_context
from dsbrowse.core.models.base import InferenceCommand, InferenceStatus, Result
from dsbrowse.tree.models import Node, SchemaConfig
from dsbrowse.tree.synchronizer import FetchChildren, TreeSynchronizer

logger = get_logger(__name__)

# Statuses in which a start command would be redundant
_ACTIVE_OR_DONE = frozenset(
    {InferenceStatus.STARTED, InferenceStatus.PENDING, InferenceStatus.SUCCESS}
)
_TERMINAL = frozenset(
    {InferenceStatus.SUCCESS, InferenceStatus.STOPPED, InferenceStatus.NOT_STARTED}
)

_OPTIMISTIC_STATUS = {
    InferenceCommand.START: InferenceStatus.PENDING,
    InferenceCommand.RESET: InferenceStatus.STOPPED,
}


class CommandTransport(Protocol):
    """The part of the remote client the controller sends commands through."""

    def post_inference_command(
        self, path: str, command: InferenceCommand, schema_config: SchemaConfig
    ) -> Awaitable[Result[None]]: ...


@dataclass(frozen=True)
class InferenceProgress:
    """What the inference panel shows for a dataset."""

    status: InferenceStatus
    uploaded_rows: int
    inferred_rows: int
    upload_complete: bool
    inference_complete: bool
    can_start: bool
    can_reset: bool


def is_inference_complete(node: Node) -> bool:
    """Upload finished and every uploaded row has been inferred."""
    return node.dataset is not None and node.dataset.inference_complete


def can_start(node: Node) -> bool:
    """A start command would do something for this dataset."""
    if node.dataset is None:
        return False
    return node.dataset.inference_status not in _ACTIVE_OR_DONE and not is_inference_complete(node)


def can_reset(node: Node) -> bool:
    if node.dataset is None:
        return False
    return node.dataset.inference_status != InferenceStatus.NOT_STARTED


def has_outstanding_work(node: Node) -> bool:
    """False when neither the upload nor the inference job can still change."""
    if node.dataset is None:
        return False
    return not node.dataset.completed or node.dataset.inference_status not in _TERMINAL


class InferenceJobController:
    """Polls and commands the inference job of dataset nodes."""

    def __init__(
        self,
        synchronizer: TreeSynchronizer,
        fetch_children: FetchChildren,
        transport: CommandTransport,
        settings: Settings | None = None,
    ):
        self.synchronizer = synchronizer
        self.fetch_children = fetch_children
        self.transport = transport
        self.poll_interval = (settings or get_settings()).poll_interval_seconds

    def progress(self, node: Node) -> InferenceProgress:
        state = node.dataset
        if state is None:
            raise ValueError(f"'{node.path}' is not a dataset")
        return InferenceProgress(
            status=state.inference_status,
            uploaded_rows=state.row_count,
            inferred_rows=state.inferred_rows,
            upload_complete=state.completed,
            inference_complete=state.inference_complete,
            can_start=can_start(node),
            can_reset=can_reset(node),
        )

    async def poll(self, node: Node, force: bool = False) -> bool:
        """Refresh the node's status; skipped when nothing can change unless forced."""
        if not node.is_dataset:
            return False
        if not force and not has_outstanding_work(node):
            return False
        return await self.synchronizer.refresh_dataset(node, self.fetch_children)

    async def start(self, node: Node, schema_config: SchemaConfig) -> Result[InferenceStatus]:
        return await self._send(node, InferenceCommand.START, schema_config)

    async def reset(self, node: Node, schema_config: SchemaConfig) -> Result[InferenceStatus]:
        return await self._send(node, InferenceCommand.RESET, schema_config)

    async def _send(
        self, node: Node, command: InferenceCommand, schema_config: SchemaConfig
    ) -> Result[InferenceStatus]:
        if node.dataset is None:
            return Result.fail(f"'{node.path}' is not a dataset")

        with log_context(dataset=node.path, command=command.value):
            result = await self.transport.post_inference_command(node.path, command, schema_config)
            if not result.success:
                return Result.fail(result.error or "Inference command failed")

            status = _OPTIMISTIC_STATUS[command]
            # Node may have been refreshed while the command was in flight
            if node.dataset is not None:
                node.dataset = dataclasses.replace(node.dataset, inference_status=status)
            logger.info("inference_command_sent", status=status.value)
        return Result.ok(status)

    async def watch(
        self,
        path: str,
        stop: asyncio.Event,
        on_change: Callable[[Node], None] | None = None,
    ) -> None:
        """Poll the dataset at ``path`` until ``stop`` is set.

        The first poll is forced. Returns early once the node disappears from
        the tree or, after a poll, has no outstanding work left.
        """
        force = True
        while not stop.is_set():
            node = self.synchronizer.find_node(path)
            if node is None or not node.is_dataset:
                logger.info("inference_watch_stopped", path=path, reason="node_missing")
                return
            if await self.poll(node, force=force) and on_change is not None:
                on_change(node)
            force = False
            if not stop.is_set() and not has_outstanding_work(node):
                logger.info("inference_watch_stopped", path=path, reason="idle")
                return
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.poll_interval)
            except TimeoutError:
                pass
