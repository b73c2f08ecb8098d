"""Local cache of the remote dataset tree.

The TreeSynchronizer owns the Node graph. Folders are refreshed one level at
a time, datasets from their own authoritative record. Every refresh reports
whether anything changed so the UI can decide whether to re-render.

Refreshes never raise: transport failures and malformed records are logged
and count as "no change" for the node involved. A node removed from the tree
while its fetch was in flight keeps nothing from that fetch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any

from pydantic import ValidationError

from dsbrowse.core.logging import get_logger
from dsbrowse.core.models.base import NodeKind
from dsbrowse.tree.models import DatasetState, DataWindow, Node, RemoteRecord

logger = get_logger(__name__)

# fetch_children(path, depth): depth 0 = the node's own record, 1 = direct children
FetchChildren = Callable[[str, int], Awaitable[list[dict[str, Any]]]]

ROOT_NAME = "Root"


def split_path(path: str) -> list[str]:
    """Split a slash-delimited path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def join_path(parent_path: str, name: str) -> str:
    return f"{parent_path}/{name}" if parent_path else name


def parent_path(path: str) -> str:
    """Path of the parent folder, derived from the path string alone."""
    parts = split_path(path)
    return "/".join(parts[:-1])


class TreeSynchronizer:
    """Owns the Node tree and keeps it in step with the remote store.

    The tree is a strict parent → children ownership tree with a path-keyed
    index next to it; nodes hold no reference to their parent.
    """

    def __init__(self, root: Node | None = None):
        self.root = root or Node(name=ROOT_NAME, path="", kind=NodeKind.FOLDER)
        self._index: dict[str, Node] = {}
        self._index_subtree(self.root)

    # --- Lookup ---

    def find_node(self, path: str | None) -> Node | None:
        """Return the node at ``path``, the root for ``""``, or None."""
        if path is None:
            logger.debug("find_node_without_path")
            return None
        return self._index.get("/".join(split_path(path)))

    def contains(self, node: Node) -> bool:
        """True if this exact node object is still part of the tree."""
        return self._index.get(node.path) is node

    def iter_nodes(self) -> Iterator[Node]:
        """Depth-first walk over every node, root first."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children.values())))

    # --- Expansion state ---

    def toggle_expansion(self, path: str) -> bool:
        """Flip ``expanded`` on a folder. Returns False for datasets and unknown paths."""
        node = self.find_node(path)
        if node is None or not node.is_folder:
            return False
        node.expanded = not node.expanded
        return True

    def set_expanded_set(self, paths: Iterable[str]) -> bool:
        """Expand exactly the folders in ``paths``, collapse the rest."""
        wanted = {"/".join(split_path(p)) for p in paths}
        changed = False
        for node in self.iter_nodes():
            if not node.is_folder:
                continue
            expanded = node.path in wanted
            if node.expanded != expanded:
                node.expanded = expanded
                changed = True
        return changed

    # --- Node construction and field sync ---

    def create_child_node(self, name: str, parent_path: str, record: RemoteRecord) -> Node:
        """Build a detached Node from a remote record."""
        path = join_path(parent_path, name)
        if not record.is_dataset:
            return Node(name=name, path=path, kind=NodeKind.FOLDER)

        node = Node(name=name, path=path, kind=NodeKind.DATASET)
        self.update_fields(record, node)
        node.data_window = DataWindow(
            path=path,
            tolerance=0,
            preferred_types=list(record.column_types),
        )
        return node

    def update_fields(self, record: RemoteRecord, node: Node) -> None:
        """Replace the dataset snapshot of ``node`` with the record's fields."""
        if not node.is_dataset or not record.is_dataset:
            return
        node.dataset = DatasetState.from_record(record)

    def is_up_to_date(self, record: RemoteRecord, node: Node) -> bool:
        """True if applying ``record`` to ``node`` would change nothing."""
        if not record.is_dataset or not node.is_dataset:
            return True
        return node.dataset == DatasetState.from_record(record)

    # --- Refresh ---

    async def refresh_children_of(self, node: Node, fetch_children: FetchChildren) -> bool:
        """Reconcile one level of children of a folder with the remote listing."""
        if not node.is_folder:
            return False

        try:
            raw = await fetch_children(node.path, 1)
        except Exception as e:
            logger.warning("tree_refresh_failed", path=node.path, error=str(e))
            return False

        if not self.contains(node):
            logger.debug("tree_refresh_discarded", path=node.path)
            return False

        records, invalid, unnamed = self._parse_listing(node.path, raw or [])
        changed = False
        # Children with an unreadable record are left as they are
        seen: set[str] = set(invalid)
        for record in records:
            name = record.child_name
            seen.add(name)
            child = node.children.get(name)
            if child is not None and child.is_dataset != record.is_dataset:
                # Kind changed remotely: rebuild the child
                self._remove_child(node, name)
                child = None
            if child is None:
                self._attach(node, self.create_child_node(name, node.path, record))
                changed = True
            elif not self.is_up_to_date(record, child):
                self.update_fields(record, child)
                changed = True

        # An unreadable record without a name could be any child: delete nothing
        stale = [] if unnamed else [n for n in node.children if n not in seen]
        for name in stale:
            self._remove_child(node, name)
            changed = True

        if changed:
            logger.debug("tree_children_refreshed", path=node.path, children=len(node.children))
        return changed

    async def refresh_dataset(self, node: Node, fetch_children: FetchChildren) -> bool:
        """Apply the dataset's own authoritative record if it differs."""
        if not node.is_dataset:
            return False

        try:
            raw = await fetch_children(node.path, 0)
            if not raw:
                logger.warning("tree_refresh_empty", path=node.path)
                return False
            record = RemoteRecord.model_validate(raw[0])
        except Exception as e:
            logger.warning("tree_refresh_failed", path=node.path, error=str(e))
            return False

        if not self.contains(node):
            logger.debug("tree_refresh_discarded", path=node.path)
            return False
        if not record.is_dataset or self.is_up_to_date(record, node):
            return False

        self.update_fields(record, node)
        return True

    async def refresh_all_incomplete(self, fetch_children: FetchChildren) -> bool:
        """Concurrently refresh every dataset with outstanding upload or inference work."""
        pending = [
            node
            for node in self.iter_nodes()
            if node.dataset is not None and not node.dataset.statistics_final
        ]
        if not pending:
            return False

        results = await asyncio.gather(
            *(self.refresh_dataset(node, fetch_children) for node in pending)
        )
        logger.debug("tree_incomplete_refreshed", datasets=len(pending), changed=sum(results))
        return any(results)

    async def ensure_path(self, path: str, fetch_children: FetchChildren) -> Node | None:
        """Load every folder along ``path`` and return the node it names."""
        node: Node | None = self.root
        for part in split_path(path):
            assert node is not None
            if part not in node.children:
                await self.refresh_children_of(node, fetch_children)
            node = node.children.get(part)
            if node is None:
                return None
        if node is not None and node.is_folder and not node.children:
            await self.refresh_children_of(node, fetch_children)
        return node

    def _parse_listing(
        self, path: str, raw: list[dict[str, Any]]
    ) -> tuple[list[RemoteRecord], set[str], bool]:
        """Validate each record of a listing on its own.

        Returns the valid records, the child names of the invalid ones, and
        whether any invalid record had no usable name.
        """
        records: list[RemoteRecord] = []
        invalid: set[str] = set()
        unnamed = False
        for item in raw:
            try:
                records.append(RemoteRecord.model_validate(item))
            except ValidationError as e:
                name = item.get("name") if isinstance(item, dict) else None
                logger.warning(
                    "tree_record_invalid", path=path, record=name, errors=e.error_count()
                )
                if isinstance(name, str) and name:
                    invalid.add(name.rstrip("/").rsplit("/", 1)[-1])
                else:
                    unnamed = True
        return records, invalid, unnamed

    # --- Index maintenance ---

    def _attach(self, parent: Node, child: Node) -> None:
        parent.children[child.name] = child
        self._index_subtree(child)

    def _remove_child(self, parent: Node, name: str) -> None:
        child = parent.children.pop(name)
        stack = [child]
        while stack:
            current = stack.pop()
            if self._index.get(current.path) is current:
                del self._index[current.path]
            stack.extend(current.children.values())

    def _index_subtree(self, node: Node) -> None:
        stack = [node]
        while stack:
            current = stack.pop()
            self._index[current.path] = current
            stack.extend(current.children.values())
