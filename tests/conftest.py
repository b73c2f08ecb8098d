"""Shared pytest fixtures for all tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from dsbrowse.client.remote import RemoteClient, RemoteError
from dsbrowse.core.config import Settings
from dsbrowse.tree.models import Node
from dsbrowse.tree.synchronizer import TreeSynchronizer


def dataset_record(name: str, **overrides: Any) -> dict[str, Any]:
    """Wire record for a dataset, as returned by enumerate_datasets."""
    record: dict[str, Any] = {
        "name": name,
        "is_dataset": True,
        "upload_status": "Ready",
        "row_count": 10,
        "schema_data": {
            "column_types": {"age": {"int8": 2, "int16": 0, "float64": 0}},
            "na_values": ["N/A"],
            "max_categories": 100,
            "category_values": {},
            "position": 1,
        },
        "column_types": [{"name": "age"}],
        "inference_status": "NOT_STARTED",
        "tolerance": 0,
    }
    record.update(overrides)
    return record


def folder_record(name: str) -> dict[str, Any]:
    return {"name": name, "is_dataset": False}


class FakeRemote:
    """In-memory stand-in for RemoteClient.fetch_children.

    ``listings[(path, depth)]`` is what a fetch returns. Paths in ``failing``
    raise RemoteError. A path in ``gates`` blocks until its event is set.
    """

    def __init__(self) -> None:
        self.listings: dict[tuple[str, int], list[dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, int]] = []

    def children(self, path: str, *records: dict[str, Any]) -> None:
        self.listings[(path, 1)] = list(records)

    def record(self, path: str, record: dict[str, Any]) -> None:
        self.listings[(path, 0)] = [record]

    async def fetch_children(self, path: str, depth: int) -> list[dict[str, Any]]:
        self.calls.append((path, depth))
        if path in self.gates:
            await self.gates[path].wait()
        if path in self.failing:
            raise RemoteError(f"connection refused for {path}")
        return [dict(r) for r in self.listings.get((path, depth), [])]


@pytest.fixture
def make_dataset() -> Callable[..., dict[str, Any]]:
    return dataset_record


@pytest.fixture
def make_folder() -> Callable[[str], dict[str, Any]]:
    return folder_record


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def sync() -> TreeSynchronizer:
    return TreeSynchronizer()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, poll_interval_seconds=0.01)


@pytest.fixture
async def loaded_sync(sync: TreeSynchronizer, remote: FakeRemote) -> TreeSynchronizer:
    """Tree with root -> data/ -> {A (dataset), B/ (folder)} loaded."""
    remote.children("", folder_record("data"))
    remote.children("data", dataset_record("data/A", row_count=10), folder_record("data/B"))
    await sync.refresh_children_of(sync.root, remote.fetch_children)
    data = sync.find_node("data")
    assert data is not None
    await sync.refresh_children_of(data, remote.fetch_children)
    return sync


def record_from_node(node: Node) -> dict[str, Any]:
    """Wire record carrying the node's own current field values."""
    assert node.dataset is not None
    state = node.dataset
    return {
        "name": node.path,
        "is_dataset": True,
        "upload_status": "Ready" if state.completed else "Uploading",
        "row_count": state.row_count,
        "schema_data": state.schema_data.model_dump(),
        "column_types": [c.to_wire() for c in state.column_types],
        "inference_status": state.inference_status.value,
        "tolerance": state.tolerance,
    }


@pytest.fixture
def node_to_record() -> Callable[[Node], dict[str, Any]]:
    return record_from_node


class FakeApi:
    """httpx.MockTransport handler serving the dataset API from memory.

    GET listings come from ``listings`` like FakeRemote. Every POST is kept in
    ``posts`` as ``(url_path, request)``. ``status`` maps a URL path to an
    HTTP error status to answer with.
    """

    def __init__(self) -> None:
        self.listings: dict[tuple[str, int], list[dict[str, Any]]] = {}
        self.rows: Any = []
        self.status: dict[str, int] = {}
        self.posts: list[tuple[str, httpx.Request]] = []
        self.requests: list[httpx.Request] = []

    def children(self, path: str, *records: dict[str, Any]) -> None:
        self.listings[(path, 1)] = list(records)

    def record(self, path: str, record: dict[str, Any]) -> None:
        self.listings[(path, 0)] = [record]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url_path = request.url.path
        if url_path in self.status:
            return httpx.Response(self.status[url_path], json={"detail": "error"})
        if request.method == "POST":
            self.posts.append((url_path, request))
            return httpx.Response(200, json={})
        if url_path == "/enumerate_datasets":
            key = (request.url.params["path"], int(request.url.params["depth"]))
            return httpx.Response(200, json=self.listings.get(key, []))
        if url_path == "/download_data":
            return httpx.Response(200, json={"rows": self.rows})
        return httpx.Response(404, json={"detail": "not found"})

    def client(self) -> RemoteClient:
        return RemoteClient(
            "http://dsbrowse.test",
            access_token="secret-token",
            transport=httpx.MockTransport(self.handle),
        )


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
async def client(api: FakeApi) -> AsyncIterator[RemoteClient]:
    async with api.client() as remote_client:
        yield remote_client
