"""HTTP client for the dataset API.

Thin async wrapper over httpx. Listing and row downloads raise RemoteError
on failure so callers decide what a failed read means; writes (preferred
types, inference commands, uploads) return a Result so the UI can show a
transient notice.
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Any

import httpx

from dsbrowse.core.config import Settings, get_settings
from dsbrowse.core.logging import get_logger
from dsbrowse.core.models.base import InferenceCommand, Result
from dsbrowse.tree.models import ColumnPreference, DataWindow, SchemaConfig

logger = get_logger(__name__)

# on_progress(bytes_sent, total_bytes)
ProgressCallback = Callable[[int, int], None]


class RemoteError(Exception):
    """Transport or HTTP failure talking to the dataset API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class _ProgressReader(io.BytesIO):
    """In-memory upload body that reports how much httpx has read."""

    def __init__(self, data: bytes, on_progress: ProgressCallback | None):
        super().__init__(data)
        self._total = len(data)
        self._on_progress = on_progress

    def read(self, size: int | None = -1) -> bytes:
        chunk = super().read(size)
        if chunk and self._on_progress:
            self._on_progress(self.tell(), self._total)
        return chunk


class RemoteClient:
    """Async client for the dataset browsing API."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RemoteClient:
        settings = settings or get_settings()
        return cls(
            base_url=settings.api_base_url,
            access_token=settings.access_token,
            timeout=settings.request_timeout_seconds,
        )

    async def __aenter__(self) -> RemoteClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteError(f"Server responded with status: {status}", status) from e
        except httpx.HTTPError as e:
            raise RemoteError(f"{type(e).__name__}: {e}") from e
        return response

    # --- Reads ---

    async def fetch_children(self, path: str, depth: int) -> list[dict[str, Any]]:
        """List records under ``path``: depth 0 is the node itself, 1 its children."""
        response = await self._request(
            "GET", "/enumerate_datasets", params={"path": path, "depth": depth}
        )
        data = response.json()
        if not isinstance(data, list):
            raise RemoteError(f"Unexpected listing payload for '{path}'")
        return data

    async def fetch_rows(
        self, window: DataWindow, first_row: int, num_rows: int
    ) -> list[dict[str, Any]]:
        """Download one slice of rows typed according to the window's preferences."""
        response = await self._request(
            "GET",
            "/download_data",
            params={
                "dataset_name": window.path or "",
                "start_row": first_row,
                "num_rows": num_rows,
                "tolerance": window.tolerance,
                "filter": window.filter,
                "preferred_types": json.dumps([c.to_wire() for c in window.preferred_types]),
            },
        )
        rows = response.json().get("rows", [])
        # The API double-encodes rows as a JSON string
        if isinstance(rows, str):
            rows = json.loads(rows)
        return rows

    # --- Writes ---

    async def post_preferred_types(
        self, path: str, preferred_types: Sequence[ColumnPreference], tolerance: float
    ) -> Result[None]:
        payload = {
            "dataset_name": path,
            "preferred_types": [c.to_wire() for c in preferred_types],
            "tolerance": tolerance,
        }
        return await self._post(
            "/preferred_types", "preferred_types_save_failed", path, json=payload
        )

    async def post_inference_command(
        self, path: str, command: InferenceCommand, schema_config: SchemaConfig
    ) -> Result[None]:
        payload = {
            "dataset_name": path,
            "command": command.value,
            "schema": schema_config.model_dump_json(),
        }
        return await self._post("/manage_inference", "inference_command_failed", path, json=payload)

    async def post_upload(
        self,
        path: str,
        body: bytes,
        schema_config: SchemaConfig,
        columns: Sequence[ColumnPreference],
        on_progress: ProgressCallback | None = None,
    ) -> Result[None]:
        """Upload a CSV body (header line already removed) to ``path``."""
        files = {"file": (path, _ProgressReader(body, on_progress), "text/csv")}
        data = {
            "schema": schema_config.model_dump_json(),
            "column_types": json.dumps([c.to_wire() for c in columns]),
        }
        return await self._post("/upload_data", "upload_failed", path, files=files, data=data)

    async def _post(self, url: str, failure_event: str, path: str, **kwargs: Any) -> Result[None]:
        try:
            await self._request("POST", url, **kwargs)
        except RemoteError as e:
            logger.warning(failure_event, path=path, error=str(e))
            return Result.fail(str(e))
        return Result.ok()
