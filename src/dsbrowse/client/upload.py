"""Dataset upload flow.

The client reads the CSV header itself: column names become the dataset's
initial (all automatic) column list and only the rows after the header are
sent as the file body.
"""

from __future__ import annotations

from dsbrowse.client.remote import ProgressCallback, RemoteClient
from dsbrowse.core.config import Settings, get_settings
from dsbrowse.core.logging import get_logger
from dsbrowse.core.models.base import Result
from dsbrowse.tree.models import ColumnPreference, SchemaConfig
from dsbrowse.tree.synchronizer import TreeSynchronizer, join_path

logger = get_logger(__name__)

# The header line must fit in this many leading bytes
HEADER_SCAN_BYTES = 1024


def split_header(data: bytes, encoding: str = "utf-8-sig") -> tuple[list[ColumnPreference], bytes]:
    """Split a CSV payload into its header columns and the remaining body.

    Raises:
        ValueError: If no line break occurs within the first HEADER_SCAN_BYTES.
    """
    newline = data.find(b"\n", 0, HEADER_SCAN_BYTES)
    if newline < 0:
        raise ValueError(f"No header line found in the first {HEADER_SCAN_BYTES} bytes")
    header = data[:newline].decode(encoding).rstrip("\r")
    columns = [ColumnPreference.automatic(name.strip()) for name in header.split(",")]
    return columns, data[newline + 1 :]


def upload_schema_config(settings: Settings | None = None) -> SchemaConfig:
    settings = settings or get_settings()
    return SchemaConfig(
        na_values=list(settings.upload_na_values),
        max_categories=settings.default_max_categories,
    )


async def upload_file(
    client: RemoteClient,
    synchronizer: TreeSynchronizer,
    folder_path: str,
    filename: str,
    data: bytes,
    on_progress: ProgressCallback | None = None,
    settings: Settings | None = None,
) -> Result[str]:
    """Upload ``data`` as ``folder_path/filename`` and refresh the folder.

    Returns the new dataset path on success.
    """
    try:
        columns, body = split_header(data)
    except (ValueError, UnicodeDecodeError) as e:
        return Result.fail(f"Cannot read header of {filename}: {e}")

    path = join_path(folder_path, filename)
    result = await client.post_upload(
        path, body, upload_schema_config(settings), columns, on_progress=on_progress
    )
    if not result.success:
        return Result.fail(f"Upload of {path} failed: {result.error}")

    logger.info("dataset_uploaded", path=path, columns=len(columns), bytes=len(body))
    folder = synchronizer.find_node(folder_path)
    if folder is not None:
        await synchronizer.refresh_children_of(folder, client.fetch_children)
    return Result.ok(path)
