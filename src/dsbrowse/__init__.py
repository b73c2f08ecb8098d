"""dsbrowse - remote dataset browser core.

Keeps a local, partially loaded cache of a remote tree of folders and
datasets in step with the backend, and selects column types from the
backend's inference statistics.

Example:
    from dsbrowse import RemoteClient, TreeSynchronizer

    sync = TreeSynchronizer()
    async with RemoteClient.from_settings() as client:
        node = await sync.ensure_path("sales/orders.csv", client.fetch_children)
        changed = await sync.refresh_all_incomplete(client.fetch_children)
"""

__version__ = "0.1.0"

from dsbrowse.client.remote import RemoteClient, RemoteError
from dsbrowse.core.models.base import Result
from dsbrowse.inference.controller import InferenceJobController
from dsbrowse.session import BrowserSession
from dsbrowse.tree.synchronizer import TreeSynchronizer

__all__ = [
    "BrowserSession",
    "InferenceJobController",
    "RemoteClient",
    "RemoteError",
    "Result",
    "TreeSynchronizer",
    "__version__",
]
