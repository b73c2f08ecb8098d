"""Dataset API transport."""

from dsbrowse.client.remote import RemoteClient, RemoteError
from dsbrowse.client.upload import split_header, upload_file

__all__ = [
    "RemoteClient",
    "RemoteError",
    "split_header",
    "upload_file",
]
