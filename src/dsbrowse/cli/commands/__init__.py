"""CLI command implementations."""

from dsbrowse.cli.commands import (
    inference,
    tree,
    types,
    upload,
    watch,
)

__all__ = [
    "inference",
    "tree",
    "types",
    "upload",
    "watch",
]
