"""Remote dataset tree: models and synchronization."""

from dsbrowse.tree.models import (
    PAGE_SIZES,
    ColumnPreference,
    DatasetState,
    DataWindow,
    Node,
    RemoteRecord,
    SchemaConfig,
    SchemaData,
)
from dsbrowse.tree.synchronizer import TreeSynchronizer, parent_path, split_path

__all__ = [
    "PAGE_SIZES",
    "ColumnPreference",
    "DataWindow",
    "DatasetState",
    "Node",
    "RemoteRecord",
    "SchemaConfig",
    "SchemaData",
    "TreeSynchronizer",
    "parent_path",
    "split_path",
]
