"""Column type selection."""

from dsbrowse.typing.selection import (
    CANONICAL_TYPE_ORDER,
    FRIENDLY_NAMES,
    TypeSelection,
    exception_count,
    select_automatic_type,
    select_column_type,
    select_effective_type,
    toggle_override,
)

__all__ = [
    "CANONICAL_TYPE_ORDER",
    "FRIENDLY_NAMES",
    "TypeSelection",
    "exception_count",
    "select_automatic_type",
    "select_column_type",
    "select_effective_type",
    "toggle_override",
]
