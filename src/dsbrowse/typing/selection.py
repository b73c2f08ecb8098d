"""Column type selection from inference statistics.

The inference backend reports, per column, how many values failed to parse
as each candidate type (the exception count). A type is acceptable when its
exception count is within the user's tolerance. Candidates are scanned in a
fixed priority order and the first acceptable one wins: narrow, strict types
come before wide ones and text is the final fallback.

A user override pins a column to a type regardless of tolerance.

All functions here are pure.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import NamedTuple

from dsbrowse.core.models.base import TypeTag
from dsbrowse.tree.models import ColumnPreference, OverriddenType, SchemaData

CANONICAL_TYPE_ORDER: tuple[TypeTag, ...] = tuple(TypeTag)

FRIENDLY_NAMES: dict[TypeTag, str] = {
    TypeTag.BOOL: "Boolean",
    TypeTag.INT8: "Small Integer",
    TypeTag.INT16: "Short Integer",
    TypeTag.INT32: "Integer",
    TypeTag.INT64: "Large Integer",
    TypeTag.FLOAT32: "Small Floating Point",
    TypeTag.FLOAT64: "Large Floating Point",
    TypeTag.COMPLEX: "Complex Number",
    TypeTag.TIMEDELTA: "Time Duration",
    TypeTag.DATETIME_D: "Date (D/M/Y)",
    TypeTag.DATETIME_Y: "Date (Y/M/D)",
    TypeTag.DATETIME: "Date (M/D/Y)",
    TypeTag.CATEGORY: "Category",
    TypeTag.OBJECT: "Text",
}


class TypeSelection(NamedTuple):
    """Effective type of a column and, for categories, its allowed values."""

    tag: TypeTag
    category_values: tuple[str, ...] = ()


TEXT_FALLBACK = TypeSelection(TypeTag.OBJECT)


def select_automatic_type(
    exception_counts: Mapping[str, int],
    tolerance: float,
    category_values: Sequence[str] | None = None,
) -> TypeSelection:
    """First tag in canonical order whose exception count is within tolerance.

    ``category`` only qualifies when the column has category values. Tags
    without a reported count never qualify.
    """
    categories = tuple(category_values or ())
    for tag in CANONICAL_TYPE_ORDER:
        count = exception_counts.get(tag.value)
        if count is None or count > tolerance:
            continue
        if tag == TypeTag.CATEGORY:
            if not categories:
                continue
            return TypeSelection(tag, categories)
        return TypeSelection(tag)
    return TEXT_FALLBACK


def select_effective_type(
    column: ColumnPreference,
    exception_counts: Mapping[str, int],
    tolerance: float,
    category_values: Sequence[str] | None = None,
) -> TypeSelection:
    """The override if the column has one, otherwise the automatic choice."""
    if isinstance(column.choice, OverriddenType):
        return TypeSelection(column.choice.tag, column.choice.category_values)
    return select_automatic_type(exception_counts, tolerance, category_values)


def select_column_type(
    column: ColumnPreference,
    schema_data: SchemaData | None,
    tolerance: float,
) -> TypeSelection:
    """Effective type of ``column`` using the statistics in ``schema_data``."""
    if schema_data is None:
        return select_effective_type(column, {}, tolerance)
    return select_effective_type(
        column,
        schema_data.exception_counts(column.name),
        tolerance,
        schema_data.categories(column.name),
    )


def toggle_override(
    column: ColumnPreference,
    exception_counts: Mapping[str, int],
    tolerance: float,
    category_values: Sequence[str] | None = None,
) -> ColumnPreference:
    """Freeze the current effective type as an override, or clear the override.

    Clearing drops frozen category values as well; automatic category
    detection starts fresh from the latest statistics.
    """
    if column.is_overridden:
        return ColumnPreference.automatic(column.name)
    tag, values = select_automatic_type(exception_counts, tolerance, category_values)
    return ColumnPreference.overridden(column.name, tag, values)


def exception_count(schema_data: SchemaData | None, column: str, tag: TypeTag) -> int:
    """Exception count shown next to a type option; 0 when not reported."""
    if schema_data is None:
        return 0
    return schema_data.exception_counts(column).get(tag.value, 0)
