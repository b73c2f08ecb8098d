"""Grid paging and cell formatting."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from dsbrowse.client.remote import RemoteClient
from dsbrowse.core.models.base import TypeTag
from dsbrowse.tree.models import DataWindow

_INTEGER_TAGS = frozenset({TypeTag.INT8, TypeTag.INT16, TypeTag.INT32, TypeTag.INT64})


def page_bounds(window: DataWindow) -> tuple[int, int]:
    """First row index and row count of the window's current page."""
    return (window.page_number - 1) * window.page_size, window.page_size


async def fetch_page(client: RemoteClient, window: DataWindow) -> list[dict[str, Any]]:
    first_row, num_rows = page_bounds(window)
    return await client.fetch_rows(window, first_row, num_rows)


def format_timedelta(nanoseconds: float) -> str:
    """Render a duration in nanoseconds as ``Hh Mm Ss``."""
    seconds = nanoseconds / 1e9
    minutes = seconds / 60
    seconds %= 60
    hours = minutes / 60
    minutes %= 60
    return f"{math.floor(hours)}h {math.floor(minutes)}m {math.floor(seconds)}s"


def format_float32(value: float) -> str:
    """Round to 7 significant digits and print the shortest form.

    Follows JavaScript number printing: plain digits between 1e-6 and 1e21,
    exponent notation outside that range.
    """
    number = float(f"{float(value):.7g}")
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" not in text:
        return text
    if 1e-6 <= abs(number) < 1e21:
        return format(Decimal(text), "f")
    mantissa, exponent = text.split("e")
    return f"{mantissa}e{int(exponent):+d}"


def format_cell(value: Any, tag: TypeTag) -> str:
    """Render one cell value for display under its column type.

    Complex values arrive as ``{"real": ..., "imag": ...}`` objects; any other
    object value (or a non-object under a complex column) renders empty.
    """
    if isinstance(value, dict) != (tag == TypeTag.COMPLEX):
        return ""
    if value is None:
        return ""

    if tag == TypeTag.BOOL:
        return "True" if value else "False"
    if tag in _INTEGER_TAGS or tag == TypeTag.FLOAT64:
        return str(value)
    if tag == TypeTag.FLOAT32:
        return format_float32(value)
    if tag == TypeTag.COMPLEX:
        return f"{value['real']:.2f} + {value['imag']:.2f}i"
    if tag == TypeTag.TIMEDELTA:
        return format_timedelta(value)
    return str(value)
