"""Tests for grid paging and cell formatting."""

import pytest

from dsbrowse.core.models.base import TypeTag
from dsbrowse.grid import fetch_page, format_cell, format_float32, format_timedelta, page_bounds
from dsbrowse.tree.models import DataWindow


def test_page_bounds():
    assert page_bounds(DataWindow(page_number=1, page_size=50)) == (0, 50)
    assert page_bounds(DataWindow(page_number=3, page_size=250)) == (500, 250)


async def test_fetch_page_requests_current_slice(api, client):
    api.rows = [{"age": 1}]
    rows = await fetch_page(client, DataWindow(path="data/A", page_number=2, page_size=100))
    assert rows == [{"age": 1}]
    params = api.requests[0].url.params
    assert params["start_row"] == "100"
    assert params["num_rows"] == "100"


class TestFormatCell:
    """Tests for per-type cell rendering."""

    @pytest.mark.parametrize(
        ("value", "tag", "expected"),
        [
            (True, TypeTag.BOOL, "True"),
            (False, TypeTag.BOOL, "False"),
            (42, TypeTag.INT8, "42"),
            (-7, TypeTag.INT64, "-7"),
            (2.5, TypeTag.FLOAT64, "2.5"),
            (1 / 3, TypeTag.FLOAT32, "0.3333333"),
            ({"real": 1.0, "imag": -2.5}, TypeTag.COMPLEX, "1.00 + -2.50i"),
            (3_723_000_000_000, TypeTag.TIMEDELTA, "1h 2m 3s"),
            ("2024-01-31", TypeTag.DATETIME_Y, "2024-01-31"),
            ("red", TypeTag.CATEGORY, "red"),
            ("hello", TypeTag.OBJECT, "hello"),
        ],
    )
    def test_formats(self, value, tag, expected):
        assert format_cell(value, tag) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12_345_678, "12345680"),
            (-98_765_432.1, "-98765430"),
            (2.0, "2"),
            (0.000012345678, "0.00001234568"),
            (1.5e-7, "1.5e-7"),
            (1.2345678e30, "1.234568e+30"),
        ],
    )
    def test_float32_printed_like_browser(self, value, expected):
        assert format_float32(value) == expected

    def test_none_renders_empty(self):
        assert format_cell(None, TypeTag.INT8) == ""
        assert format_cell(None, TypeTag.COMPLEX) == ""

    def test_object_outside_complex_renders_empty(self):
        assert format_cell({"a": 1}, TypeTag.OBJECT) == ""

    def test_scalar_under_complex_renders_empty(self):
        assert format_cell(5, TypeTag.COMPLEX) == ""


def test_format_timedelta_rolls_over():
    assert format_timedelta(0) == "0h 0m 0s"
    assert format_timedelta(59.9e9) == "0h 0m 59s"
    assert format_timedelta(90_061e9) == "25h 1m 1s"
