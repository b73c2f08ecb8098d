"""Tests for tree models and wire parsing."""

import pytest
from pydantic import ValidationError

from dsbrowse.core.models.base import InferenceStatus, TypeTag
from dsbrowse.tree.models import (
    ColumnPreference,
    DatasetState,
    DataWindow,
    RemoteRecord,
    SchemaData,
)


class TestColumnPreference:
    """Tests for the automatic/overridden column variant."""

    def test_wire_without_type_is_automatic(self):
        column = ColumnPreference.model_validate({"name": "age"})
        assert not column.is_overridden
        assert column.override_tag is None

    def test_empty_type_is_automatic(self):
        column = ColumnPreference.model_validate({"name": "age", "type": "", "category_values": []})
        assert column == ColumnPreference.automatic("age")

    def test_wire_with_type_is_overridden(self):
        column = ColumnPreference.model_validate(
            {"name": "color", "type": "category", "category_values": ["r", "g"]}
        )
        assert column.override_tag == TypeTag.CATEGORY
        assert column.choice.category_values == ("r", "g")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ColumnPreference.model_validate({"name": "age", "type": "int128"})

    def test_to_wire(self):
        assert ColumnPreference.automatic("a").to_wire() == {"name": "a"}
        assert ColumnPreference.overridden("a", TypeTag.INT8).to_wire() == {
            "name": "a",
            "type": "int8",
        }

    def test_model_dump_round_trip(self):
        column = ColumnPreference.overridden("color", "category", ["r"])
        assert ColumnPreference.model_validate(column.model_dump()) == column


class TestRemoteRecord:
    """Tests for parsing enumerate_datasets records."""

    def test_folder_record(self, make_folder):
        record = RemoteRecord.model_validate(make_folder("data/B"))
        assert record.is_dataset is False
        assert record.child_name == "B"

    def test_ready_maps_to_completed(self, make_dataset):
        assert RemoteRecord.model_validate(make_dataset("A", upload_status="Ready")).completed
        assert not RemoteRecord.model_validate(make_dataset("A", upload_status="Loading")).completed

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, InferenceStatus.NOT_STARTED),
            ("", InferenceStatus.NOT_STARTED),
            ("success", InferenceStatus.SUCCESS),
            ("Not Started", InferenceStatus.NOT_STARTED),
            ("PENDING", InferenceStatus.PENDING),
        ],
    )
    def test_status_normalized(self, make_dataset, raw, expected):
        record = RemoteRecord.model_validate(make_dataset("A", inference_status=raw))
        assert record.inference_status == expected

    def test_null_schema_defaults(self, make_dataset):
        record = RemoteRecord.model_validate(make_dataset("A", schema_data=None, column_types=None))
        assert record.schema_data == SchemaData()
        assert record.column_types == []

    def test_null_counts_default_to_zero(self, make_dataset):
        raw = make_dataset("A", upload_status="Uploading", row_count=None, tolerance=None)
        raw["schema_data"] = {**raw["schema_data"], "position": None}
        record = RemoteRecord.model_validate(raw)
        assert record.row_count == 0
        assert record.tolerance == 0
        assert record.schema_data.position == 1

    def test_negative_exception_count_rejected(self, make_dataset):
        raw = make_dataset("A")
        raw["schema_data"] = {"column_types": {"age": {"int8": -1}}}
        with pytest.raises(ValidationError):
            RemoteRecord.model_validate(raw)


class TestDatasetState:
    """Tests for the dataset snapshot."""

    def test_inference_complete(self):
        state = DatasetState(
            completed=True,
            row_count=100,
            inference_status=InferenceStatus.SUCCESS,
            schema_data=SchemaData(position=101),
        )
        assert state.inferred_rows == 100
        assert state.inference_complete

    def test_incomplete_while_uploading(self):
        state = DatasetState(completed=False, row_count=100, schema_data=SchemaData(position=101))
        assert not state.inference_complete

    def test_completed_status_is_final(self):
        state = DatasetState(
            completed=True, row_count=100, schema_data=SchemaData(position=1, status="completed")
        )
        assert not state.inference_complete
        assert state.statistics_final

    def test_cursor_decides_without_status(self):
        assert DatasetState(
            completed=True, row_count=100, schema_data=SchemaData(position=101)
        ).statistics_final
        assert not DatasetState(
            completed=True, row_count=100, schema_data=SchemaData(position=40)
        ).statistics_final
        assert not DatasetState(
            completed=False, row_count=100, schema_data=SchemaData(status="completed")
        ).statistics_final

    def test_snapshot_is_frozen(self):
        state = DatasetState()
        with pytest.raises(AttributeError):
            state.row_count = 5


class TestDataWindow:
    """Tests for DataWindow validation."""

    def test_defaults(self):
        window = DataWindow()
        assert window.path is None
        assert window.page_number == 1
        assert window.page_size == 1000
        assert window.filter == ""
        assert window.tolerance == 0
        assert window.preferred_types == []

    def test_page_size_must_be_known(self):
        with pytest.raises(ValidationError):
            DataWindow(page_size=123)

    def test_with_changes_validates(self):
        window = DataWindow()
        assert window.with_changes(page_number=3).page_number == 3
        with pytest.raises(ValidationError):
            window.with_changes(page_number=0)

    def test_with_changes_leaves_original(self):
        window = DataWindow(preferred_types=[ColumnPreference.automatic("a")])
        changed = window.with_changes(tolerance=2)
        assert window.tolerance == 0
        assert changed.preferred_types == window.preferred_types
