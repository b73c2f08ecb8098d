"""Models for the remote dataset tree.

Contains the wire model for records returned by the dataset API, the
per-dataset snapshot applied during refreshes, the Node tree entity and
the DataWindow view state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    ValidationInfo,
    field_validator,
    model_validator,
)

from dsbrowse.core.models.base import InferenceStatus, NodeKind, TypeTag

PAGE_SIZES = (50, 100, 250, 500, 1000)

# Missing-value markers assumed until the backend reports its own
DEFAULT_NA_VALUES = ("N/A", "Not Available", "-", "<NA>", "None")

UPLOAD_READY = "Ready"
# schema_data.status once the backend has written its final statistics
SCHEMA_COMPLETED = "completed"


# === Column preferences ===


class AutomaticType(BaseModel):
    """Column type is chosen by tolerance-based inference."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["automatic"] = "automatic"


class OverriddenType(BaseModel):
    """Column type fixed by the user."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["overridden"] = "overridden"
    tag: TypeTag
    category_values: tuple[str, ...] = ()


TypeChoice = Annotated[AutomaticType | OverriddenType, Field(discriminator="mode")]


class ColumnPreference(BaseModel):
    """Preferred type for one grid column.

    On the wire this is ``{"name": ..., "type"?: ..., "category_values"?: [...]}``
    where a missing (or empty) ``type`` means automatic inference.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    choice: TypeChoice = Field(default_factory=AutomaticType)

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "choice" in data:
            return data
        tag = data.get("type")
        if not tag:
            return {"name": data.get("name")}
        return {
            "name": data.get("name"),
            "choice": {
                "mode": "overridden",
                "tag": tag,
                "category_values": data.get("category_values") or (),
            },
        }

    @classmethod
    def automatic(cls, name: str) -> ColumnPreference:
        return cls(name=name)

    @classmethod
    def overridden(
        cls, name: str, tag: TypeTag | str, category_values: tuple[str, ...] | list[str] = ()
    ) -> ColumnPreference:
        return cls(
            name=name,
            choice=OverriddenType(tag=TypeTag(tag), category_values=tuple(category_values)),
        )

    @property
    def is_overridden(self) -> bool:
        return isinstance(self.choice, OverriddenType)

    @property
    def override_tag(self) -> TypeTag | None:
        if isinstance(self.choice, OverriddenType):
            return self.choice.tag
        return None

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the API's loose ``{name, type?, category_values?}`` form."""
        wire: dict[str, Any] = {"name": self.name}
        if isinstance(self.choice, OverriddenType):
            wire["type"] = self.choice.tag.value
            if self.choice.category_values:
                wire["category_values"] = list(self.choice.category_values)
        return wire


# === Remote data ===


class SchemaData(BaseModel):
    """Inference statistics for one dataset.

    ``column_types`` maps column name to ``{type tag: exception count}``. Tags
    are kept as plain strings so statistics for tags this client does not know
    about survive a round trip.
    """

    model_config = ConfigDict(extra="ignore")

    column_types: dict[str, dict[str, NonNegativeInt]] = Field(default_factory=dict)
    na_values: list[str] = Field(default_factory=lambda: list(DEFAULT_NA_VALUES))
    max_categories: PositiveInt = 100
    category_values: dict[str, list[str]] = Field(default_factory=dict)
    position: int = Field(default=1, ge=1)  # 1-based cursor of rows inferred so far
    status: str | None = None

    @field_validator("position", mode="before")
    @classmethod
    def _null_position(cls, value: Any) -> Any:
        return 1 if value is None else value

    def exception_counts(self, column: str) -> dict[str, int]:
        return self.column_types.get(column, {})

    def categories(self, column: str) -> list[str]:
        return self.category_values.get(column, [])


class RemoteRecord(BaseModel):
    """One entry returned by ``enumerate_datasets``.

    Folder records only carry ``name`` and ``is_dataset``; the dataset fields
    fall back to their defaults.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    is_dataset: bool = False
    upload_status: str | None = None
    row_count: NonNegativeInt = 0
    schema_data: SchemaData = Field(default_factory=SchemaData)
    column_types: list[ColumnPreference] = Field(default_factory=list)
    inference_status: InferenceStatus = InferenceStatus.NOT_STARTED
    tolerance: float = Field(default=0, ge=0)

    @field_validator("inference_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if value is None or value == "":
            return InferenceStatus.NOT_STARTED
        if isinstance(value, str):
            return value.strip().upper().replace(" ", "_")
        return value

    @field_validator("schema_data", "column_types", "row_count", "tolerance", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            if info.field_name == "schema_data":
                return SchemaData()
            return [] if info.field_name == "column_types" else 0
        return value

    @property
    def child_name(self) -> str:
        """Last path segment; the API may return full paths as names."""
        return self.name.rstrip("/").rsplit("/", 1)[-1]

    @property
    def completed(self) -> bool:
        return self.upload_status == UPLOAD_READY


class SchemaConfig(BaseModel):
    """Inference settings sent with uploads and inference commands."""

    na_values: list[str] = Field(default_factory=lambda: list(DEFAULT_NA_VALUES))
    max_categories: PositiveInt = 100


# === Local state ===


@dataclass(frozen=True)
class DatasetState:
    """Snapshot of the synchronized fields of a dataset node.

    Refreshes build a new snapshot and swap it in with one assignment, so a
    reader never sees ``row_count`` from one fetch and ``schema_data`` from
    another.
    """

    completed: bool = False
    row_count: int = 0
    inference_status: InferenceStatus = InferenceStatus.NOT_STARTED
    schema_data: SchemaData = field(default_factory=SchemaData)
    column_types: tuple[ColumnPreference, ...] = ()
    tolerance: float = 0

    @classmethod
    def from_record(cls, record: RemoteRecord) -> DatasetState:
        return cls(
            completed=record.completed,
            row_count=record.row_count,
            inference_status=record.inference_status,
            schema_data=record.schema_data.model_copy(deep=True),
            column_types=tuple(record.column_types),
            tolerance=record.tolerance,
        )

    @property
    def inferred_rows(self) -> int:
        return self.schema_data.position - 1

    @property
    def inference_complete(self) -> bool:
        """Upload finished and every uploaded row has been inferred."""
        return self.completed and self.inferred_rows == self.row_count

    @property
    def statistics_final(self) -> bool:
        """Upload finished and the statistics will not change any more.

        The backend marks finished statistics with a completed status; older
        records without a status fall back to the row cursor.
        """
        if not self.completed:
            return False
        return self.schema_data.status == SCHEMA_COMPLETED or self.inference_complete


class DataWindow(BaseModel):
    """View/query state for the grid of one node."""

    path: str | None = None
    page_number: int = Field(default=1, ge=1)
    page_size: int = 1000
    filter: str = ""
    tolerance: float = Field(default=0, ge=0)
    preferred_types: list[ColumnPreference] = Field(default_factory=list)

    @field_validator("page_size")
    @classmethod
    def _known_page_size(cls, value: int) -> int:
        if value not in PAGE_SIZES:
            raise ValueError(f"page_size must be one of {PAGE_SIZES}, got {value}")
        return value

    def with_changes(self, **changes: Any) -> DataWindow:
        """Return a validated copy with ``changes`` applied."""
        return type(self).model_validate({**dict(self), **changes})

    def preference(self, column: str) -> ColumnPreference | None:
        return next((c for c in self.preferred_types if c.name == column), None)


@dataclass
class Node:
    """One element of the remote tree: a folder or a dataset."""

    name: str
    path: str
    kind: NodeKind
    children: dict[str, Node] = field(default_factory=dict)
    expanded: bool = False
    dataset: DatasetState | None = None
    data_window: DataWindow | None = None

    @property
    def is_dataset(self) -> bool:
        return self.kind == NodeKind.DATASET

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER

    @property
    def completed(self) -> bool | None:
        return self.dataset.completed if self.dataset else None

    @property
    def row_count(self) -> int | None:
        return self.dataset.row_count if self.dataset else None

    @property
    def inference_status(self) -> InferenceStatus | None:
        return self.dataset.inference_status if self.dataset else None

    @property
    def schema_data(self) -> SchemaData | None:
        return self.dataset.schema_data if self.dataset else None
