"""Base models and types used across all modules.

This module contains the fundamental types that don't belong to any specific
component (tree, typing, inference, client).
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures (remote saves,
    commands, uploads). Exceptions are reserved for unexpected/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T | None = None, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success and self.value is not None:
            return Result.ok(fn(self.value), self.warnings)
        return self


# === Enums ===


class NodeKind(str, Enum):
    """Kind of a tree node."""

    FOLDER = "folder"
    DATASET = "dataset"


class InferenceStatus(str, Enum):
    """Remote type-inference job status."""

    NOT_STARTED = "NOT_STARTED"
    PENDING = "PENDING"
    STARTED = "STARTED"
    SUCCESS = "SUCCESS"
    STOPPED = "STOPPED"


class InferenceCommand(str, Enum):
    """Commands accepted by the remote inference manager."""

    START = "start"
    RESET = "reset"


class TypeTag(str, Enum):
    """Column type tags reported by the inference backend.

    Declaration order is the canonical selection priority.
    """

    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX = "complex"
    TIMEDELTA = "timedelta"
    DATETIME_D = "datetime_d"  # D/M/Y
    DATETIME_Y = "datetime_y"  # Y/M/D
    DATETIME = "datetime"  # M/D/Y
    CATEGORY = "category"
    OBJECT = "object"  # text fallback
