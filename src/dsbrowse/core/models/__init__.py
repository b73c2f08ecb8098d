"""Shared models."""

from dsbrowse.core.models.base import (
    InferenceCommand,
    InferenceStatus,
    NodeKind,
    Result,
    TypeTag,
)

__all__ = [
    "InferenceCommand",
    "InferenceStatus",
    "NodeKind",
    "Result",
    "TypeTag",
]
