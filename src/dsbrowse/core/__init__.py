"""Core module - configuration, logging, and shared models."""

from dsbrowse.core.config import Settings, get_settings
from dsbrowse.core.models.base import (
    InferenceCommand,
    InferenceStatus,
    NodeKind,
    Result,
    TypeTag,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models - enums
    "InferenceCommand",
    "InferenceStatus",
    "NodeKind",
    "TypeTag",
    # Models - base data structures
    "Result",
]
