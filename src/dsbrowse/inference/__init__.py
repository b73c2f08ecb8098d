"""Inference job control."""

from dsbrowse.inference.controller import (
    InferenceJobController,
    InferenceProgress,
    can_reset,
    can_start,
    has_outstanding_work,
    is_inference_complete,
)

__all__ = [
    "InferenceJobController",
    "InferenceProgress",
    "can_reset",
    "can_start",
    "has_outstanding_work",
    "is_inference_complete",
]
