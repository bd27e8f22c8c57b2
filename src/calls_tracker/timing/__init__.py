"""Timing classification and closing-time enforcement."""

from calls_tracker.timing.classifier import (
    TimingClassification,
    classify_proposal,
    classify_timing,
    enforce_timing,
)

__all__ = [
    "TimingClassification",
    "classify_proposal",
    "classify_timing",
    "enforce_timing",
]
