"""Compose local checks with the external review into one verdict."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from calls_tracker.config import TrackerConfig
from calls_tracker.models import Call
from calls_tracker.validation._checks import check_question, check_timing
from calls_tracker.validation._protocols import ExternalReviewer
from calls_tracker.validation.models import Severity, ValidationResult


def _utc_now() -> datetime:
    return datetime.now(UTC)


async def validate_call(
    call: Call,
    reviewer: ExternalReviewer,
    *,
    config: TrackerConfig | None = None,
    clock: Callable[[], datetime] = _utc_now,
) -> ValidationResult:
    """Validate a call: timing, then question quality, then external review.

    A critical timing violation returns immediately; the question checks and the
    reviewer are not consulted.
    """
    config = config or TrackerConfig()
    timing = check_timing(call, now=clock(), config=config)
    if any(v.severity == Severity.CRITICAL for v in timing):
        return ValidationResult.from_violations(timing)

    question = check_question(call, config=config)
    external = await reviewer.review(call)
    return ValidationResult.from_violations(
        [*timing, *question, *external.violations],
        external_approved=external.approved,
    )
