"""Local, synchronous checks: timing and question quality."""

from __future__ import annotations

import re
from datetime import datetime

from calls_tracker.config import TrackerConfig
from calls_tracker.constants import (
    RULE_CLOSE_BEFORE_MEASUREMENT,
    RULE_CLOSING_TIME_FUTURE,
    RULE_DATA_SOURCE,
    RULE_EVENT_BUFFER,
    RULE_MAX_CLOSE_DAYS,
    RULE_MEASUREMENT_PERIOD_LENGTH,
    RULE_MIN_CLOSE_BUFFER,
    RULE_OBJECTIVE_QUESTION,
    RULE_QUESTION_FORMAT,
    RULE_QUESTION_LENGTH,
)
from calls_tracker.models import Call, TimingRegime
from calls_tracker.timing import classify_timing
from calls_tracker.validation.models import Violation

HEDGE_WORDS = re.compile(
    r"\b(?:should|might|could|would|maybe|possibly|i\s+think)\b", re.IGNORECASE
)


def check_timing(call: Call, *, now: datetime, config: TrackerConfig) -> list[Violation]:
    """Closing-time checks plus the regime buffer rule."""
    violations: list[Violation] = []
    hours_until_close = (call.closing_time - now).total_seconds() / 3600

    if call.closing_time <= now:
        violations.append(
            Violation.critical(RULE_CLOSING_TIME_FUTURE, "Closing time must be in the future")
        )
    elif hours_until_close < config.min_hours_before_close:
        violations.append(
            Violation.critical(
                RULE_MIN_CLOSE_BUFFER,
                f"Closes in {hours_until_close:.1f}h; minimum is "
                f"{config.min_hours_before_close:g}h",
            )
        )

    days_until_close = hours_until_close / 24
    if days_until_close > config.max_days_until_close:
        violations.append(
            Violation.warning(
                RULE_MAX_CLOSE_DAYS,
                f"Closes in {days_until_close:.1f} days; recommended maximum is "
                f"{config.max_days_until_close:g}",
            )
        )

    classification = classify_timing(
        call.question,
        call.closing_time,
        event_time=call.event_time,
        measurement_start=call.measurement_start,
        event_buffer_hours=config.min_hours_before_event,
    )
    if not classification.compliant:
        rule = (
            RULE_EVENT_BUFFER
            if classification.regime == TimingRegime.EVENT_BASED
            else RULE_CLOSE_BEFORE_MEASUREMENT
        )
        violations.append(Violation.critical(rule, classification.reason))

    if call.measurement_start is not None and call.measurement_end is not None:
        period_days = (call.measurement_end - call.measurement_start).total_seconds() / 86400
        if period_days > config.max_measurement_period_days:
            violations.append(
                Violation.warning(
                    RULE_MEASUREMENT_PERIOD_LENGTH,
                    f"Measurement period is {period_days:.1f} days; recommended maximum is "
                    f"{config.max_measurement_period_days:g}",
                )
            )

    return violations


def check_question(call: Call, *, config: TrackerConfig) -> list[Violation]:
    """Well-formedness checks on the synthesized question."""
    violations: list[Violation] = []
    question = call.question.strip()

    if not question.endswith("?"):
        violations.append(Violation.critical(RULE_QUESTION_FORMAT, "Question must end with '?'"))

    hedge = HEDGE_WORDS.search(question)
    if hedge:
        violations.append(
            Violation.warning(
                RULE_OBJECTIVE_QUESTION,
                f"Question contains subjective wording: '{hedge.group(0)}'",
            )
        )

    if not call.data_source.strip():
        violations.append(
            Violation.critical(RULE_DATA_SOURCE, "A data source for resolution is required")
        )

    length = len(question)
    if length < config.min_question_length:
        violations.append(
            Violation.warning(
                RULE_QUESTION_LENGTH,
                f"Question is {length} characters; minimum is {config.min_question_length}",
            )
        )
    elif length > config.max_question_length:
        violations.append(
            Violation.warning(
                RULE_QUESTION_LENGTH,
                f"Question is {length} characters; maximum is {config.max_question_length}",
            )
        )

    return violations
