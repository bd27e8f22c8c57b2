"""Timing classifier: no bettor may act on information unavailable to others.

Two regimes, two rules:

- Event-based: the market resolves because something happens by a deadline.
  Betting must close at least `EVENT_BUFFER_HOURS` before the event.
- Measurement-period: the market resolves by measuring a value at/over a window.
  Betting must close strictly before the window opens.

The classifier reads the regime from the synthesized question (not the raw text),
and `enforce_timing()` moves the closing time until the rule holds.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime, timedelta

import structlog
from pydantic import BaseModel, ConfigDict

from calls_tracker._dates import (
    MONTH_NAMES_PATTERN,
    end_of_day,
    month_number,
    quarter_end,
    safe_date,
    start_of_day,
)
from calls_tracker.constants import EVENT_BUFFER_HOURS
from calls_tracker.models import Proposal, TimingRegime

logger = structlog.get_logger()

# "above $100000 on 2026-04-01": a value observed on a specific day.
_MEASURED_ON = re.compile(r"\bon\s+(\d{4}-\d{2}-\d{2})\b", re.IGNORECASE)
_PRICE_THRESHOLD = re.compile(
    r"\b(?:above|below|reach|exceed)\s+\$?\d[\d,]*(?:\.\d+)?[kmb]?\b", re.IGNORECASE
)

_BY_ISO_DATE = re.compile(r"\bby\s+(\d{4}-\d{2}-\d{2})\b", re.IGNORECASE)
_BY_QUARTER = re.compile(r"\bby\s+(?:the\s+)?(?:end\s+of\s+)?Q([1-4])\s*(\d{4})\b", re.IGNORECASE)
_BY_MONTH = re.compile(
    rf"\bby\s+(?:the\s+)?(?:end\s+of\s+)?({MONTH_NAMES_PATTERN})"
    r"(?:\s+(\d{1,2})(?!\d)(?:st|nd|rd|th)?)?(?:\s*,?\s*(\d{4}))?\b",
    re.IGNORECASE,
)

# Month-only deadlines anchor on the 28th so the event time never overshoots a short month.
_MONTH_ONLY_ANCHOR_DAY = 28


class TimingClassification(BaseModel):
    """Regime, anchor times and compliance verdict for one proposal."""

    model_config = ConfigDict(frozen=True)

    regime: TimingRegime
    closing_time: datetime
    event_time: datetime | None = None
    measurement_start: datetime | None = None
    measurement_end: datetime | None = None
    compliant: bool
    reason: str

    @property
    def anchor_time(self) -> datetime:
        """The time the closing rule is measured against."""
        anchor = (
            self.event_time if self.regime == TimingRegime.EVENT_BASED else self.measurement_start
        )
        if anchor is None:
            raise ValueError(f"{self.regime.value} classification has no anchor time")
        return anchor


def _iso_day(raw: str) -> date | None:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _by_iso_date(question: str, closing_time: datetime) -> datetime | None:
    match = _BY_ISO_DATE.search(question)
    if match:
        day = _iso_day(match.group(1))
        if day is not None:
            return end_of_day(day)
    return None


def _by_quarter(question: str, closing_time: datetime) -> datetime | None:
    match = _BY_QUARTER.search(question)
    if match:
        return end_of_day(quarter_end(int(match.group(2)), int(match.group(1))))
    return None


def _by_month(question: str, closing_time: datetime) -> datetime | None:
    match = _BY_MONTH.search(question)
    if match:
        month = month_number(match.group(1))
        if match.group(3):
            year = int(match.group(3))
        else:
            year = closing_time.year + (1 if month < closing_time.month else 0)
        if match.group(2):
            return end_of_day(safe_date(year, month, int(match.group(2))))
        return end_of_day(safe_date(year, month, _MONTH_ONLY_ANCHOR_DAY))
    return None


_DEADLINE_READERS = (_by_iso_date, _by_quarter, _by_month)


def _deadline_from_question(question: str, closing_time: datetime) -> datetime | None:
    """Read an explicit "by ..." deadline out of a question.

    A phrase naming a date outside the calendar ("by March 1, 0000") is skipped.
    """
    for reader in _DEADLINE_READERS:
        try:
            deadline = reader(question, closing_time)
        except (ValueError, OverflowError):
            continue
        if deadline is not None:
            return deadline
    return None


def _fmt(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC")


def _event_based(
    closing_time: datetime, event_time: datetime, buffer_hours: float
) -> TimingClassification:
    gap_hours = (event_time - closing_time).total_seconds() / 3600
    compliant = event_time - closing_time >= timedelta(hours=buffer_hours)
    if compliant:
        reason = f"Event-based: closes {gap_hours:.1f}h before the event at {_fmt(event_time)}"
    else:
        reason = (
            f"VIOLATION: closes only {gap_hours:.1f}h before the event at {_fmt(event_time)} "
            f"(minimum {buffer_hours:g}h)"
        )
    return TimingClassification(
        regime=TimingRegime.EVENT_BASED,
        closing_time=closing_time,
        event_time=event_time,
        compliant=compliant,
        reason=reason,
    )


def _measurement_period(
    closing_time: datetime,
    measurement_start: datetime,
    measurement_end: datetime | None = None,
) -> TimingClassification:
    compliant = closing_time < measurement_start
    if compliant:
        reason = (
            f"Measurement period: closes at {_fmt(closing_time)}, "
            f"before measurement starts at {_fmt(measurement_start)}"
        )
    else:
        reason = (
            f"VIOLATION: closes at {_fmt(closing_time)}, not before measurement "
            f"starts at {_fmt(measurement_start)}"
        )
    return TimingClassification(
        regime=TimingRegime.MEASUREMENT_PERIOD,
        closing_time=closing_time,
        measurement_start=measurement_start,
        measurement_end=measurement_end,
        compliant=compliant,
        reason=reason,
    )


def classify_timing(
    question: str,
    closing_time: datetime,
    *,
    event_time: datetime | None = None,
    measurement_start: datetime | None = None,
    event_buffer_hours: float = EVENT_BUFFER_HOURS,
) -> TimingClassification:
    """Classify a question into a timing regime and check its closing time.

    Dates found in the question win. The explicit `event_time` / `measurement_start`
    are used only when the question carries no date. With neither, the event is
    assumed to land `event_buffer_hours` after close, which is compliant.
    """
    measured = _MEASURED_ON.search(question)
    if measured and _PRICE_THRESHOLD.search(question):
        day = _iso_day(measured.group(1))
        if day is not None:
            return _measurement_period(closing_time, start_of_day(day), end_of_day(day))

    deadline = _deadline_from_question(question, closing_time)
    if deadline is not None:
        return _event_based(closing_time, deadline, event_buffer_hours)

    if measurement_start is not None:
        return _measurement_period(closing_time, measurement_start)
    if event_time is not None:
        return _event_based(closing_time, event_time, event_buffer_hours)

    return TimingClassification(
        regime=TimingRegime.EVENT_BASED,
        closing_time=closing_time,
        event_time=closing_time + timedelta(hours=event_buffer_hours),
        compliant=True,
        reason=(
            f"Event-based: no date in question; assuming the event {event_buffer_hours:g}h "
            "after close"
        ),
    )


def classify_proposal(
    proposal: Proposal, *, event_buffer_hours: float = EVENT_BUFFER_HOURS
) -> TimingClassification:
    """Classify a proposal, passing its own event/measurement times as fallbacks."""
    return classify_timing(
        proposal.question,
        proposal.closing_time,
        event_time=proposal.event_time,
        measurement_start=proposal.measurement_start,
        event_buffer_hours=event_buffer_hours,
    )


def enforce_timing(
    proposal: Proposal,
    *,
    now: datetime,
    event_buffer_hours: float = EVENT_BUFFER_HOURS,
    measurement_buffer_hours: float = 1.0,
) -> Proposal | None:
    """Return a compliant copy of the proposal, or `None` if no future closing time works.

    Compliant proposals keep their closing time. Either way the returned proposal's
    regime and anchor times are taken from the classification, so enforcing twice
    yields the same proposal.
    """
    classification = classify_proposal(proposal, event_buffer_hours=event_buffer_hours)
    closing_time: datetime | None = proposal.closing_time

    if not classification.compliant:
        buffer_hours = (
            event_buffer_hours
            if classification.regime == TimingRegime.EVENT_BASED
            else measurement_buffer_hours
        )
        try:
            closing_time = classification.anchor_time - timedelta(hours=buffer_hours)
        except OverflowError:
            # Anchor at the start of the calendar: no earlier closing time exists.
            closing_time = None

        if closing_time is None or closing_time <= now:
            logger.info(
                "timing_uncorrectable",
                question=proposal.question,
                regime=classification.regime.value,
                anchor=classification.anchor_time.isoformat(),
            )
            return None

        logger.info(
            "timing_adjusted",
            question=proposal.question,
            regime=classification.regime.value,
            old_closing=proposal.closing_time.isoformat(),
            new_closing=closing_time.isoformat(),
        )

    if classification.regime == TimingRegime.EVENT_BASED:
        return replace(
            proposal,
            regime=classification.regime,
            closing_time=closing_time,
            event_time=classification.event_time,
            measurement_start=None,
            measurement_end=None,
        )
    return replace(
        proposal,
        regime=classification.regime,
        closing_time=closing_time,
        event_time=None,
        measurement_start=classification.measurement_start,
        measurement_end=classification.measurement_end or proposal.measurement_end,
    )
