"""Extraction rules for prediction text.

Each cascade is an ordered list of `(pattern, extractor)` pairs evaluated
first-match-wins. An extractor may return `None` to let the next rule try.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, timedelta

from calls_tracker._dates import (
    MONTH_NAMES_PATTERN,
    add_months,
    last_day_of_month,
    month_number,
    quarter_end,
    safe_date,
)
from calls_tracker.models import Direction, TimingRegime

# =============================================================================
# Price
# =============================================================================

_SUFFIX_MULTIPLIERS = {"k": 1_000.0, "m": 1_000_000.0, "b": 1_000_000_000.0}

PRICE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "$110k", "$110,000", "$4000", "$0.5"
    re.compile(r"\$(\d+(?:,\d{3})*(?:\.\d+)?[kmb]?)\b", re.IGNORECASE),
    # "110k dollars", "110000 USD"
    re.compile(r"\b(\d+(?:,\d{3})*(?:\.\d+)?[kmb]?)\s*(?:dollars?|usd)\b", re.IGNORECASE),
)


def _amount(raw: str) -> float:
    cleaned = raw.replace(",", "")
    multiplier = _SUFFIX_MULTIPLIERS.get(cleaned[-1].lower())
    if multiplier is not None:
        return float(cleaned[:-1]) * multiplier
    return float(cleaned)


def extract_price(text: str) -> float | None:
    """Return the first currency amount in the text, with k/m/b suffixes applied."""
    for pattern in PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            return _amount(match.group(1))
    return None


# =============================================================================
# Direction
# =============================================================================

UP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\bwill\s+(?:hit|reach|exceed|surpass|break|top|go\s+(?:above|over|past))\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:above|over|higher\s+than|more\s+than|at\s+least)\s+\$", re.IGNORECASE),
    re.compile(r"\b(?:pump|moon|surge|rally|spike|soar|climb)\w*", re.IGNORECASE),
    re.compile(r"\b(?:bullish|long|buy)\b", re.IGNORECASE),
)

DOWN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\bwill\s+(?:drop|fall|crash|dump|tank|dip|decline)\s+(?:to|below|under)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:below|under|less\s+than|lower\s+than|at\s+most)\s+\$", re.IGNORECASE),
    re.compile(r"\b(?:dump|crash|tank|collapse|plunge|crater)\w*", re.IGNORECASE),
    re.compile(r"\b(?:bearish|short|sell|put)\b", re.IGNORECASE),
)


def extract_direction(text: str) -> Direction | None:
    """Classify the predicted move; `None` when the text carries no signal."""
    if any(p.search(text) for p in UP_PATTERNS):
        return Direction.UP
    if any(p.search(text) for p in DOWN_PATTERNS):
        return Direction.DOWN
    return None


# =============================================================================
# Deadline
# =============================================================================

DeadlineExtractor = Callable[[re.Match[str], date], date | None]

_MONTH_DATE = (
    rf"\b(?:by|before)\s+({MONTH_NAMES_PATTERN})"
    r"(?:\s+(\d{1,2})(?!\d)(?:st|nd|rd|th)?)?"
    r"(?:\s*,?\s*(\d{4}))?\b"
)
_QUARTER_END = r"\bend\s+of\s+Q([1-4])(?:\s+(\d{4}))?\b"
_NEXT_PERIOD = r"\bnext\s+(week|month|quarter|year)\b"
_IN_OFFSET = r"\b(?:in|within)\s+(\d+)\s+(days?|weeks?|months?)\b"
_THIS_PERIOD = r"\bthis\s+(week|month|quarter)\b"


def _month_date(match: re.Match[str], today: date) -> date | None:
    month = month_number(match.group(1))
    day = int(match.group(2)) if match.group(2) else None

    def _build(year: int) -> date:
        if day is None:
            return last_day_of_month(year, month)
        return safe_date(year, month, day)

    if match.group(3):
        return _build(int(match.group(3)))
    # Without a year, a date that already passed means next year's.
    candidate = _build(today.year)
    return candidate if candidate >= today else _build(today.year + 1)


def _quarter_end(match: re.Match[str], today: date) -> date | None:
    quarter = int(match.group(1))
    if match.group(2):
        return quarter_end(int(match.group(2)), quarter)
    candidate = quarter_end(today.year, quarter)
    if candidate < today:
        return quarter_end(today.year + 1, quarter)
    return candidate


def _next_period(match: re.Match[str], today: date) -> date | None:
    unit = match.group(1).lower()
    if unit == "week":
        return today + timedelta(days=7)
    if unit == "month":
        return add_months(today, 1)
    if unit == "quarter":
        return add_months(today, 3)
    return add_months(today, 12)


def _in_offset(match: re.Match[str], today: date) -> date | None:
    count = int(match.group(1))
    unit = match.group(2).lower().rstrip("s")
    if unit == "day":
        return today + timedelta(days=count)
    if unit == "week":
        return today + timedelta(weeks=count)
    return add_months(today, count)


def _this_period(match: re.Match[str], today: date) -> date | None:
    unit = match.group(1).lower()
    if unit == "week":
        # Upcoming Sunday; a full week ahead when today is Sunday.
        return today + timedelta(days=6 - today.weekday() or 7)
    if unit == "month":
        return last_day_of_month(today.year, today.month)
    return quarter_end(today.year, (today.month - 1) // 3 + 1)


DEADLINE_RULES: tuple[tuple[re.Pattern[str], DeadlineExtractor], ...] = (
    (re.compile(_MONTH_DATE, re.IGNORECASE), _month_date),
    (re.compile(_QUARTER_END, re.IGNORECASE), _quarter_end),
    (re.compile(_NEXT_PERIOD, re.IGNORECASE), _next_period),
    (re.compile(_IN_OFFSET, re.IGNORECASE), _in_offset),
    (re.compile(_THIS_PERIOD, re.IGNORECASE), _this_period),
)

# Date phrases stripped from free text before a synthesized deadline is appended.
DATE_PHRASE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\s+(?:by\s+)?end\s+of\s+Q[1-4](?:\s+\d{4})?\b", re.IGNORECASE),
    re.compile(r"\s+" + _MONTH_DATE.removeprefix(r"\b"), re.IGNORECASE),
    re.compile(r"\s+(?:next|this)\s+(?:week|month|quarter|year)\b", re.IGNORECASE),
    re.compile(r"\s+(?:in|within)\s+\d+\s+(?:days?|weeks?|months?)\b", re.IGNORECASE),
)


def extract_deadline(text: str, today: date) -> date | None:
    """Return the first deadline the rules can read from the text, else `None`.

    A rule whose phrase names an impossible date ("by March 1, 0000", "in 999999
    months") counts as no match.
    """
    for pattern, extractor in DEADLINE_RULES:
        match = pattern.search(text)
        if match is None:
            continue
        try:
            result = extractor(match, today)
        except (ValueError, OverflowError):
            continue
        if result is not None:
            return result
    return None


def strip_date_phrases(text: str) -> str:
    for pattern in DATE_PHRASE_PATTERNS:
        text = pattern.sub("", text)
    return text


# =============================================================================
# Regime pre-tag
# =============================================================================

_PERIOD_WORDS = re.compile(
    r"\b(?:over|during|throughout|across|period|week|month|quarter)\b", re.IGNORECASE
)
_BY_WORD = re.compile(r"\bby\b", re.IGNORECASE)


def pretag_regime(text: str) -> TimingRegime:
    """Advisory regime guess from raw text.

    The timing classifier re-derives the regime from the synthesized question and
    its answer wins when the two disagree.
    """
    if _PERIOD_WORDS.search(text) and not _BY_WORD.search(text):
        return TimingRegime.MEASUREMENT_PERIOD
    return TimingRegime.EVENT_BASED
