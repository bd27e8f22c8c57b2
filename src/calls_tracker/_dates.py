"""Calendar helpers shared by the parser and the timing classifier (UTC throughout)."""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime, time

MONTHS: dict[str, int] = {
    name.lower(): index for index, name in enumerate(calendar.month_name) if name
}

MONTH_NAMES_PATTERN = "|".join(name for name in calendar.month_name if name)


def month_number(name: str) -> int:
    """Return 1-12 for a full English month name (case-insensitive)."""
    return MONTHS[name.strip().lower()]


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def quarter_end(year: int, quarter: int) -> date:
    """Last calendar day of the given quarter (1-4)."""
    return last_day_of_month(year, quarter * 3)


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the target month."""
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def safe_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping an out-of-range day to the month's last day."""
    return date(year, month, max(1, min(day, calendar.monthrange(year, month)[1])))


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59), tzinfo=UTC)


def format_long_date(value: date | datetime) -> str:
    """Format as e.g. 'March 1, 2026'."""
    return f"{calendar.month_name[value.month]} {value.day}, {value.year}"
