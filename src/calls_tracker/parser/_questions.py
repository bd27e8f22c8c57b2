"""Question synthesis: turn extracted fields (or raw text) into a yes/no question."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from calls_tracker._dates import format_long_date
from calls_tracker.models import Direction
from calls_tracker.parser._rules import strip_date_phrases

if TYPE_CHECKING:
    from datetime import date

    from calls_tracker.models import Asset

_FILLER_PREFIX = re.compile(
    r"^(?:I\s+think|I\s+believe|I\s+predict|I\s+bet|My\s+call:|Call:|Prediction:)\s*",
    re.IGNORECASE,
)
_GONNA_PREFIX = re.compile(r"^(?:gonna|going\s+to)\s+", re.IGNORECASE)
_LEADING_WILL = re.compile(r"^will\s+", re.IGNORECASE)
_EMBEDDED_WILL = re.compile(r"\bwill\s+", re.IGNORECASE)
_TRAILING_PUNCT = re.compile(r"[.!?\s]+$")

# Lower-cased when they open a restructured subject ("The Chiefs will" -> "Will the Chiefs").
_LOWERABLE_WORDS = frozenset({"the", "a", "an", "this", "that", "my", "our", "their", "its"})

TEAMS_PATTERN = re.compile(
    r"(\w+)\s+will\s+(?:beat|defeat|win\s+against)\s+(?:the\s+)?(\w+)", re.IGNORECASE
)


def format_price(price: float) -> str:
    """Format a price target for display ('$110,000', '$1.5B', '$0.25')."""
    if price >= 1_000_000_000:
        return f"${price / 1_000_000_000:.1f}B"
    if price >= 1_000_000:
        return f"${price / 1_000_000:.1f}M"
    if price >= 1_000:
        return f"${price:,.0f}" if price == int(price) else f"${price:,.2f}"
    if price == int(price):
        return f"${price:.0f}"
    return f"${price:.6f}".rstrip("0")


def price_question(asset: Asset, price: float, direction: Direction | None, deadline: date) -> str:
    verb = "fall below" if direction == Direction.DOWN else "exceed"
    return (
        f"Will {asset.name} ({asset.ticker}) {verb} {format_price(price)} "
        f"by {format_long_date(deadline)}?"
    )


def value_change_question(asset: Asset, direction: Direction | None, deadline: date) -> str:
    verb = "decrease" if direction == Direction.DOWN else "increase"
    return f"Will {asset.name} ({asset.ticker}) {verb} in value by {format_long_date(deadline)}?"


def matchup_question(text: str, deadline: date) -> str | None:
    """Build 'Will the A beat the B by DATE?' from 'A will beat B' phrasing."""
    match = TEAMS_PATTERN.search(text)
    if match is None:
        return None
    return f"Will the {match.group(1)} beat the {match.group(2)} by {format_long_date(deadline)}?"


def _lower_leading_article(subject: str) -> str:
    first, _, rest = subject.partition(" ")
    if first.lower() in _LOWERABLE_WORDS:
        first = first.lower()
    return f"{first} {rest}".strip()


def generic_question(text: str, deadline: date) -> str:
    """Best-effort cleanup of free text into 'Will X ... by DATE?'."""
    clean = _FILLER_PREFIX.sub("", text.strip())
    clean = _GONNA_PREFIX.sub("will ", clean).strip()

    if _LEADING_WILL.match(clean):
        clean = _LEADING_WILL.sub("", clean, count=1)
    else:
        embedded = _EMBEDDED_WILL.search(clean)
        if embedded is not None:
            subject = clean[: embedded.start()].strip()
            rest = clean[embedded.end() :].strip()
            clean = f"{_lower_leading_article(subject)} {rest}".strip()
        else:
            clean = _lower_leading_article(clean)

    clean = _TRAILING_PUNCT.sub("", clean)
    clean = strip_date_phrases(clean).strip()
    if not clean:
        clean = "this prediction come true"
    return f"Will {clean} by {format_long_date(deadline)}?"
