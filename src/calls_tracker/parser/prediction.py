"""Prediction parser: natural-language calls -> structured market proposals.

    "BTC will hit $110k by March 1"      -> "Will Bitcoin (BTC) exceed $110,000 by March 1, 2027?"
    "Lakers will beat Celtics in Game 7" -> "Will the Lakers beat the Celtics by ...?"
    "NVDA will be above $800 by end of Q1" -> "Will NVIDIA (NVDA) exceed $800 by March 31, ...?"

Parsing never raises for odd input; the worst case is a low-confidence generic question.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

import structlog

from calls_tracker._dates import end_of_day
from calls_tracker.config import TrackerConfig
from calls_tracker.lexicon import data_source_for, detect_asset, detect_category, is_sports_text
from calls_tracker.models import BetSide, Call, Category, Proposal, TimingRegime
from calls_tracker.parser._questions import (
    generic_question,
    matchup_question,
    price_question,
    value_change_question,
)
from calls_tracker.parser._rules import (
    extract_deadline,
    extract_direction,
    extract_price,
    pretag_regime,
)

logger = structlog.get_logger()

# Parser confidence by synthesis branch.
CONFIDENCE_ASSET_PRICE = 0.8
CONFIDENCE_SPORTS_MATCHUP = 0.7
CONFIDENCE_ASSET_ONLY = 0.6
CONFIDENCE_SPORTS_GENERIC = 0.4
CONFIDENCE_GENERIC = 0.3


def _utc_now() -> datetime:
    return datetime.now(UTC)


def caller_slug(name: str) -> str:
    """Derive a stable caller id from a display name."""
    return re.sub(r"\s+", "-", name.strip().lower())


class PredictionParser:
    """Parse prediction text into `Proposal`s and build `Call`s from them."""

    def __init__(
        self,
        config: TrackerConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._config = config or TrackerConfig()
        self._clock = clock

    def _leaves_close_buffer(self, day: date) -> bool:
        """False when the closing or measurement times would leave the datetime range."""
        try:
            closing = end_of_day(day) - timedelta(hours=self._config.default_close_buffer_hours)
            closing + timedelta(hours=self._config.measurement_close_buffer_hours)
        except OverflowError:
            return False
        return True

    def parse(self, text: str) -> Proposal:
        """Extract category, asset, price, direction and deadline; synthesize a question."""
        now = self._clock()
        today = now.date()
        text = text.strip()

        category = detect_category(text)
        asset = detect_asset(text)
        price = extract_price(text)
        direction = extract_direction(text)
        deadline_day = extract_deadline(text, today)
        if deadline_day is None or not self._leaves_close_buffer(deadline_day):
            deadline_day = today + timedelta(days=self._config.default_deadline_days)
        deadline = end_of_day(deadline_day)

        source = data_source_for(category, asset)
        if asset is not None and price is not None:
            question = price_question(asset, price, direction, deadline_day)
            confidence = CONFIDENCE_ASSET_PRICE
        elif asset is not None:
            question = value_change_question(asset, direction, deadline_day)
            confidence = CONFIDENCE_ASSET_ONLY
        elif is_sports_text(text):
            matchup = matchup_question(text, deadline_day)
            if matchup is not None:
                question, confidence = matchup, CONFIDENCE_SPORTS_MATCHUP
            else:
                question = generic_question(text, deadline_day)
                confidence = CONFIDENCE_SPORTS_GENERIC
            source = data_source_for(Category.SPORTS)
        else:
            question = generic_question(text, deadline_day)
            confidence = CONFIDENCE_GENERIC

        regime = pretag_regime(text)
        closing_time = deadline - timedelta(hours=self._config.default_close_buffer_hours)
        event_time: datetime | None = None
        measurement_start: datetime | None = None
        measurement_end: datetime | None = None
        if regime == TimingRegime.MEASUREMENT_PERIOD:
            measurement_start = closing_time + timedelta(
                hours=self._config.measurement_close_buffer_hours
            )
            measurement_end = deadline
        else:
            event_time = deadline

        proposal = Proposal(
            text=text,
            category=category,
            question=question,
            deadline=deadline,
            confidence=confidence,
            regime=regime,
            closing_time=closing_time,
            data_source=source.name,
            data_source_url=source.url,
            backup_source=f"Manual verification via {source.name}",
            asset=asset,
            price_target=price,
            direction=direction,
            event_time=event_time,
            measurement_start=measurement_start,
            measurement_end=measurement_end,
        )
        logger.debug(
            "prediction_parsed",
            category=category.value,
            asset=asset.ticker if asset else None,
            price=price,
            confidence=confidence,
            question=question,
        )
        return proposal

    def build_call(
        self,
        proposal: Proposal,
        caller_name: str,
        *,
        caller_id: str | None = None,
        wager: float | None = None,
    ) -> Call:
        """Create an open `Call` from a (timing-enforced) proposal."""
        return Call(
            id=uuid.uuid4().hex[:8],
            caller_id=caller_id or caller_slug(caller_name),
            caller_name=caller_name,
            prediction_text=proposal.text,
            question=proposal.question,
            category=proposal.category,
            regime=proposal.regime,
            closing_time=proposal.closing_time,
            event_time=proposal.event_time,
            measurement_start=proposal.measurement_start,
            measurement_end=proposal.measurement_end,
            data_source=proposal.data_source,
            data_source_url=proposal.data_source_url,
            backup_source=proposal.backup_source,
            wager=wager if wager is not None else self._config.default_wager,
            side=BetSide.YES,
            created_at=self._clock(),
        )

    def create_call(
        self,
        text: str,
        caller_name: str,
        *,
        caller_id: str | None = None,
        wager: float | None = None,
    ) -> Call:
        """Parse text and build a call in one step (no timing enforcement)."""
        return self.build_call(self.parse(text), caller_name, caller_id=caller_id, wager=wager)


def parse_prediction(
    text: str,
    *,
    config: TrackerConfig | None = None,
    now: datetime | None = None,
) -> Proposal:
    """Parse a single prediction with an optional fixed `now`."""
    parser = PredictionParser(config, clock=(lambda: now) if now is not None else _utc_now)
    return parser.parse(text)
