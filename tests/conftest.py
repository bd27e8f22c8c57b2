"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible. Only mock at system boundaries.
- Real dataclasses and Pydantic models (not dicts pretending to be models)
- Real JSON store under tmp_path for persistence tests
- respx ONLY for the HTTP review boundary
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest

from calls_tracker.models import Call, CallOutcome, Category, TimingRegime

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from calls_tracker.calls import CallStore


# ============================================================================
# Time Injection (for testability without mocking)
# ============================================================================
class FixedClock:
    """A clock that always returns a fixed time (advance it explicitly)."""

    def __init__(self, fixed_time: datetime) -> None:
        self.time = fixed_time

    def __call__(self) -> datetime:
        return self.time

    def advance(self, **kwargs: float) -> None:
        self.time = self.time + timedelta(**kwargs)


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock pinned to Thursday 2026-01-15 12:00 UTC."""
    return FixedClock(FIXED_NOW)


# ============================================================================
# Domain Object Builders (create REAL objects, not dicts)
# ============================================================================
@pytest.fixture
def make_call() -> Callable[..., Call]:
    """Factory for open event-based calls closing three days after `FIXED_NOW`."""
    counter = iter(range(1, 10_000))

    def _make(
        caller_id: str = "alice",
        *,
        outcome: CallOutcome | None = None,
        created_at: datetime | None = None,
        resolved_at: datetime | None = None,
        **overrides: Any,
    ) -> Call:
        n = next(counter)
        created = created_at or FIXED_NOW + timedelta(minutes=n)
        closing = overrides.pop("closing_time", FIXED_NOW + timedelta(days=3))
        fields: dict[str, Any] = {
            "id": f"{n:08x}",
            "caller_id": caller_id,
            "caller_name": caller_id.title(),
            "prediction_text": f"BTC will hit ${100 + n}k by March 1",
            "question": "Will Bitcoin (BTC) exceed $110,000 by March 1, 2026?",
            "category": Category.CRYPTO,
            "regime": TimingRegime.EVENT_BASED,
            "closing_time": closing,
            "event_time": closing + timedelta(days=2),
            "data_source": "CoinGecko",
            "data_source_url": "https://www.coingecko.com/en/coins/bitcoin",
            "wager": 0.1,
            "created_at": created,
        }
        fields.update(overrides)
        call = Call(**fields)
        if outcome is not None:
            call.resolve(outcome, at=resolved_at or created + timedelta(days=5))
        return call

    return _make


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "calls.json"


@pytest.fixture
def store(store_path: Path) -> CallStore:
    from calls_tracker.calls import CallStore

    return CallStore(store_path)
