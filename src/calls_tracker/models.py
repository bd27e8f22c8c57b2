"""Core data model: proposals parsed from text and the calls built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from calls_tracker.exceptions import CallAlreadyResolvedError


class Category(str, Enum):
    """Market category used to pick a resolution data source."""

    CRYPTO = "crypto"
    SPORTS = "sports"
    MUSIC = "music"
    STREAMING = "streaming"
    ECONOMIC = "economic"
    WEATHER = "weather"
    ELECTIONS = "elections"
    TECHNOLOGY = "technology"


class Direction(str, Enum):
    """Predicted direction of a price move."""

    UP = "up"
    DOWN = "down"


class TimingRegime(str, Enum):
    """How a market resolves, which decides the closing-time rule."""

    EVENT_BASED = "event_based"  # a discrete event happens by a deadline
    MEASUREMENT_PERIOD = "measurement_period"  # a quantity is measured at/over a window


class BetSide(str, Enum):
    YES = "yes"
    NO = "no"


class CallStatus(str, Enum):
    """Lifecycle status of a call."""

    OPEN = "open"
    RESOLVED = "resolved"
    VOID = "void"


class CallOutcome(str, Enum):
    """Outcome of a call from the caller's point of view."""

    WIN = "win"
    LOSS = "loss"
    VOID = "void"


class CallPhase(str, Enum):
    """Where an unresolved call sits relative to its timing."""

    OPEN = "open"  # betting still open
    CLOSED = "closed"  # betting closed, outcome not yet observable
    READY = "ready"  # event/measurement time passed; can be resolved


@dataclass(frozen=True)
class Asset:
    """A tradable asset recognised in prediction text."""

    ticker: str
    name: str
    is_crypto: bool


@dataclass(frozen=True)
class Proposal:
    """
    Structured market proposal produced by the parser.

    Transient: created and discarded within one pipeline run. Timing fields are
    rewritten by `enforce_timing()` to match the authoritative classification.
    """

    text: str
    category: Category
    question: str
    deadline: datetime
    confidence: float  # 0-1, how sure the parser is about its reading
    regime: TimingRegime
    closing_time: datetime
    data_source: str
    data_source_url: str
    backup_source: str
    asset: Asset | None = None
    price_target: float | None = None
    direction: Direction | None = None
    event_time: datetime | None = None
    measurement_start: datetime | None = None
    measurement_end: datetime | None = None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


@dataclass
class Call:
    """
    One caller's structured, timed, wagered prediction.

    Created open by the pipeline and mutated only by `resolve()`. The caller always
    backs their own stated outcome, so `side` is YES.
    """

    id: str
    caller_id: str
    caller_name: str
    prediction_text: str
    question: str
    category: Category
    regime: TimingRegime
    closing_time: datetime
    data_source: str
    data_source_url: str
    wager: float
    event_time: datetime | None = None
    measurement_start: datetime | None = None
    measurement_end: datetime | None = None
    backup_source: str | None = None
    side: BetSide = BetSide.YES
    market_id: str | None = None

    # Tracking
    status: CallStatus = CallStatus.OPEN
    outcome: CallOutcome | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    resolved_at: datetime | None = None

    @property
    def is_resolved(self) -> bool:
        return self.outcome is not None

    def resolve(self, outcome: CallOutcome, *, at: datetime | None = None) -> None:
        """Record the outcome. One-way: a second resolution raises."""
        if self.outcome is not None:
            raise CallAlreadyResolvedError(self.id, self.outcome.value)
        self.outcome = outcome
        self.status = CallStatus.VOID if outcome == CallOutcome.VOID else CallStatus.RESOLVED
        self.resolved_at = at or datetime.now(UTC)

    @property
    def resolution_deadline(self) -> datetime | None:
        """When the outcome becomes observable."""
        if self.regime == TimingRegime.MEASUREMENT_PERIOD:
            return self.measurement_end or self.measurement_start
        return self.event_time

    def phase(self, now: datetime) -> CallPhase:
        """Classify an unresolved call as open, closed, or ready to resolve."""
        deadline = self.resolution_deadline
        if deadline is not None and deadline < now:
            return CallPhase.READY
        if self.closing_time < now:
            return CallPhase.CLOSED
        return CallPhase.OPEN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "caller_id": self.caller_id,
            "caller_name": self.caller_name,
            "prediction_text": self.prediction_text,
            "question": self.question,
            "category": self.category.value,
            "regime": self.regime.value,
            "closing_time": self.closing_time.isoformat(),
            "event_time": _iso(self.event_time),
            "measurement_start": _iso(self.measurement_start),
            "measurement_end": _iso(self.measurement_end),
            "data_source": self.data_source,
            "data_source_url": self.data_source_url,
            "backup_source": self.backup_source,
            "wager": self.wager,
            "side": self.side.value,
            "market_id": self.market_id,
            "status": self.status.value,
            "outcome": self.outcome.value if self.outcome else None,
            "created_at": self.created_at.isoformat(),
            "resolved_at": _iso(self.resolved_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Call:
        """Create from dictionary."""
        outcome_raw = data.get("outcome")
        return cls(
            id=data["id"],
            caller_id=data["caller_id"],
            caller_name=data.get("caller_name", data["caller_id"]),
            prediction_text=data["prediction_text"],
            question=data["question"],
            category=Category(data["category"]),
            regime=TimingRegime(data["regime"]),
            closing_time=datetime.fromisoformat(data["closing_time"]),
            event_time=_parse_dt(data.get("event_time")),
            measurement_start=_parse_dt(data.get("measurement_start")),
            measurement_end=_parse_dt(data.get("measurement_end")),
            data_source=data["data_source"],
            data_source_url=data.get("data_source_url", ""),
            backup_source=data.get("backup_source"),
            wager=float(data["wager"]),
            side=BetSide(data.get("side", BetSide.YES.value)),
            market_id=data.get("market_id"),
            status=CallStatus(data.get("status", CallStatus.OPEN.value)),
            outcome=CallOutcome(outcome_raw) if outcome_raw else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            resolved_at=_parse_dt(data.get("resolved_at")),
        )

    def __str__(self) -> str:
        state = self.outcome.value.upper() if self.outcome else self.status.value.upper()
        return (
            f"[{state}] {self.question}\n"
            f"  Caller: {self.caller_name} ({self.caller_id})\n"
            f"  Closes: {self.closing_time.isoformat()}\n"
            f"  Wager: {self.wager:g} on {self.side.value.upper()}"
        )
