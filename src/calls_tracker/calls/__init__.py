"""Call lifecycle: the data model, persistence, deduplication and the pipeline."""

from calls_tracker.calls._protocols import MarketSettlement
from calls_tracker.calls.dedup import SeenPredictions, prediction_fingerprint
from calls_tracker.calls.pipeline import CallPipeline, Submission
from calls_tracker.calls.store import CallStore
from calls_tracker.models import (
    BetSide,
    Call,
    CallOutcome,
    CallPhase,
    CallStatus,
    Category,
    Proposal,
    TimingRegime,
)

__all__ = [
    "BetSide",
    "Call",
    "CallOutcome",
    "CallPhase",
    "CallPipeline",
    "CallStatus",
    "CallStore",
    "Category",
    "MarketSettlement",
    "Proposal",
    "SeenPredictions",
    "Submission",
    "TimingRegime",
    "prediction_fingerprint",
]
