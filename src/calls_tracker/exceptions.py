"""Exceptions raised by the calls tracker."""

from __future__ import annotations


class CallsTrackerError(Exception):
    """Base exception for calls tracker errors."""


class CallNotFoundError(CallsTrackerError, KeyError):
    """No stored call matches the given id or prefix."""

    def __init__(self, call_id: str) -> None:
        self.call_id = call_id
        super().__init__(f"Call not found: {call_id}")

    def __str__(self) -> str:
        return f"Call not found: {self.call_id}"


class AmbiguousCallIdError(CallsTrackerError, KeyError):
    """A call id prefix matches more than one stored call."""

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = matches
        super().__init__(f"Ambiguous call id '{prefix}': matches {', '.join(matches)}")

    def __str__(self) -> str:
        return f"Ambiguous call id '{self.prefix}': matches {', '.join(self.matches)}"


class CallAlreadyResolvedError(CallsTrackerError):
    """A resolved call was resolved again.

    Resolution is one-way; re-resolving would corrupt caller aggregates.
    """

    def __init__(self, call_id: str, outcome: str) -> None:
        self.call_id = call_id
        self.outcome = outcome
        super().__init__(f"Call {call_id} already resolved as {outcome}")


class StoreCorruptedError(CallsTrackerError, ValueError):
    """The calls storage file cannot be loaded."""


class ReviewError(CallsTrackerError):
    """External review request failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
