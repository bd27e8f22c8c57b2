"""Caller profiles: aggregates derived from a caller's calls.

A profile is never the source of truth. `build_profile()` folds the ordered call
history; `apply_new_call()` / `apply_resolution()` are incremental shortcuts that
must always agree with the fold.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from calls_tracker.config import TrackerConfig
from calls_tracker.models import Call, CallOutcome


@dataclass(frozen=True)
class CallerProfile:
    """Aggregate statistics for one caller.

    `total_calls` counts every non-void call, so
    `total_calls == correct_calls + incorrect_calls + pending_calls` always holds.
    Streaks are signed: positive for consecutive wins, negative for losses.
    """

    caller_id: str
    caller_name: str
    total_calls: int = 0
    correct_calls: int = 0
    incorrect_calls: int = 0
    pending_calls: int = 0
    void_calls: int = 0
    total_wagered: float = 0.0
    total_won: float = 0.0
    total_lost: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    worst_streak: int = 0

    @property
    def resolved_calls(self) -> int:
        return self.correct_calls + self.incorrect_calls

    @property
    def hit_rate(self) -> float:
        """Share of resolved (non-void) calls that won."""
        return self.correct_calls / self.resolved_calls if self.resolved_calls else 0.0

    @property
    def pnl(self) -> float:
        return self.total_won - self.total_lost


def next_streak(streak: int, won: bool) -> int:
    """Extend or reset a signed streak with one more result."""
    if won:
        return streak + 1 if streak > 0 else 1
    return streak - 1 if streak < 0 else -1


def resolution_order(calls: Iterable[Call]) -> list[Call]:
    """Resolved, non-void calls in the order their outcomes were recorded."""
    resolved = [c for c in calls if c.outcome in (CallOutcome.WIN, CallOutcome.LOSS)]
    return sorted(resolved, key=lambda c: (c.resolved_at or c.created_at, c.created_at, c.id))


def _with_result(
    profile: CallerProfile, call: Call, config: TrackerConfig
) -> CallerProfile:
    won = call.outcome == CallOutcome.WIN
    streak = next_streak(profile.current_streak, won)
    return replace(
        profile,
        correct_calls=profile.correct_calls + (1 if won else 0),
        incorrect_calls=profile.incorrect_calls + (0 if won else 1),
        total_wagered=profile.total_wagered + call.wager,
        total_won=profile.total_won + (call.wager * config.win_payout_multiplier if won else 0.0),
        total_lost=profile.total_lost + (0.0 if won else call.wager),
        current_streak=streak,
        best_streak=max(profile.best_streak, streak),
        worst_streak=min(profile.worst_streak, streak),
    )


def build_profile(
    caller_id: str,
    calls: Iterable[Call],
    *,
    caller_name: str | None = None,
    config: TrackerConfig | None = None,
) -> CallerProfile:
    """Recompute a caller's profile from scratch."""
    config = config or TrackerConfig()
    history = [c for c in calls if c.caller_id == caller_id]
    name = caller_name or (history[-1].caller_name if history else caller_id)

    profile = CallerProfile(
        caller_id=caller_id,
        caller_name=name,
        total_calls=sum(1 for c in history if c.outcome != CallOutcome.VOID),
        pending_calls=sum(1 for c in history if c.outcome is None),
        void_calls=sum(1 for c in history if c.outcome == CallOutcome.VOID),
    )
    for call in resolution_order(history):
        profile = _with_result(profile, call, config)
    return profile


def apply_new_call(profile: CallerProfile, call: Call) -> CallerProfile:
    """Count a freshly persisted (open) call."""
    return replace(
        profile,
        total_calls=profile.total_calls + 1,
        pending_calls=profile.pending_calls + 1,
    )


def apply_resolution(
    profile: CallerProfile, call: Call, *, config: TrackerConfig | None = None
) -> CallerProfile:
    """Move one pending call to its outcome.

    Only valid when `call` is the caller's most recently resolved call; otherwise
    rebuild with `build_profile()`.

    Raises:
        ValueError: If the call is still unresolved or the profile has nothing pending.
    """
    if call.outcome is None:
        raise ValueError(f"Call {call.id} has no outcome")
    if profile.pending_calls < 1:
        raise ValueError(f"Profile {profile.caller_id} has no pending calls")

    pending = replace(profile, pending_calls=profile.pending_calls - 1)
    if call.outcome == CallOutcome.VOID:
        return replace(
            pending,
            total_calls=pending.total_calls - 1,
            void_calls=pending.void_calls + 1,
        )
    return _with_result(pending, call, config or TrackerConfig())
