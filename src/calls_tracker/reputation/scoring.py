"""Reputation scoring, tiers and leaderboard ranking."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict

from calls_tracker.config import TrackerConfig
from calls_tracker.constants import TIER_THRESHOLDS
from calls_tracker.models import Call, CallOutcome, Category
from calls_tracker.reputation.profile import CallerProfile


class Tier(str, Enum):
    """Named bucket over the 0-100 score."""

    ORACLE = "oracle"
    PROPHET = "prophet"
    ANALYST = "analyst"
    SPECULATOR = "speculator"
    GAMBLER = "gambler"
    REKT = "rekt"
    UNRANKED = "unranked"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Display order, best first. Unranked sits outside the ladder.
TIER_ORDER: tuple[Tier, ...] = (
    Tier.ORACLE,
    Tier.PROPHET,
    Tier.ANALYST,
    Tier.SPECULATOR,
    Tier.GAMBLER,
    Tier.REKT,
)


class ScoreDetails(BaseModel):
    """Components of the combined score (all in 0-1 units)."""

    model_config = ConfigDict(frozen=True)

    raw_hit_rate: float
    bayesian_score: float
    streak_bonus: float
    volume_bonus: float
    profit_factor: float
    profit_bonus: float
    combined: float


class ReputationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    caller_id: str
    score: int
    tier: Tier
    details: ScoreDetails


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    profile: CallerProfile
    reputation: ReputationResult


class CategoryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    wins: int
    losses: int

    @property
    def hit_rate(self) -> float:
        total = self.wins + self.losses
        return self.wins / total if total else 0.0


class AggregateStats(BaseModel):
    """Tracker-wide totals."""

    model_config = ConfigDict(frozen=True)

    total_callers: int
    total_calls: int
    resolved_calls: int
    total_wagered: float
    average_hit_rate: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def tier_for_score(score: int) -> Tier:
    """Map a score onto the ladder, ignoring the ranking minimum."""
    for threshold, name in TIER_THRESHOLDS:
        if score >= threshold:
            return Tier(name)
    return Tier.REKT


def score_caller(profile: CallerProfile, *, config: TrackerConfig | None = None) -> ReputationResult:
    """Bayesian-smoothed score with streak, volume and profit adjustments.

    Hit rate is pulled toward 50% with a prior of strength `min_calls_for_ranking`,
    so a caller with few calls cannot land at the extremes.
    """
    config = config or TrackerConfig()
    k = config.min_calls_for_ranking
    total = profile.total_calls
    correct = profile.correct_calls

    raw_hit_rate = correct / total if total > 0 else 0.0
    bayesian = (correct + k / 2) / (total + k)

    streak_bonus = _clamp(
        profile.current_streak * config.streak_bonus_per_call,
        -config.streak_bonus_cap,
        config.streak_bonus_cap,
    )
    volume_bonus = min(total * config.volume_bonus_per_call, config.volume_bonus_cap)

    profit_factor = (
        (profile.total_won - profile.total_lost) / profile.total_wagered
        if profile.total_wagered > 0
        else 0.0
    )
    profit_bonus = _clamp(
        profit_factor * config.profit_bonus_weight,
        -config.profit_bonus_cap,
        config.profit_bonus_cap,
    )

    combined = _clamp(bayesian + streak_bonus + volume_bonus + profit_bonus, 0.0, 1.0)
    score = round(combined * 100)
    tier = Tier.UNRANKED if total < k else tier_for_score(score)

    return ReputationResult(
        caller_id=profile.caller_id,
        score=score,
        tier=tier,
        details=ScoreDetails(
            raw_hit_rate=raw_hit_rate,
            bayesian_score=bayesian,
            streak_bonus=streak_bonus,
            volume_bonus=volume_bonus,
            profit_factor=profit_factor,
            profit_bonus=profit_bonus,
            combined=combined,
        ),
    )


def weighted_accuracy(calls: Iterable[Call], *, decay: float = 0.95) -> float:
    """Recency-weighted hit rate over resolved, non-void calls (oldest to newest).

    The newest call has weight 1, the one before it `decay`, then `decay**2`, ...
    Returns 0.0 when there is nothing resolved.
    """
    resolved = sorted(
        (c for c in calls if c.outcome in (CallOutcome.WIN, CallOutcome.LOSS)),
        key=lambda c: c.created_at,
    )
    if not resolved:
        return 0.0

    n = len(resolved)
    weights = np.power(decay, np.arange(n - 1, -1, -1, dtype=float))
    wins = np.array([1.0 if c.outcome == CallOutcome.WIN else 0.0 for c in resolved])
    return float(np.dot(wins, weights) / weights.sum())


def rank_callers(
    profiles: Iterable[CallerProfile], *, config: TrackerConfig | None = None
) -> list[LeaderboardEntry]:
    """Leaderboard of callers with at least `min_calls_for_ranking` calls.

    Sorted by score descending; ties break on caller id so output is reproducible.
    """
    config = config or TrackerConfig()
    scored = [
        (profile, score_caller(profile, config=config))
        for profile in profiles
        if profile.total_calls >= config.min_calls_for_ranking
    ]
    scored.sort(key=lambda item: (-item[1].score, item[0].caller_id))
    return [
        LeaderboardEntry(rank=index, profile=profile, reputation=reputation)
        for index, (profile, reputation) in enumerate(scored, start=1)
    ]


def category_breakdown(calls: Iterable[Call]) -> list[CategoryStats]:
    """Per-category wins and losses, in `Category` declaration order."""
    wins: dict[Category, int] = {}
    losses: dict[Category, int] = {}
    for call in calls:
        if call.outcome == CallOutcome.WIN:
            wins[call.category] = wins.get(call.category, 0) + 1
        elif call.outcome == CallOutcome.LOSS:
            losses[call.category] = losses.get(call.category, 0) + 1

    return [
        CategoryStats(category=category, wins=wins.get(category, 0), losses=losses.get(category, 0))
        for category in Category
        if category in wins or category in losses
    ]


def summarize_stats(calls: Iterable[Call], profiles: Iterable[CallerProfile]) -> AggregateStats:
    """Totals across every caller.

    The average hit rate only includes callers with at least one resolved call.
    """
    all_calls = list(calls)
    all_profiles = list(profiles)
    rates = [p.hit_rate for p in all_profiles if p.resolved_calls > 0]
    return AggregateStats(
        total_callers=len(all_profiles),
        total_calls=len(all_calls),
        resolved_calls=sum(1 for c in all_calls if c.is_resolved),
        total_wagered=sum(c.wager for c in all_calls),
        average_hit_rate=float(np.mean(rates)) if rates else 0.0,
    )
