"""Reputation engine: caller profiles, scores, tiers and the leaderboard."""

from calls_tracker.reputation.profile import (
    CallerProfile,
    apply_new_call,
    apply_resolution,
    build_profile,
    next_streak,
    resolution_order,
)
from calls_tracker.reputation.scoring import (
    TIER_ORDER,
    AggregateStats,
    CategoryStats,
    LeaderboardEntry,
    ReputationResult,
    ScoreDetails,
    Tier,
    category_breakdown,
    rank_callers,
    score_caller,
    summarize_stats,
    tier_for_score,
    weighted_accuracy,
)

__all__ = [
    "TIER_ORDER",
    "AggregateStats",
    "CallerProfile",
    "CategoryStats",
    "LeaderboardEntry",
    "ReputationResult",
    "ScoreDetails",
    "Tier",
    "apply_new_call",
    "apply_resolution",
    "build_profile",
    "category_breakdown",
    "next_streak",
    "rank_callers",
    "resolution_order",
    "score_caller",
    "summarize_stats",
    "tier_for_score",
    "weighted_accuracy",
]
