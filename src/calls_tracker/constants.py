"""Centralized policy constants for the calls tracker.

Tunable thresholds live on `TrackerConfig`; this module holds the literals that
define policy rather than tuning: the tier ladder and the stable rule identifiers
attached to validation violations. Rule ids are part of the output contract
(callers filter on them), so they must not be renamed casually.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Timing
# =============================================================================

# Hours between closing time and the event for an event-based market.
#
# Used by:
# - timing/classifier.py: compliance check and enforcement target
EVENT_BUFFER_HOURS: Final[int] = 24

# =============================================================================
# Reputation tiers
# =============================================================================

# Score thresholds (inclusive lower bound), highest first.
#
# Used by:
# - reputation/scoring.py: tier_for_score()
#
# Anything below the last threshold lands in the lowest tier. Callers with fewer
# than `min_calls_for_ranking` calls are always Unranked, regardless of score.
TIER_THRESHOLDS: Final[tuple[tuple[int, str], ...]] = (
    (80, "oracle"),
    (70, "prophet"),
    (60, "analyst"),
    (50, "speculator"),
    (40, "gambler"),
)

# =============================================================================
# Violation rule identifiers
# =============================================================================

RULE_CLOSING_TIME_FUTURE: Final = "closing_time_future"
RULE_MIN_CLOSE_BUFFER: Final = "min_close_buffer"
RULE_MAX_CLOSE_DAYS: Final = "max_close_days"
RULE_EVENT_BUFFER: Final = "event_buffer"
RULE_CLOSE_BEFORE_MEASUREMENT: Final = "close_before_measurement"
RULE_MEASUREMENT_PERIOD_LENGTH: Final = "measurement_period_length"

RULE_QUESTION_FORMAT: Final = "question_format"
RULE_OBJECTIVE_QUESTION: Final = "objective_question"
RULE_DATA_SOURCE: Final = "data_source"
RULE_QUESTION_LENGTH: Final = "question_length"

RULE_API_ERROR: Final = "api_error"
RULE_API_UNREACHABLE: Final = "api_unreachable"
RULE_REVIEW_SKIPPED: Final = "review_skipped"

RULE_UNCORRECTABLE_TIMING: Final = "uncorrectable_timing"
RULE_DUPLICATE_CALL: Final = "duplicate_call"
