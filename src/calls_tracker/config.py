"""
Configuration for the prediction-to-market pipeline.

Every threshold the parser, timing classifier, validator and reputation engine
consume is a field here, so callers (and tests) can inject their own values.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

ENV_PREFIX = "CALLS_"


class TrackerConfig(BaseModel):
    """Tunable thresholds for the calls tracker."""

    model_config = ConfigDict(frozen=True)

    # Timing
    min_hours_before_close: float = Field(default=24.0, ge=0)
    min_hours_before_event: float = Field(default=24.0, ge=0)
    default_close_buffer_hours: float = Field(default=48.0, ge=0)
    measurement_close_buffer_hours: float = Field(default=1.0, gt=0)
    max_days_until_close: float = Field(default=14.0, gt=0)
    max_measurement_period_days: float = Field(default=30.0, gt=0)
    default_deadline_days: int = Field(default=7, gt=0)

    # Question quality
    min_question_length: int = Field(default=20, ge=0)
    max_question_length: int = Field(default=200, gt=0)

    # Wagering
    default_wager: float = Field(default=0.1, gt=0)
    win_payout_multiplier: float = Field(default=2.0, ge=1)

    # Reputation
    min_calls_for_ranking: int = Field(default=3, ge=1)
    confidence_decay_factor: float = Field(default=0.95, gt=0, lt=1)
    streak_bonus_per_call: float = Field(default=0.02, ge=0)
    streak_bonus_cap: float = Field(default=0.10, ge=0)
    volume_bonus_per_call: float = Field(default=0.005, ge=0)
    volume_bonus_cap: float = Field(default=0.05, ge=0)
    profit_bonus_weight: float = Field(default=0.1, ge=0)
    profit_bonus_cap: float = Field(default=0.1, ge=0)

    # External review
    review_url: str | None = None
    review_timeout_seconds: float = Field(default=15.0, gt=0)
    review_max_retries: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def _check_question_bounds(self) -> TrackerConfig:
        if self.min_question_length > self.max_question_length:
            raise ValueError("min_question_length must not exceed max_question_length")
        return self

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> TrackerConfig:
        """Load configuration from `CALLS_*` environment variables.

        Each field maps to an upper-cased variable, e.g. `min_calls_for_ranking` is read
        from `CALLS_MIN_CALLS_FOR_RANKING`. Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds a value the field does not accept.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                overrides[name] = raw.strip()

        try:
            return cls.model_validate(overrides)
        except ValidationError as e:
            fields = ", ".join(
                f"{ENV_PREFIX}{str(err['loc'][0]).upper()}" for err in e.errors() if err["loc"]
            )
            raise ValueError(f"Invalid calls tracker configuration: {fields or e}") from e
