"""Tests for the local timing and question checks."""

from __future__ import annotations

from datetime import timedelta

import pytest

from calls_tracker.config import TrackerConfig
from calls_tracker.models import TimingRegime
from calls_tracker.validation import Severity, ValidationResult, Violation, check_question, check_timing

CONFIG = TrackerConfig()


def rules(violations: list[Violation]) -> dict[str, Severity]:
    return {v.rule: v.severity for v in violations}


class TestCheckTiming:
    def test_clean_call_has_no_violations(self, make_call, fixed_clock) -> None:
        assert check_timing(make_call(), now=fixed_clock.time, config=CONFIG) == []

    def test_closing_in_past_is_critical(self, make_call, fixed_clock) -> None:
        call = make_call(closing_time=fixed_clock.time - timedelta(hours=1))

        found = rules(check_timing(call, now=fixed_clock.time, config=CONFIG))

        assert found["closing_time_future"] == Severity.CRITICAL
        assert "min_close_buffer" not in found

    def test_closing_too_soon_is_critical(self, make_call, fixed_clock) -> None:
        call = make_call(closing_time=fixed_clock.time + timedelta(hours=10))

        found = rules(check_timing(call, now=fixed_clock.time, config=CONFIG))

        assert found == {"min_close_buffer": Severity.CRITICAL}

    def test_minimum_comes_from_config(self, make_call, fixed_clock) -> None:
        call = make_call(closing_time=fixed_clock.time + timedelta(hours=10))
        config = TrackerConfig(min_hours_before_close=6)

        assert check_timing(call, now=fixed_clock.time, config=config) == []

    def test_far_closing_is_only_a_warning(self, make_call, fixed_clock) -> None:
        call = make_call(
            closing_time=fixed_clock.time + timedelta(days=20),
            question="Will Bitcoin (BTC) exceed $110,000 by March 1, 2026?",
        )

        found = rules(check_timing(call, now=fixed_clock.time, config=CONFIG))

        assert found == {"max_close_days": Severity.WARNING}

    def test_event_buffer_violation(self, make_call, fixed_clock) -> None:
        call = make_call(
            closing_time=fixed_clock.time + timedelta(days=2),
            question="Will it happen by 2026-01-17?",
        )

        found = check_timing(call, now=fixed_clock.time, config=CONFIG)

        assert rules(found) == {"event_buffer": Severity.CRITICAL}
        assert "VIOLATION" in found[0].message

    def test_measurement_violation(self, make_call, fixed_clock) -> None:
        call = make_call(
            closing_time=fixed_clock.time + timedelta(days=5),
            question="Will BTC be above $100000 on 2026-01-18?",
            regime=TimingRegime.MEASUREMENT_PERIOD,
        )

        found = rules(check_timing(call, now=fixed_clock.time, config=CONFIG))

        assert found == {"close_before_measurement": Severity.CRITICAL}

    def test_long_measurement_period_warns(self, make_call, fixed_clock) -> None:
        call = make_call(question="Will SOL stay strong?", regime=TimingRegime.MEASUREMENT_PERIOD)
        call.event_time = None
        call.measurement_start = call.closing_time + timedelta(hours=1)
        call.measurement_end = call.measurement_start + timedelta(days=45)

        found = rules(check_timing(call, now=fixed_clock.time, config=CONFIG))

        assert found == {"measurement_period_length": Severity.WARNING}


class TestCheckQuestion:
    def test_clean_question(self, make_call) -> None:
        assert check_question(make_call(), config=CONFIG) == []

    def test_missing_question_mark_is_critical(self, make_call) -> None:
        call = make_call(question="Bitcoin exceeds $110,000 by March 1, 2026")

        assert rules(check_question(call, config=CONFIG)) == {
            "question_format": Severity.CRITICAL
        }

    @pytest.mark.parametrize("word", ["should", "might", "could", "maybe", "I think"])
    def test_hedge_words_warn(self, make_call, word: str) -> None:
        call = make_call(question=f"Will Bitcoin {word} exceed $110,000 by March 1, 2026?")

        assert rules(check_question(call, config=CONFIG)) == {
            "objective_question": Severity.WARNING
        }

    def test_hedge_word_inside_other_word_is_fine(self, make_call) -> None:
        call = make_call(question="Will the Mighty Ducks win the cup by March 1, 2026?")

        assert check_question(call, config=CONFIG) == []

    def test_missing_data_source_is_critical(self, make_call) -> None:
        call = make_call(data_source="  ")

        assert rules(check_question(call, config=CONFIG)) == {"data_source": Severity.CRITICAL}

    def test_length_bounds_warn(self, make_call) -> None:
        short = make_call(question="Will BTC pump?")
        long = make_call(question="Will " + "very " * 50 + "long things happen?")

        assert rules(check_question(short, config=CONFIG)) == {"question_length": Severity.WARNING}
        assert rules(check_question(long, config=CONFIG)) == {"question_length": Severity.WARNING}


class TestValidationResult:
    def test_approved_iff_no_critical(self) -> None:
        warn = Violation.warning("max_close_days", "far")
        crit = Violation.critical("data_source", "missing")

        assert ValidationResult.from_violations([warn]).approved is True
        assert ValidationResult.from_violations([warn, crit]).approved is False

    def test_external_rejection_blocks_approval(self) -> None:
        result = ValidationResult.from_violations([], external_approved=False)
        assert result.approved is False

    def test_accessors(self) -> None:
        result = ValidationResult.from_violations(
            [Violation.critical("a", "x"), Violation.warning("b", "y"), Violation.info("c", "z")]
        )

        assert [v.rule for v in result.critical] == ["a"]
        assert [v.rule for v in result.warnings] == ["b"]
        assert result.rules == ["a", "b", "c"]
