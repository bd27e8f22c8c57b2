"""Prediction-to-market pipeline.

    text -> parse -> dedup -> enforce timing -> build call -> validate
         -> (open market) -> persist

Content problems never raise; they come back on the `Submission` as violations.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from calls_tracker.calls._protocols import MarketSettlement
from calls_tracker.calls.dedup import SeenPredictions
from calls_tracker.calls.store import CallStore
from calls_tracker.config import TrackerConfig
from calls_tracker.constants import RULE_DUPLICATE_CALL, RULE_UNCORRECTABLE_TIMING
from calls_tracker.models import Call, CallOutcome, Proposal
from calls_tracker.parser import PredictionParser, caller_slug
from calls_tracker.reputation import CallerProfile, build_profile
from calls_tracker.timing import TimingClassification, classify_proposal, enforce_timing
from calls_tracker.validation import ExternalReviewer, ValidationResult, Violation, validate_call

logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Submission:
    """Everything one `submit()` produced.

    `call` is set only when the call was approved and persisted.
    """

    proposal: Proposal
    classification: TimingClassification
    validation: ValidationResult
    call: Call | None = None
    adjusted: bool = False

    @property
    def accepted(self) -> bool:
        return self.call is not None


class CallPipeline:
    """Turn predictions into persisted calls and keep caller profiles in step."""

    def __init__(
        self,
        store: CallStore,
        reviewer: ExternalReviewer,
        *,
        config: TrackerConfig | None = None,
        seen: SeenPredictions | None = None,
        settlement: MarketSettlement | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.reviewer = reviewer
        self.config = config or TrackerConfig()
        self.seen = seen if seen is not None else SeenPredictions.from_calls(store.list_all())
        self.settlement = settlement
        self._clock = clock
        self.parser = PredictionParser(self.config, clock=clock)

    def _classify(self, proposal: Proposal) -> TimingClassification:
        return classify_proposal(proposal, event_buffer_hours=self.config.min_hours_before_event)

    async def submit(
        self,
        text: str,
        caller_name: str,
        *,
        caller_id: str | None = None,
        wager: float | None = None,
    ) -> Submission:
        """Run one prediction through the whole pipeline."""
        caller_id = caller_id or caller_slug(caller_name)
        proposal = self.parser.parse(text)

        if self.seen.seen(caller_id, text):
            logger.info("duplicate_prediction", caller_id=caller_id, text=text)
            return Submission(
                proposal=proposal,
                classification=self._classify(proposal),
                validation=ValidationResult.from_violations(
                    [
                        Violation.critical(
                            RULE_DUPLICATE_CALL,
                            f"{caller_name} has already made this call",
                        )
                    ]
                ),
            )

        enforced = enforce_timing(
            proposal,
            now=self._clock(),
            event_buffer_hours=self.config.min_hours_before_event,
            measurement_buffer_hours=self.config.measurement_close_buffer_hours,
        )
        if enforced is None:
            classification = self._classify(proposal)
            logger.info("call_rejected", caller_id=caller_id, rule=RULE_UNCORRECTABLE_TIMING)
            return Submission(
                proposal=proposal,
                classification=classification,
                validation=ValidationResult.from_violations(
                    [
                        Violation.critical(
                            RULE_UNCORRECTABLE_TIMING,
                            f"No future closing time satisfies the timing rules: "
                            f"{classification.reason}",
                        )
                    ]
                ),
            )

        classification = self._classify(enforced)
        adjusted = enforced.closing_time != proposal.closing_time
        call = self.parser.build_call(enforced, caller_name, caller_id=caller_id, wager=wager)

        validation = await validate_call(call, self.reviewer, config=self.config, clock=self._clock)
        if not validation.approved:
            logger.info(
                "call_rejected",
                caller_id=caller_id,
                call_id=call.id,
                rules=[v.rule for v in validation.critical],
            )
            return Submission(
                proposal=enforced,
                classification=classification,
                validation=validation,
                adjusted=adjusted,
            )

        if self.settlement is not None:
            call.market_id = await self.settlement.open_market(call)

        self.store.persist(call)
        self.seen.add(caller_id, text)
        logger.info(
            "call_persisted",
            call_id=call.id,
            caller_id=caller_id,
            closing_time=call.closing_time.isoformat(),
            market_id=call.market_id,
        )
        return Submission(
            proposal=enforced,
            classification=classification,
            validation=validation,
            call=call,
            adjusted=adjusted,
        )

    def resolve(self, call_id: str, outcome: CallOutcome) -> CallerProfile:
        """Resolve a call and return the caller's recomputed profile.

        Raises:
            CallNotFoundError: If the call does not exist.
            CallAlreadyResolvedError: If the call was already resolved.
        """
        call = self.store.resolve(call_id, outcome, at=self._clock())
        return self.profile(call.caller_id)

    def profile(self, caller_id: str) -> CallerProfile:
        return build_profile(
            caller_id,
            self.store.load_caller_history(caller_id),
            caller_name=self.store.callers.get(caller_id),
            config=self.config,
        )

    def profiles(self) -> list[CallerProfile]:
        return [self.profile(caller_id) for caller_id in sorted(self.store.callers)]
