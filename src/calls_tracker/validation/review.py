"""External review boundary.

`ReviewClient` posts a call to a remote validation endpoint. Transport problems never
propagate: they come back as a single critical violation so a failed review can
never be mistaken for an approval.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from calls_tracker.constants import RULE_API_ERROR, RULE_API_UNREACHABLE, RULE_REVIEW_SKIPPED
from calls_tracker.exceptions import ReviewError
from calls_tracker.models import TimingRegime
from calls_tracker.validation.models import Severity, ValidationResult, Violation

if TYPE_CHECKING:
    from types import TracebackType

    from calls_tracker.config import TrackerConfig
    from calls_tracker.models import Call

logger = structlog.get_logger()

_RETRY_WAIT = wait_exponential(multiplier=0.5, min=0.5, max=8)
_MAX_ERROR_BODY = 200


def review_payload(call: Call) -> dict[str, Any]:
    """Build the JSON body sent to the reviewer."""
    body: dict[str, Any] = {
        "question": call.question,
        "closingTime": call.closing_time.isoformat(),
        "eventTime": call.event_time.isoformat() if call.event_time else None,
        "marketType": call.regime.value,
        "category": call.category.value,
        "dataSource": call.data_source,
        "backupSource": call.backup_source or f"Manual verification via {call.data_source}",
    }
    if call.regime == TimingRegime.MEASUREMENT_PERIOD:
        body["measurementStart"] = (
            call.measurement_start.isoformat() if call.measurement_start else None
        )
        body["measurementEnd"] = call.measurement_end.isoformat() if call.measurement_end else None
    return body


def _parse_review(data: Any) -> ValidationResult:
    if not isinstance(data, dict) or not isinstance(data.get("approved"), bool):
        raise ReviewError("Review response is missing a boolean 'approved' field")

    violations: list[Violation] = []
    for raw in data.get("violations") or []:
        if not isinstance(raw, dict):
            continue
        try:
            severity = Severity(raw.get("severity") or Severity.WARNING.value)
        except ValueError:
            severity = Severity.WARNING
        violations.append(
            Violation(
                severity=severity,
                rule=str(raw.get("rule") or "api"),
                message=str(raw.get("message") or "Unknown violation"),
            )
        )
    return ValidationResult(approved=data["approved"], violations=tuple(violations))


class ReviewClient:
    """
    httpx-backed `ExternalReviewer`.

    Use as an async context manager:

        async with ReviewClient(url) as reviewer:
            result = await reviewer.review(call)
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 15.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._max_retries = max_retries
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: TrackerConfig) -> ReviewClient:
        """Build a client from `TrackerConfig`.

        Raises:
            ValueError: If `review_url` is not configured.
        """
        if not config.review_url:
            raise ValueError("CALLS_REVIEW_URL is not set; use --offline to skip review")
        return cls(
            config.review_url,
            timeout=config.review_timeout_seconds,
            max_retries=config.review_max_retries,
        )

    async def __aenter__(self) -> ReviewClient:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _post(self, body: dict[str, Any]) -> Any:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
            stop=stop_after_attempt(self._max_retries),
            wait=_RETRY_WAIT,
            reraise=True,
        ):
            with attempt:
                response = await self._client.post(self._url, json=body)
                if response.status_code >= 400:
                    raise ReviewError(
                        f"Review API returned {response.status_code}: "
                        f"{response.text[:_MAX_ERROR_BODY]}",
                        status_code=response.status_code,
                    )
                try:
                    return response.json()
                except ValueError as e:
                    raise ReviewError("Review API returned invalid JSON") from e

        raise AssertionError("AsyncRetrying should have returned or raised")  # pragma: no cover

    async def review(self, call: Call) -> ValidationResult:
        try:
            data = await self._post(review_payload(call))
            return _parse_review(data)
        except ReviewError as e:
            logger.warning("review_failed", call_id=call.id, error=str(e), status=e.status_code)
            return ValidationResult.from_violations([Violation.critical(RULE_API_ERROR, str(e))])
        except httpx.HTTPError as e:
            logger.warning("review_failed", call_id=call.id, error=str(e))
            return ValidationResult.from_violations(
                [Violation.critical(RULE_API_UNREACHABLE, f"Cannot reach review API: {e}")]
            )


class SkippedReview:
    """Offline reviewer: approves, but leaves an `info` note so the skip is visible."""

    async def review(self, call: Call) -> ValidationResult:
        return ValidationResult.from_violations(
            [Violation.info(RULE_REVIEW_SKIPPED, "External review skipped (offline mode)")]
        )
