"""Tests for the external review boundary (respx at the HTTP boundary)."""

from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest
import respx

from calls_tracker.config import TrackerConfig
from calls_tracker.models import TimingRegime
from calls_tracker.validation import ReviewClient, Severity, SkippedReview, review_payload

REVIEW_URL = "https://review.example.com/api/validate"


@pytest.mark.asyncio
@respx.mock
async def test_review_parses_remote_verdict(make_call) -> None:
    route = respx.post(REVIEW_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "approved": True,
                "violations": [
                    {"severity": "warning", "rule": "vague_source", "message": "Be specific"},
                    {"severity": "bogus", "message": "Unknown severity"},
                ],
            },
        )
    )

    async with ReviewClient(REVIEW_URL, max_retries=1) as reviewer:
        result = await reviewer.review(make_call())

    assert route.called
    assert result.approved is True
    assert [(v.severity, v.rule) for v in result.violations] == [
        (Severity.WARNING, "vague_source"),
        (Severity.WARNING, "api"),
    ]


@pytest.mark.asyncio
@respx.mock
async def test_review_posts_call_fields(make_call) -> None:
    route = respx.post(REVIEW_URL).mock(
        return_value=httpx.Response(200, json={"approved": True})
    )
    call = make_call()

    async with ReviewClient(REVIEW_URL, max_retries=1) as reviewer:
        await reviewer.review(call)

    body = json.loads(route.calls.last.request.content)
    assert body["question"] == call.question
    assert body["marketType"] == "event_based"
    assert body["category"] == "crypto"
    assert body["dataSource"] == "CoinGecko"
    assert body["backupSource"] == "Manual verification via CoinGecko"
    assert "measurementStart" not in body


def test_payload_includes_measurement_window(make_call) -> None:
    call = make_call(regime=TimingRegime.MEASUREMENT_PERIOD, event_time=None)
    call.measurement_start = call.closing_time + timedelta(hours=1)

    body = review_payload(call)

    assert body["measurementStart"] == call.measurement_start.isoformat()
    assert body["measurementEnd"] is None


@pytest.mark.asyncio
@respx.mock
async def test_http_error_becomes_api_error(make_call) -> None:
    respx.post(REVIEW_URL).mock(return_value=httpx.Response(503, text="maintenance"))

    async with ReviewClient(REVIEW_URL, max_retries=1) as reviewer:
        result = await reviewer.review(make_call())

    assert result.approved is False
    assert [(v.severity, v.rule) for v in result.violations] == [(Severity.CRITICAL, "api_error")]
    assert "503" in result.violations[0].message


@pytest.mark.asyncio
@respx.mock
async def test_invalid_json_becomes_api_error(make_call) -> None:
    respx.post(REVIEW_URL).mock(return_value=httpx.Response(200, text="<html>nope</html>"))

    async with ReviewClient(REVIEW_URL, max_retries=1) as reviewer:
        result = await reviewer.review(make_call())

    assert result.approved is False
    assert result.rules == ["api_error"]


@pytest.mark.asyncio
@respx.mock
async def test_missing_verdict_becomes_api_error(make_call) -> None:
    respx.post(REVIEW_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

    async with ReviewClient(REVIEW_URL, max_retries=1) as reviewer:
        result = await reviewer.review(make_call())

    assert result.rules == ["api_error"]


@pytest.mark.asyncio
@respx.mock
async def test_network_failure_retries_then_reports_unreachable(make_call) -> None:
    route = respx.post(REVIEW_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    async with ReviewClient(REVIEW_URL, max_retries=2) as reviewer:
        result = await reviewer.review(make_call())

    assert route.call_count == 2
    assert result.approved is False
    assert [(v.severity, v.rule) for v in result.violations] == [
        (Severity.CRITICAL, "api_unreachable")
    ]


@pytest.mark.asyncio
@respx.mock
async def test_transient_network_failure_recovers(make_call) -> None:
    route = respx.post(REVIEW_URL).mock(
        side_effect=[
            httpx.ConnectError("blip"),
            httpx.Response(200, json={"approved": True, "violations": []}),
        ]
    )

    async with ReviewClient(REVIEW_URL, max_retries=3) as reviewer:
        result = await reviewer.review(make_call())

    assert route.call_count == 2
    assert result.approved is True


def test_from_config_requires_url() -> None:
    with pytest.raises(ValueError, match="CALLS_REVIEW_URL"):
        ReviewClient.from_config(TrackerConfig())


@pytest.mark.asyncio
async def test_from_config_uses_configured_url() -> None:
    config = TrackerConfig(review_url=REVIEW_URL, review_max_retries=4)

    reviewer = ReviewClient.from_config(config)
    try:
        assert reviewer._url == REVIEW_URL
        assert reviewer._max_retries == 4
    finally:
        await reviewer.aclose()


@pytest.mark.asyncio
async def test_skipped_review_approves_visibly(make_call) -> None:
    result = await SkippedReview().review(make_call())

    assert result.approved is True
    assert [(v.severity, v.rule) for v in result.violations] == [(Severity.INFO, "review_skipped")]
