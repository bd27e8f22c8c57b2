from __future__ import annotations

import json

import pytest
import respx
from httpx import Response
from typer.testing import CliRunner

from calls_tracker.cli import app

runner = CliRunner()

REVIEW_URL = "https://review.example.com/validate"


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("CALLS_REVIEW_URL", "CALLS_DATA_PATH", "CALLS_MIN_CALLS_FOR_RANKING"):
        monkeypatch.delenv(name, raising=False)


def _saved_id(stdout: str) -> str:
    line = next(line for line in stdout.splitlines() if "Call saved:" in line)
    return line.split("Call saved:")[1].strip()


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "calls-tracker v0.1.0" in result.stdout


def test_invalid_env_config_exits_with_error(monkeypatch) -> None:
    monkeypatch.setenv("CALLS_MIN_CALLS_FOR_RANKING", "lots")

    result = runner.invoke(app, ["version"])

    assert result.exit_code == 1
    assert "CALLS_MIN_CALLS_FOR_RANKING" in result.stdout


def test_parse_json() -> None:
    result = runner.invoke(app, ["parse", "BTC will hit $110k by March 1", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["category"] == "crypto"
    assert payload["asset"] == "BTC"
    assert payload["price_target"] == 110_000
    assert payload["regime"] == "event_based"
    assert "UTC" in payload["reason"]


def test_parse_json_keeps_bracketed_text_verbatim() -> None:
    result = runner.invoke(
        app, ["parse", "Taylor Swift will drop the [deluxe] album next month", "--json"]
    )

    assert result.exit_code == 0
    assert "[deluxe]" in json.loads(result.stdout)["question"]


def test_parse_table() -> None:
    result = runner.invoke(app, ["parse", "ETH will drop below $3k by March 1"])

    assert result.exit_code == 0
    assert "Parsed Prediction" in result.stdout
    assert "Ethereum" in result.stdout


def test_call_offline_saves(store_path) -> None:
    result = runner.invoke(
        app,
        ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Crypto Kid", "--offline"],
    )

    assert result.exit_code == 0, result.stdout
    assert "APPROVED" in result.stdout
    assert "Call saved" in result.stdout
    raw = json.loads(store_path.read_text())
    assert raw["callers"] == {"crypto-kid": "Crypto Kid"}
    assert raw["calls"][0]["id"] == _saved_id(result.stdout)


def test_call_rejects_non_positive_wager(store_path) -> None:
    result = runner.invoke(
        app,
        ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Kid", "-w", "0", "--offline"],
    )

    assert result.exit_code == 1
    assert "Wager must be positive" in result.stdout
    assert not store_path.exists()


def test_call_requires_review_url_unless_offline(store_path) -> None:
    result = runner.invoke(
        app, ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Kid"]
    )

    assert result.exit_code == 1
    assert "CALLS_REVIEW_URL" in result.stdout


def test_call_with_external_review(store_path, monkeypatch) -> None:
    monkeypatch.setenv("CALLS_REVIEW_URL", REVIEW_URL)

    with respx.mock:
        route = respx.post(REVIEW_URL).mock(
            return_value=Response(200, json={"approved": True, "violations": []})
        )
        result = runner.invoke(
            app, ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Kid"]
        )

    assert result.exit_code == 0, result.stdout
    assert route.called
    assert "Call saved" in result.stdout


def test_call_rejected_by_review_exits_1(store_path, monkeypatch) -> None:
    monkeypatch.setenv("CALLS_REVIEW_URL", REVIEW_URL)

    with respx.mock:
        respx.post(REVIEW_URL).mock(
            return_value=Response(
                200,
                json={
                    "approved": False,
                    "violations": [
                        {"rule": "vague", "message": "Too vague", "severity": "critical"}
                    ],
                },
            )
        )
        result = runner.invoke(
            app, ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Kid"]
        )

    assert result.exit_code == 1
    assert "REJECTED" in result.stdout
    assert "vague" in result.stdout
    assert not store_path.exists()


def test_duplicate_call_is_rejected(store_path) -> None:
    args = ["--data", str(store_path), "call", "BTC will hit $110k in 5 days", "-c", "Kid", "--offline"]
    assert runner.invoke(app, args).exit_code == 0

    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert "duplicate_call" in result.stdout


def test_resolve_lists_and_resolves_once(store_path) -> None:
    data = ["--data", str(store_path)]
    saved = runner.invoke(app, [*data, "call", "BTC will hit $110k in 5 days", "-c", "Kid", "--offline"])
    call_id = _saved_id(saved.stdout)

    listing = runner.invoke(app, [*data, "resolve"])
    assert listing.exit_code == 0
    assert "Unresolved Calls" in listing.stdout
    assert call_id in listing.stdout

    resolved = runner.invoke(app, [*data, "resolve", call_id, "--outcome", "win"])
    assert resolved.exit_code == 0, resolved.stdout
    assert f"Resolved {call_id} as WIN" in resolved.stdout

    again = runner.invoke(app, [*data, "resolve", call_id, "-o", "loss"])
    assert again.exit_code == 1
    assert "already resolved" in again.stdout

    empty = runner.invoke(app, [*data, "resolve"])
    assert "No unresolved calls" in empty.stdout


def test_resolve_requires_outcome(store_path) -> None:
    result = runner.invoke(app, ["--data", str(store_path), "resolve", "abc"])

    assert result.exit_code == 1
    assert "--outcome is required" in result.stdout


def test_resolve_unknown_call(store_path) -> None:
    result = runner.invoke(app, ["--data", str(store_path), "resolve", "nope", "-o", "win"])

    assert result.exit_code == 1
    assert "Call not found: nope" in result.stdout


def test_corrupt_store_exits_with_error(store_path) -> None:
    store_path.write_text("{broken")

    result = runner.invoke(app, ["--data", str(store_path), "resolve"])

    assert result.exit_code == 1
    assert "not valid JSON" in result.stdout
    assert store_path.read_text() == "{broken"


def test_data_path_from_env(store_path, monkeypatch) -> None:
    monkeypatch.setenv("CALLS_DATA_PATH", str(store_path))

    result = runner.invoke(app, ["call", "BTC will hit $110k in 5 days", "-c", "Kid", "--offline"])

    assert result.exit_code == 0, result.stdout
    assert store_path.exists()
