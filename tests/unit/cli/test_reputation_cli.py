from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from calls_tracker.calls import CallStore
from calls_tracker.cli import app
from calls_tracker.models import CallOutcome

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("CALLS_DATA_PATH", "CALLS_MIN_CALLS_FOR_RANKING"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def seeded_store(store_path, make_call):
    store = CallStore(store_path)
    for outcome in (CallOutcome.WIN, CallOutcome.WIN, CallOutcome.LOSS, CallOutcome.WIN):
        store.persist(make_call("alice", outcome=outcome))
    store.persist(make_call("alice"))
    store.persist(make_call("bob", outcome=CallOutcome.LOSS))
    return store_path


def test_caller_profile(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "caller", "alice"])

    assert result.exit_code == 0, result.stdout
    assert "Alice" in result.stdout
    assert "By Category" in result.stdout
    assert "Recent Calls" in result.stdout
    assert "PENDING" in result.stdout


def test_caller_profile_json(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "caller", "Alice", "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["caller_id"] == "alice"
    assert payload["total_calls"] == 5
    assert payload["correct_calls"] == 3
    assert payload["pending_calls"] == 1
    assert payload["current_streak"] == 1


def test_unknown_caller(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "caller", "nobody"])

    assert result.exit_code == 1
    assert "Caller not found" in result.stdout


def test_leaderboard_empty(store_path) -> None:
    result = runner.invoke(app, ["--data", str(store_path), "leaderboard"])

    assert result.exit_code == 0
    assert "No ranked callers yet" in result.stdout


def test_leaderboard_ranks_only_callers_with_enough_calls(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "leaderboard", "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert [row["caller_id"] for row in payload] == ["alice"]
    assert payload[0]["rank"] == 1


def test_leaderboard_threshold_from_env(seeded_store, monkeypatch) -> None:
    monkeypatch.setenv("CALLS_MIN_CALLS_FOR_RANKING", "1")

    result = runner.invoke(app, ["--data", str(seeded_store), "leaderboard", "--json"])

    assert result.exit_code == 0, result.stdout
    assert {row["caller_id"] for row in json.loads(result.stdout)} == {"alice", "bob"}


def test_leaderboard_table(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "leaderboard"])

    assert result.exit_code == 0
    assert "Leaderboard" in result.stdout
    assert "Alice" in result.stdout


def test_stats_json(seeded_store) -> None:
    result = runner.invoke(app, ["--data", str(seeded_store), "stats", "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["total_callers"] == 2
    assert payload["total_calls"] == 6
    assert payload["resolved_calls"] == 5


def test_stats_on_empty_store(store_path) -> None:
    result = runner.invoke(app, ["--data", str(store_path), "stats"])

    assert result.exit_code == 0
    assert "Calls Tracker Stats" in result.stdout
