"""Tests for the JSON call store - real files under tmp_path."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from calls_tracker.calls import CallStore
from calls_tracker.exceptions import (
    AmbiguousCallIdError,
    CallAlreadyResolvedError,
    CallNotFoundError,
    StoreCorruptedError,
)
from calls_tracker.models import CallOutcome, CallStatus


def test_missing_file_is_empty_store(store: CallStore) -> None:
    assert store.list_all() == []
    assert store.caller_names() == {}


def test_persist_and_reload(store_path, make_call) -> None:
    store = CallStore(store_path)
    call = make_call("alice")
    store.persist(call)

    reloaded = CallStore(store_path)

    assert reloaded.get(call.id) == call
    assert reloaded.caller_names() == {"alice": "Alice"}
    raw = json.loads(store_path.read_text())
    assert set(raw) == {"callers", "calls"}


def test_no_temp_files_left_behind(store_path, make_call) -> None:
    store = CallStore(store_path)
    store.persist(make_call())
    store.persist(make_call())

    assert [p.name for p in store_path.parent.iterdir()] == ["calls.json"]


class TestGet:
    def test_by_unique_prefix(self, store: CallStore, make_call) -> None:
        call = make_call(id="abcd1234")
        store.persist(call)
        store.persist(make_call(id="ffff0000"))

        assert store.get("abcd") is call

    def test_ambiguous_prefix(self, store: CallStore, make_call) -> None:
        store.persist(make_call(id="abcd1234"))
        store.persist(make_call(id="abce5678"))

        with pytest.raises(AmbiguousCallIdError, match="abcd1234, abce5678"):
            store.get("abc")

    def test_not_found(self, store: CallStore) -> None:
        with pytest.raises(CallNotFoundError, match="Call not found: nope"):
            store.get("nope")

    def test_empty_id_is_not_a_prefix_of_everything(self, store: CallStore, make_call) -> None:
        store.persist(make_call())

        with pytest.raises(CallNotFoundError):
            store.get("")


def test_history_is_ordered_by_creation(store: CallStore, make_call, fixed_clock) -> None:
    late = make_call("alice", created_at=fixed_clock.time + timedelta(days=2))
    early = make_call("alice", created_at=fixed_clock.time)
    store.persist(late)
    store.persist(early)
    store.persist(make_call("bob"))

    assert [c.id for c in store.load_caller_history("alice")] == [early.id, late.id]


def test_list_unresolved(store: CallStore, make_call) -> None:
    open_call = make_call()
    store.persist(open_call)
    store.persist(make_call(outcome=CallOutcome.WIN))

    assert store.list_unresolved() == [open_call]


def test_find_caller_by_name_or_id(store: CallStore, make_call) -> None:
    store.persist(make_call("crypto-kid", caller_name="Crypto Kid"))

    assert store.find_caller("crypto-kid") == "crypto-kid"
    assert store.find_caller("crypto kid") == "crypto-kid"
    assert store.find_caller("nobody") is None


class TestResolve:
    def test_resolve_persists(self, store_path, make_call, fixed_clock) -> None:
        store = CallStore(store_path)
        call = make_call()
        store.persist(call)

        store.resolve(call.id[:4], CallOutcome.LOSS, at=fixed_clock.time)

        reloaded = CallStore(store_path).get(call.id)
        assert reloaded.outcome == CallOutcome.LOSS
        assert reloaded.status == CallStatus.RESOLVED
        assert reloaded.resolved_at == fixed_clock.time

    def test_second_resolve_fails_and_file_is_untouched(self, store_path, make_call) -> None:
        store = CallStore(store_path)
        call = make_call()
        store.persist(call)
        store.resolve(call.id, CallOutcome.WIN)
        before = store_path.read_text()

        with pytest.raises(CallAlreadyResolvedError):
            store.resolve(call.id, CallOutcome.LOSS)

        assert store_path.read_text() == before
        assert CallStore(store_path).get(call.id).outcome == CallOutcome.WIN


class TestCorruption:
    def test_invalid_json(self, store_path) -> None:
        store_path.write_text("{not json")

        with pytest.raises(StoreCorruptedError, match="not valid JSON"):
            CallStore(store_path)

    def test_wrong_shape(self, store_path) -> None:
        store_path.write_text(json.dumps([1, 2, 3]))

        with pytest.raises(StoreCorruptedError, match="unexpected schema"):
            CallStore(store_path)

    def test_invalid_call_entry(self, store_path) -> None:
        store_path.write_text(json.dumps({"calls": [{"id": "x"}]}))

        with pytest.raises(StoreCorruptedError, match="index 0"):
            CallStore(store_path)

    def test_corruption_is_a_value_error(self, store_path) -> None:
        store_path.write_text("{not json")

        with pytest.raises(ValueError):
            CallStore(store_path)
