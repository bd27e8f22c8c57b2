"""JSON-file persistence for calls and caller names."""

from __future__ import annotations

import json
import os
import uuid
from datetime import datetime
from pathlib import Path

import structlog

from calls_tracker.exceptions import (
    AmbiguousCallIdError,
    CallNotFoundError,
    StoreCorruptedError,
)
from calls_tracker.models import Call, CallOutcome
from calls_tracker.paths import DEFAULT_CALLS_PATH

logger = structlog.get_logger()


class CallStore:
    """
    Persist calls to a single JSON file.

    File layout: `{"callers": {"<id>": "<name>"}, "calls": [...]}`. Every write goes
    to a temporary file that replaces the existing one, so a crash never leaves a
    half-written store behind.
    """

    def __init__(self, storage_path: str | Path = DEFAULT_CALLS_PATH) -> None:
        self.storage_path = Path(storage_path)
        self.calls: dict[str, Call] = {}
        self.callers: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.storage_path.exists():
            return
        try:
            with self.storage_path.open() as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreCorruptedError(
                f"Calls file is not valid JSON: {self.storage_path}. "
                "Fix the file or restore from backup."
            ) from e

        if not isinstance(raw, dict) or not isinstance(raw.get("calls", []), list):
            raise StoreCorruptedError(
                f"Calls file has an unexpected schema: {self.storage_path} "
                "(expected keys 'callers: {...}' and 'calls: [...]')"
            )

        for i, item in enumerate(raw.get("calls", [])):
            if not isinstance(item, dict):
                raise StoreCorruptedError(
                    f"Calls file has an invalid entry at index {i}: {self.storage_path}"
                )
            try:
                call = Call.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                raise StoreCorruptedError(
                    f"Calls file contains an invalid call at index {i}: {self.storage_path}"
                ) from e
            self.calls[call.id] = call

        callers = raw.get("callers", {})
        if isinstance(callers, dict):
            self.callers = {str(k): str(v) for k, v in callers.items()}
        for call in self.calls.values():
            self.callers.setdefault(call.caller_id, call.caller_name)

    def _save(self) -> None:
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "callers": self.callers,
            "calls": [c.to_dict() for c in self.calls.values()],
        }
        tmp_path = self.storage_path.with_suffix(
            f"{self.storage_path.suffix}.tmp.{uuid.uuid4().hex}"
        )
        with tmp_path.open("w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(self.storage_path)

    def persist(self, call: Call) -> None:
        """Insert or replace a call and remember its caller's display name."""
        self.calls[call.id] = call
        self.callers[call.caller_id] = call.caller_name
        self._save()

    def get(self, call_id: str) -> Call:
        """Get a call by full id or unique prefix.

        Raises:
            CallNotFoundError: If nothing matches.
            AmbiguousCallIdError: If the prefix matches more than one call.
        """
        if call_id in self.calls:
            return self.calls[call_id]
        matches = sorted(cid for cid in self.calls if cid.startswith(call_id))
        if not call_id or not matches:
            raise CallNotFoundError(call_id)
        if len(matches) > 1:
            raise AmbiguousCallIdError(call_id, matches)
        return self.calls[matches[0]]

    def load_caller_history(self, caller_id: str) -> list[Call]:
        """All of a caller's calls, oldest first."""
        history = [c for c in self.calls.values() if c.caller_id == caller_id]
        return sorted(history, key=lambda c: (c.created_at, c.id))

    def list_all(self) -> list[Call]:
        return sorted(self.calls.values(), key=lambda c: (c.created_at, c.id))

    def list_unresolved(self) -> list[Call]:
        return [c for c in self.list_all() if not c.is_resolved]

    def caller_names(self) -> dict[str, str]:
        """Caller id -> display name."""
        return dict(self.callers)

    def find_caller(self, name_or_id: str) -> str | None:
        """Resolve a caller id from an id or a display name (case-insensitive)."""
        if name_or_id in self.callers:
            return name_or_id
        wanted = name_or_id.strip().lower()
        for caller_id, name in self.callers.items():
            if name.lower() == wanted:
                return caller_id
        return None

    def resolve(self, call_id: str, outcome: CallOutcome, *, at: datetime | None = None) -> Call:
        """Record an outcome and save.

        Raises:
            CallNotFoundError: If the call does not exist.
            CallAlreadyResolvedError: If the call already has an outcome (nothing is saved).
        """
        call = self.get(call_id)
        call.resolve(outcome, at=at)
        self._save()
        logger.info("call_resolved", call_id=call.id, caller_id=call.caller_id, outcome=outcome.value)
        return call
