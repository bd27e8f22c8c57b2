"""Duplicate-prediction detection."""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable

from calls_tracker.models import Call

_WHITESPACE = re.compile(r"\s+")
_TRAILING_PUNCT = re.compile(r"[.!?\s]+$")


def normalize_prediction(text: str) -> str:
    return _TRAILING_PUNCT.sub("", _WHITESPACE.sub(" ", text.strip().lower()))


def prediction_fingerprint(caller_id: str, text: str) -> str:
    """md5 of caller id plus normalized text."""
    payload = f"{caller_id}:{normalize_prediction(text)}".encode()
    return hashlib.md5(payload, usedforsecurity=False).hexdigest()


class SeenPredictions:
    """Fingerprints of predictions already turned into calls.

    Passed into the pipeline explicitly; seed it from persisted calls with `from_calls()`.
    """

    def __init__(self, fingerprints: Iterable[str] = ()) -> None:
        self._seen: set[str] = set(fingerprints)

    @classmethod
    def from_calls(cls, calls: Iterable[Call]) -> SeenPredictions:
        return cls(prediction_fingerprint(c.caller_id, c.prediction_text) for c in calls)

    def seen(self, caller_id: str, text: str) -> bool:
        return prediction_fingerprint(caller_id, text) in self._seen

    def add(self, caller_id: str, text: str) -> str:
        fingerprint = prediction_fingerprint(caller_id, text)
        self._seen.add(fingerprint)
        return fingerprint

    def __len__(self) -> int:
        return len(self._seen)
