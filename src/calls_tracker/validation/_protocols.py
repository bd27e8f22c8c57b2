"""Protocol definitions for the external review boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from calls_tracker.models import Call
    from calls_tracker.validation.models import ValidationResult


class ExternalReviewer(Protocol):
    """Protocol for a remote reviewer that approves or rejects a call."""

    async def review(self, call: Call) -> ValidationResult:
        """Review a call.

        Implementations must not raise for transport failures; they report them
        as critical violations instead.
        """
        ...
