"""Protocol definitions for the market settlement boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from calls_tracker.models import Call


class MarketSettlement(Protocol):
    """Protocol for opening a market for an approved call."""

    async def open_market(self, call: Call) -> str:
        """Open a market and return its identifier."""
        ...
