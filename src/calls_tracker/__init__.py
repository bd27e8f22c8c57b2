"""
Calls Tracker.

Turns free-form predictions into timing-safe market questions and keeps a
reputation score for every caller.
"""

__version__ = "0.1.0"

from calls_tracker.config import TrackerConfig

# Configure structlog once at import time (quiet by default).
from calls_tracker.logging import configure_structlog

configure_structlog()

__all__ = [
    "TrackerConfig",
    "__version__",
]
