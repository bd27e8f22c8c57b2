"""
Centralized path defaults for Calls Tracker.

All paths are expressed relative to the current working directory. Every default can be
overridden via CLI options.
"""

from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
DEFAULT_CALLS_PATH = DEFAULT_DATA_DIR / "calls.json"

__all__ = [
    "DEFAULT_CALLS_PATH",
    "DEFAULT_DATA_DIR",
]
