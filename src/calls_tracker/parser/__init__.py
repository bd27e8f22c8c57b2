"""Natural-language prediction parsing."""

from calls_tracker.parser._questions import format_price
from calls_tracker.parser.prediction import PredictionParser, caller_slug, parse_prediction

__all__ = [
    "PredictionParser",
    "caller_slug",
    "format_price",
    "parse_prediction",
]
