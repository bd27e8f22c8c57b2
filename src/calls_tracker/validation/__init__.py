"""Call validation: local timing and question checks plus external review."""

from calls_tracker.validation._checks import check_question, check_timing
from calls_tracker.validation._protocols import ExternalReviewer
from calls_tracker.validation.models import Severity, ValidationResult, Violation
from calls_tracker.validation.review import ReviewClient, SkippedReview, review_payload
from calls_tracker.validation.validator import validate_call

__all__ = [
    "ExternalReviewer",
    "ReviewClient",
    "Severity",
    "SkippedReview",
    "ValidationResult",
    "Violation",
    "check_question",
    "check_timing",
    "review_payload",
    "validate_call",
]
