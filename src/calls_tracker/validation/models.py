"""Validation result types."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """How much a violation matters."""

    CRITICAL = "critical"  # blocks approval
    WARNING = "warning"  # surfaced, does not block
    INFO = "info"  # advisory


class Violation(BaseModel):
    """A single failed (or advisory) check."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    rule: str
    message: str

    @classmethod
    def critical(cls, rule: str, message: str) -> Violation:
        return cls(severity=Severity.CRITICAL, rule=rule, message=message)

    @classmethod
    def warning(cls, rule: str, message: str) -> Violation:
        return cls(severity=Severity.WARNING, rule=rule, message=message)

    @classmethod
    def info(cls, rule: str, message: str) -> Violation:
        return cls(severity=Severity.INFO, rule=rule, message=message)


class ValidationResult(BaseModel):
    """Verdict plus itemized violations.

    `approved` is true only when no violation is critical and, for merged results,
    the external reviewer also approved.
    """

    model_config = ConfigDict(frozen=True)

    approved: bool
    violations: tuple[Violation, ...] = ()

    @classmethod
    def from_violations(
        cls, violations: Iterable[Violation], *, external_approved: bool = True
    ) -> ValidationResult:
        items = tuple(violations)
        has_critical = any(v.severity == Severity.CRITICAL for v in items)
        return cls(approved=external_approved and not has_critical, violations=items)

    @property
    def critical(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.CRITICAL]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.WARNING]

    @property
    def rules(self) -> list[str]:
        return [v.rule for v in self.violations]
