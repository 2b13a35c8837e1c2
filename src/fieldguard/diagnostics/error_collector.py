"""Definition-time issue collection.

Collects every problem found while checking a shape definition and raises
them together, so a shape with five bad fields reports five issues.
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any

from ..errors import FieldguardError

logger = logging.getLogger(__name__)


class IssueSeverity(str, Enum):
    """Issue severity levels."""
    ERROR = "error"      # Shape cannot be compiled
    WARNING = "warning"  # Shape compiles, annotation is suspicious


@dataclass
class DefinitionIssue:
    """A single problem in a shape definition."""
    check: str                   # Check that found the problem (e.g. "duplicate_rule")
    message: str                 # Human readable message
    location: str                # Shape.field or Shape.Variant.field
    token: str | None = None     # Offending annotation item, when there is one
    severity: IssueSeverity = IssueSeverity.ERROR

    def __str__(self) -> str:
        token = f" (in `{self.token}`)" if self.token else ""
        return f"{self.location}: {self.message}{token}"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


class ShapeDefinitionError(FieldguardError):
    """Raised when a shape definition has one or more issues."""

    def __init__(self, shape: str, issues: list[DefinitionIssue]):
        self.shape = shape
        self.issues = list(issues)
        lines = "\n".join(f"  {issue}" for issue in self.issues)
        super().__init__(f"invalid shape `{shape}` ({len(self.issues)} issue(s)):\n{lines}")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


class DiagnosticCollector:
    """Collects definition issues for one shape."""

    def __init__(self, shape: str):
        """Initialize collector.

        Args:
            shape: Qualified name of the shape being checked
        """
        self.shape = shape
        self.issues: list[DefinitionIssue] = []

    def collect(
        self,
        check: str,
        message: str,
        location: str | None = None,
        token: str | None = None,
        severity: IssueSeverity = IssueSeverity.ERROR,
    ) -> DefinitionIssue:
        """Record an issue and return it."""
        issue = DefinitionIssue(
            check=check,
            message=message,
            location=location or self.shape,
            token=token,
            severity=severity,
        )
        self.issues.append(issue)
        logger.debug(f"Collected {check} issue at {issue.location}: {message}")
        return issue

    def has_errors(self) -> bool:
        """Check if any error-severity issues have been collected."""
        return any(issue.severity == IssueSeverity.ERROR for issue in self.issues)

    def get_issue_counts(self) -> dict[str, int]:
        """Get issue counts by check."""
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.check] = counts.get(issue.check, 0) + 1
        return counts

    def raise_if_errors(self) -> None:
        """Raise ``ShapeDefinitionError`` carrying every collected issue."""
        if self.has_errors():
            raise ShapeDefinitionError(self.shape, self.issues)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "shape": self.shape,
            "total_issues": len(self.issues),
            "issues_by_check": self.get_issue_counts(),
            "issues": [issue.to_dict() for issue in self.issues],
        }
