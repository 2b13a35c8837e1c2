"""Definition-time diagnostics for fieldguard shapes."""

from .error_collector import (
    DefinitionIssue,
    DiagnosticCollector,
    IssueSeverity,
    ShapeDefinitionError,
)

__all__ = [
    "DefinitionIssue",
    "DiagnosticCollector",
    "IssueSeverity",
    "ShapeDefinitionError",
]
