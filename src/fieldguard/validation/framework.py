"""Definition validator for shape descriptions.

Runs pluggable checks over a ``RawShape`` and either promotes it to a
validated ``Shape`` or raises ``ShapeDefinitionError`` with every issue
found. Checks never stop at the first problem.
"""

import logging
from abc import ABC, abstractmethod

from ..diagnostics import DiagnosticCollector
from ..models.rule import RuleSet
from ..models.shape import (
    Field,
    RawField,
    RawShape,
    Shape,
    ShapeKind,
    Variant,
)

logger = logging.getLogger(__name__)


class FieldCheck(ABC):
    """Base class for checks that look at one field at a time."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Check name for identification."""
        pass

    @abstractmethod
    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        """Execute the check.

        Args:
            field: Field with every annotation item, in source order
            collector: Collector to record issues in
        """
        pass


class ShapeCheck(ABC):
    """Base class for checks that look at a whole shape."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def check(self, shape: RawShape, collector: DiagnosticCollector) -> None:
        pass


class DefinitionValidator:
    """Checks shape definitions before synthesis."""

    def __init__(self):
        self.shape_checks: list[ShapeCheck] = []
        self.field_checks: list[FieldCheck] = []

    def add_check(self, check: FieldCheck | ShapeCheck) -> None:
        """Add a check. Field checks run in the order they were added."""
        if isinstance(check, ShapeCheck):
            self.shape_checks.append(check)
        else:
            self.field_checks.append(check)

    def run(self, shape: RawShape) -> DiagnosticCollector:
        """Run every check and return the collected issues."""
        collector = DiagnosticCollector(shape.name)

        logger.debug(
            f"Checking {shape.name} with {len(self.shape_checks)} shape "
            f"and {len(self.field_checks)} field checks"
        )

        for check in self.shape_checks:
            check.check(shape, collector)
        for field in shape.all_fields():
            for check in self.field_checks:
                check.check(field, collector)

        if collector.issues:
            logger.info(f"{shape.name}: {len(collector.issues)} definition issue(s)")
        return collector

    def validate(self, shape: RawShape) -> Shape:
        """Check ``shape`` and build the validated shape.

        Raises:
            ShapeDefinitionError: the shape has at least one error
        """
        collector = self.run(shape)
        collector.raise_if_errors()
        return promote(shape)

    def create_default_checks(self) -> None:
        """Register the standard checks in their reporting order."""
        from .checks import (
            AnnotationSyntaxCheck,
            CompletenessCheck,
            DelegateConflictCheck,
            DuplicateAttributeCheck,
            DuplicateKeyCheck,
            DuplicateRuleCheck,
            ShapeStructureCheck,
            SkipOverrideCheck,
        )

        self.add_check(ShapeStructureCheck())
        self.add_check(DuplicateKeyCheck())
        self.add_check(AnnotationSyntaxCheck())
        self.add_check(DuplicateRuleCheck())
        self.add_check(DelegateConflictCheck())
        self.add_check(DuplicateAttributeCheck())
        self.add_check(CompletenessCheck())
        self.add_check(SkipOverrideCheck())


def create_default_validator() -> DefinitionValidator:
    validator = DefinitionValidator()
    validator.create_default_checks()
    return validator


def promote(shape: RawShape) -> Shape:
    """Build the validated shape; skipped fields are dropped."""
    if shape.kind == ShapeKind.UNION:
        variants = tuple(
            Variant(v.name, v.cls, v.kind, _promote_fields(v.fields))
            for v in shape.variants
        )
        return Shape(shape.name, shape.cls, shape.kind, shape.context, variants=variants)
    return Shape(shape.name, shape.cls, shape.kind, shape.context, fields=_promote_fields(shape.fields))


def _promote_fields(fields: list[RawField]) -> tuple[Field, ...]:
    return tuple(
        Field(
            name=raw.name,
            position=raw.position,
            type=raw.type,
            rules=RuleSet(raw.rules),
            dive=raw.dive,
            rename=raw.rename,
        )
        for raw in fields
        if not raw.skip
    )
