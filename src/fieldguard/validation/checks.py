"""Definition checks.

Field checks run per field in this order: annotation syntax, duplicate
rule, delegate conflict, duplicate attribute, completeness.
"""

import logging

from ..diagnostics import DiagnosticCollector, IssueSeverity
from ..models.rule import RuleKind
from ..models.shape import ItemKind, RawField, RawShape, ShapeKind, VariantKind
from .framework import FieldCheck, ShapeCheck

logger = logging.getLogger(__name__)


class ShapeStructureCheck(ShapeCheck):
    """Report problems found while introspecting the shape's class."""

    @property
    def name(self) -> str:
        return "shape"

    def check(self, shape: RawShape, collector: DiagnosticCollector) -> None:
        for message in shape.issues:
            collector.collect(self.name, message)


class DuplicateKeyCheck(ShapeCheck):
    """Two fields of one record may not share an error key."""

    @property
    def name(self) -> str:
        return "duplicate_key"

    def check(self, shape: RawShape, collector: DiagnosticCollector) -> None:
        if shape.kind == ShapeKind.RECORD:
            groups = [shape.fields]
        elif shape.kind == ShapeKind.UNION:
            groups = [v.fields for v in shape.variants if v.kind == VariantKind.RECORD]
        else:
            return

        for fields in groups:
            seen: set[str] = set()
            for field in fields:
                if field.skip:
                    continue
                key = field.rename or field.name
                if key in seen:
                    collector.collect(
                        self.name,
                        f"duplicate field key `{key}`",
                        location=field.location,
                    )
                seen.add(key)


class AnnotationSyntaxCheck(FieldCheck):
    """Report items that could not be parsed."""

    @property
    def name(self) -> str:
        return "annotation_syntax"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        for item in field.items_of(ItemKind.INVALID):
            collector.collect(self.name, item.message, location=field.location, token=item.text)


class DuplicateRuleCheck(FieldCheck):
    """A rule kind may appear at most once per field."""

    @property
    def name(self) -> str:
        return "duplicate_rule"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        seen: set[RuleKind] = set()
        for item in field.items_of(ItemKind.RULE):
            if item.rule.kind in seen:
                collector.collect(
                    self.name,
                    f"duplicate rule `{item.rule.name}`",
                    location=field.location,
                    token=item.text,
                )
            seen.add(item.rule.kind)


class DelegateConflictCheck(FieldCheck):
    """A delegated field may not carry rules of its own."""

    @property
    def name(self) -> str:
        return "delegate_conflict"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        if not field.dive:
            return
        reported: set[RuleKind] = set()
        for item in field.items_of(ItemKind.RULE):
            if item.rule.kind in reported:
                continue
            reported.add(item.rule.kind)
            collector.collect(
                self.name,
                f"`{item.rule.name}` may not be used together with dive",
                location=field.location,
                token=item.text,
            )


class DuplicateAttributeCheck(FieldCheck):
    """Markers are singular; ``rename`` only applies to named fields."""

    @property
    def name(self) -> str:
        return "duplicate_attribute"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        for kind in (ItemKind.DIVE, ItemKind.SKIP, ItemKind.RENAME):
            for item in field.items_of(kind)[1:]:
                collector.collect(
                    self.name,
                    f"duplicate attribute `{kind.value}`",
                    location=field.location,
                    token=item.text,
                )

        if field.positional:
            for item in field.items_of(ItemKind.RENAME)[:1]:
                collector.collect(
                    self.name,
                    "`rename` is not allowed on positional fields",
                    location=field.location,
                    token=item.text,
                )


class CompletenessCheck(FieldCheck):
    """Every field is validated, delegated or explicitly skipped."""

    @property
    def name(self) -> str:
        return "completeness"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        if field.rules or field.dive or field.skip:
            return
        collector.collect(
            self.name,
            "field has no validation, mark it skip if intentional",
            location=field.location,
        )


class SkipOverrideCheck(FieldCheck):
    """Warn when ``skip`` silences other annotations of the same field."""

    @property
    def name(self) -> str:
        return "skip_override"

    def check(self, field: RawField, collector: DiagnosticCollector) -> None:
        if not field.skip:
            return
        ignored = [
            item.text for item in field.items
            if item.kind in (ItemKind.RULE, ItemKind.DIVE)
        ]
        if ignored:
            collector.collect(
                self.name,
                f"field is skipped, ignoring: {', '.join(ignored)}",
                location=field.location,
                severity=IssueSeverity.WARNING,
            )
