"""Data models for rules and shapes."""

from .rule import Rule, RuleKind, RuleSet
from .shape import (
    AnnotationItem,
    Field,
    ItemKind,
    RawField,
    RawShape,
    RawVariant,
    Shape,
    ShapeKind,
    Variant,
    VariantKind,
)

__all__ = [
    "Rule",
    "RuleKind",
    "RuleSet",
    "AnnotationItem",
    "Field",
    "ItemKind",
    "RawField",
    "RawShape",
    "RawVariant",
    "Shape",
    "ShapeKind",
    "Variant",
    "VariantKind",
]
