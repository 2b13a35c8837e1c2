"""Annotation parsing and class introspection."""

from .annotation import MARKERS, Guard, guard, parse_annotation, parse_item, split_items
from .introspect import introspect, is_namedtuple, is_shape_class, is_unit
from .rules import ParseContext, RuleParseError, parse_rule

__all__ = [
    "MARKERS",
    "Guard",
    "ParseContext",
    "RuleParseError",
    "guard",
    "introspect",
    "is_namedtuple",
    "is_shape_class",
    "is_unit",
    "parse_annotation",
    "parse_item",
    "parse_rule",
    "split_items",
]
