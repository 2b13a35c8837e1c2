"""Turn a validated ``Shape`` into a validator function.

A validator is called as ``validator(instance, context)`` and returns the
error tree for that instance. Every field of the shape is visited on every
call and every rule of a field runs, whatever failed before it.
"""

import logging
import types
import typing
from collections.abc import Callable
from typing import Any

from ..errors import (
    EMPTY,
    Error,
    Errors,
    FieldsBuilder,
    ListBuilder,
    SimpleBuilder,
)
from ..models.rule import Rule, RuleKind
from ..models.shape import Field, Shape, ShapeKind, Variant, VariantKind
from ..rules import evaluator_for

logger = logging.getLogger(__name__)

ShapeValidator = Callable[[Any, Any], Errors]
RuleCheck = Callable[[Any, Any], Any]


def synthesize(shape: Shape, delegate: ShapeValidator) -> ShapeValidator:
    """Build the validator of ``shape``.

    Args:
        shape: Validated shape
        delegate: Validator used for ``dive`` fields; it receives the nested
            value and the context and returns the nested error tree

    Returns:
        Function ``(instance, context) -> Errors``
    """
    logger.debug(f"Synthesizing {shape.kind.value} validator for {shape.name}")

    if shape.kind == ShapeKind.RECORD:
        return _record_validator(shape.fields, delegate)
    if shape.kind == ShapeKind.TUPLE:
        return _tuple_validator(shape.fields, delegate)
    return _union_validator(shape, delegate)


def _record_validator(fields: tuple[Field, ...], delegate: ShapeValidator) -> ShapeValidator:
    plan = [(field.name, field.key, _field_validator(field, delegate)) for field in fields]

    def validate_record(instance: Any, ctx: Any) -> Errors:
        errors = FieldsBuilder()
        for name, key, validate_field in plan:
            errors.insert(key, validate_field(getattr(instance, name), ctx))
        return errors.build()

    return validate_record


def _tuple_validator(fields: tuple[Field, ...], delegate: ShapeValidator) -> ShapeValidator:
    plan = [(field.position, _field_validator(field, delegate)) for field in fields]

    def validate_tuple(instance: Any, ctx: Any) -> Errors:
        errors = ListBuilder()
        for position, validate_field in plan:
            errors.push(validate_field(instance[position], ctx))
        return errors.build()

    return validate_tuple


def _unit_validator(instance: Any, ctx: Any) -> Errors:
    return EMPTY


def _variant_validator(variant: Variant, delegate: ShapeValidator) -> ShapeValidator:
    if variant.kind == VariantKind.UNIT:
        return _unit_validator
    if variant.kind == VariantKind.RECORD:
        return _record_validator(variant.fields, delegate)
    return _tuple_validator(variant.fields, delegate)


def _union_validator(shape: Shape, delegate: ShapeValidator) -> ShapeValidator:
    table = {variant.cls: _variant_validator(variant, delegate) for variant in shape.variants}
    union_name = shape.name

    def validate_union(instance: Any, ctx: Any) -> Errors:
        validate_variant = table.get(type(instance))
        if validate_variant is None:
            raise TypeError(
                f"{type(instance).__qualname__} is not a variant of {union_name}"
            )
        return validate_variant(instance, ctx)

    return validate_union


def _field_validator(field: Field, delegate: ShapeValidator) -> ShapeValidator:
    if field.dive:
        return delegate

    checks = [bind_rule(rule) for rule in field.rules]
    optional = _accepts_none(field.type)

    def validate_leaf(value: Any, ctx: Any) -> Errors:
        errors = SimpleBuilder()
        if value is None and optional:
            return errors.build()
        for check in checks:
            try:
                outcome = check(value, ctx)
            except Error as error:
                errors.push(error)
                continue
            if isinstance(outcome, Error):
                errors.push(outcome)
        return errors.build()

    return validate_leaf


def bind_rule(rule: Rule) -> RuleCheck:
    """Bind a rule to its evaluator as ``check(value, context)``.

    A check fails by raising ``Error``; custom checks may also return one.
    """
    if rule.kind == RuleKind.CUSTOM:
        (func,) = rule.args
        return func

    evaluator = evaluator_for(rule.kind)
    args = rule.args

    def check(value: Any, ctx: Any) -> None:
        evaluator(value, args)

    return check


def _accepts_none(tp: Any) -> bool:
    if typing.get_origin(tp) is typing.Annotated:
        tp = typing.get_args(tp)[0]
    if tp is None or tp is type(None) or tp is Any:
        return True
    if typing.get_origin(tp) in (typing.Union, types.UnionType):
        return type(None) in typing.get_args(tp)
    return False
