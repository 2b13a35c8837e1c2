"""Build a ``RawShape`` from a Python class.

Supported shapes:

* dataclasses -> record
* ``typing.NamedTuple`` classes -> tuple (positional)
* classes without fields -> unit, treated as a tuple with no fields
* ``TaggedUnion`` subclasses -> tagged union over their nested classes
"""

import dataclasses
import inspect
import logging
import sys
import typing
from typing import Any

from ..models.shape import (
    RawField,
    RawShape,
    RawVariant,
    ShapeKind,
    VariantKind,
)
from ..types import TaggedUnion
from .annotation import Guard, parse_annotation
from .rules import ParseContext

logger = logging.getLogger(__name__)


def is_namedtuple(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_unit(cls: type) -> bool:
    """A plain class that declares no fields."""
    return (
        isinstance(cls, type)
        and not dataclasses.is_dataclass(cls)
        and not is_namedtuple(cls)
        and not _own_annotations(cls)
    )


def is_shape_class(cls: Any) -> bool:
    """True for classes fieldguard can compile."""
    if not isinstance(cls, type):
        return False
    if issubclass(cls, TaggedUnion):
        return cls is not TaggedUnion
    return dataclasses.is_dataclass(cls) or is_namedtuple(cls)


def introspect(
    cls: type,
    context: Any = None,
    localns: dict | None = None,
    validate_patterns: bool = True,
) -> RawShape:
    """Describe ``cls`` with every field annotation parsed but unchecked."""
    name = cls.__qualname__
    globalns = _module_namespace(cls)

    if isinstance(cls, type) and issubclass(cls, TaggedUnion):
        shape = RawShape(name, cls, ShapeKind.UNION, context)
        variant_ns = dict(localns or {})
        variant_ns.update(vars(cls))
        variant_classes = cls.variants()
        for variant_cls in variant_classes:
            variant = _introspect_variant(
                variant_cls, f"{name}.{variant_cls.__name__}", shape,
                globalns, variant_ns, validate_patterns,
            )
            if variant is not None:
                shape.variants.append(variant)
        if not variant_classes:
            shape.issues.append("tagged union declares no variants")
        return shape

    if dataclasses.is_dataclass(cls):
        shape = RawShape(name, cls, ShapeKind.RECORD, context)
    elif is_namedtuple(cls) or is_unit(cls):
        shape = RawShape(name, cls, ShapeKind.TUPLE, context)
    else:
        shape = RawShape(name, cls, ShapeKind.RECORD, context)
        shape.issues.append(
            f"unsupported shape: `{name}` is not a dataclass, NamedTuple or TaggedUnion"
        )
        return shape

    ctx = ParseContext(globalns=globalns, localns=localns, validate_patterns=validate_patterns)
    fields = _introspect_fields(cls, name, ctx, shape)
    if fields is not None:
        shape.fields.extend(fields)
    return shape


def _introspect_variant(
    cls: type,
    location: str,
    shape: RawShape,
    globalns: dict,
    localns: dict,
    validate_patterns: bool,
) -> RawVariant | None:
    if dataclasses.is_dataclass(cls):
        kind = VariantKind.RECORD
    elif is_namedtuple(cls):
        kind = VariantKind.TUPLE
    elif is_unit(cls):
        return RawVariant(cls.__name__, cls, VariantKind.UNIT)
    else:
        shape.issues.append(
            f"unsupported variant: `{location}` is not a dataclass, NamedTuple or unit class"
        )
        return None

    ctx = ParseContext(globalns=globalns, localns=localns, validate_patterns=validate_patterns)
    fields = _introspect_fields(cls, location, ctx, shape)
    return RawVariant(cls.__name__, cls, kind, fields or [])


def _introspect_fields(
    cls: type,
    location: str,
    ctx: ParseContext,
    shape: RawShape,
) -> list[RawField] | None:
    try:
        hints = typing.get_type_hints(
            cls, globalns=ctx.globalns, localns=ctx.localns, include_extras=True
        )
    except Exception as e:
        shape.issues.append(f"could not resolve annotations of `{location}`: {e}")
        return None

    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
        positional = False
    elif is_namedtuple(cls):
        names = list(cls._fields)
        positional = True
    else:
        names = []
        positional = True

    fields = []
    for position, field_name in enumerate(names):
        hint = hints.get(field_name, Any)
        field_type, guards = _split_annotated(hint)
        raw = RawField(
            name=field_name,
            position=position,
            type=field_type,
            location=f"{location}.{field_name}",
            positional=positional,
        )
        field_ctx = dataclasses.replace(ctx, field_type=field_type)
        for marker in guards:
            raw.items.extend(parse_annotation(marker.text, field_ctx))
        fields.append(raw)

    logger.debug(f"Introspected {len(fields)} field(s) of {location}")
    return fields


def _split_annotated(hint: Any) -> tuple[Any, list[Guard]]:
    if typing.get_origin(hint) is not typing.Annotated:
        return hint, []
    field_type, *metadata = typing.get_args(hint)
    return field_type, [m for m in metadata if isinstance(m, Guard)]


def _module_namespace(cls: type) -> dict:
    module = sys.modules.get(getattr(cls, "__module__", ""), None)
    return dict(vars(module)) if module is not None else {}


def _own_annotations(cls: type) -> dict:
    return inspect.get_annotations(cls)
