"""Build shape instances from JSON-like data.

Records and tuples are loaded with pydantic's ``TypeAdapter``. Tagged unions
are externally tagged: a unit variant is written as its name (``"Dot"``),
other variants as a one-key mapping (``{"Circle": {"radius": 1.0}}``).
"""

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import core_schema

from .types import TaggedUnion


def load_instance(cls: type, data: Any) -> Any:
    """Build an instance of ``cls`` from ``data``.

    Raises:
        pydantic.ValidationError: ``data`` does not fit the class
    """
    return TypeAdapter(cls).validate_python(data)


def load_instance_file(cls: type, path: Path) -> Any:
    """Build an instance of ``cls`` from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return load_instance(cls, data)


def load_variant(union: type[TaggedUnion], data: Any) -> Any:
    """Build the variant of ``union`` that ``data`` names."""
    variants = {variant.__name__: variant for variant in union.variants()}
    if isinstance(data, tuple(variants.values())):
        return data

    if isinstance(data, str):
        name, payload = data, None
    elif isinstance(data, dict) and len(data) == 1:
        ((name, payload),) = data.items()
    else:
        raise ValueError(
            f'expected a variant name or {{"Variant": payload}} for {union.__qualname__}'
        )

    variant = variants.get(name)
    if variant is None:
        raise ValueError(
            f"unknown variant `{name}` of {union.__qualname__}, "
            f"expected one of: {', '.join(variants)}"
        )
    if not _has_fields(variant):
        if payload not in (None, {}, []):
            raise ValueError(f"unit variant `{name}` takes no payload")
        return variant()
    return load_instance(variant, {} if payload is None else payload)


def variant_schema(union: type[TaggedUnion]) -> core_schema.CoreSchema:
    """Pydantic core schema that loads externally tagged variants."""
    return core_schema.no_info_plain_validator_function(
        lambda data: load_variant(union, data)
    )


def _has_fields(cls: type) -> bool:
    return bool(getattr(cls, "__dataclass_fields__", None) or getattr(cls, "_fields", None))
