"""Range rule and the natural-bounds capability of value types.

A ``range`` rule that omits ``min`` or ``max`` takes the missing bound from
the field type. Types gain that capability either by registration
(``register_bounds``) or by exposing ``MIN`` and ``MAX`` class attributes.
"""

import math
import threading
import types
import typing
from typing import Any

from ..errors import Error

_bounds: dict[Any, tuple[Any, Any]] = {}
_bounds_lock = threading.Lock()


def register_bounds(tp: Any, minimum: Any, maximum: Any) -> None:
    """Declare the natural minimum and maximum of ``tp``."""
    with _bounds_lock:
        _bounds[tp] = (minimum, maximum)


def unwrap_type(tp: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers from a type hint."""
    while True:
        origin = typing.get_origin(tp)
        if origin is typing.Annotated:
            tp = typing.get_args(tp)[0]
            continue
        if origin in (typing.Union, types.UnionType):
            args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
            if len(args) == 1:
                tp = args[0]
                continue
        return tp


def bounds_of(tp: Any) -> tuple[Any, Any] | None:
    """Natural (min, max) of a type, or None if it has none."""
    tp = unwrap_type(tp)
    try:
        if tp in _bounds:
            return _bounds[tp]
    except TypeError:
        # unhashable type hint
        return None
    minimum = getattr(tp, "MIN", None)
    maximum = getattr(tp, "MAX", None)
    if minimum is None or maximum is None:
        return None
    return minimum, maximum


def apply(value, args: tuple) -> None:
    minimum, maximum = args
    if value < minimum:
        raise Error(f"lower than {minimum}")
    if value > maximum:
        raise Error(f"greater than {maximum}")


register_bounds(float, -math.inf, math.inf)
register_bounds(bool, False, True)
