"""Public entry points: ``@validated``, ``validate`` and ``collect_errors``."""

import logging
from typing import Any

from .config import FieldguardConfig
from .errors import Errors, ValidationError
from .synthesis import REGISTRY

logger = logging.getLogger(__name__)


def validated(
    cls: type | None = None,
    *,
    context: Any = None,
    localns: dict | None = None,
    config: FieldguardConfig | None = None,
):
    """Compile a shape when its class is created.

    Usable bare (``@validated``) or with options
    (``@validated(context=AppContext)``). Definition errors are raised
    immediately as ``ShapeDefinitionError``. The class (and, for tagged
    unions, each variant class) gains a ``validate(self, context=None)``
    method unless it already defines one.

    Args:
        context: Context type handed to every rule of this shape; when a
            caller passes no context, one is built with ``context()``
        localns: Extra names for resolving annotations and rule expressions
        config: Overrides the registry configuration for this shape
    """
    def decorator(cls: type) -> type:
        cls.__fieldguard_context__ = context
        compiled = REGISTRY.register(cls, context=context, localns=localns, config=config)
        _attach_validate(cls)
        for variant in compiled.shape.variants:
            _attach_validate(variant.cls)
        return cls

    if cls is None:
        return decorator
    return decorator(cls)


def collect_errors(instance: Any, context: Any = None) -> Errors:
    """Run every rule against ``instance`` and return the error tree.

    Never raises for rule violations: an instance that passes yields an
    empty tree.

    Raises:
        ShapeDefinitionError: the instance's type is an invalid shape
        TypeError: the instance is not a fieldguard shape
    """
    compiled = REGISTRY.get(type(instance))
    if context is None:
        context = compiled.default_context()
    return compiled.validator(instance, context)


def validate(instance: Any, context: Any = None) -> None:
    """Validate ``instance``.

    Raises:
        ValidationError: at least one rule failed; ``errors`` holds the tree
    """
    errors = collect_errors(instance, context)
    if not errors.is_empty():
        logger.debug(f"{type(instance).__qualname__} failed validation")
        raise ValidationError(errors)


def _validate_method(self, context: Any = None) -> None:
    validate(self, context)


def _attach_validate(cls: type) -> None:
    if "validate" in vars(cls):
        return
    try:
        cls.validate = _validate_method
    except (AttributeError, TypeError):
        logger.debug(f"Cannot attach validate() to {cls.__qualname__}")
