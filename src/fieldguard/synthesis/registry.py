"""Per-type cache of compiled validators.

Shapes are compiled eagerly by ``@validated`` or lazily the first time an
instance of an undecorated shape is validated. Either way a type is
compiled at most once; later lookups read the cached result.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any

from ..config import FieldguardConfig
from ..errors import EMPTY, Errors, FieldErrors, ListBuilder
from ..models.shape import Shape
from ..parser.introspect import introspect, is_namedtuple, is_shape_class
from ..validation import create_default_validator
from .synthesizer import ShapeValidator, synthesize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledShape:
    """A validated shape with its synthesized validator."""
    shape: Shape
    validator: ShapeValidator

    def default_context(self) -> Any:
        """Context used when the caller passes none."""
        if self.shape.context is None:
            return None
        return self.shape.context()


def compile_shape(
    cls: type,
    *,
    context: Any = None,
    localns: dict | None = None,
    config: FieldguardConfig | None = None,
) -> Shape:
    """Introspect and check ``cls`` without registering it.

    Raises:
        ShapeDefinitionError: the shape has definition errors
    """
    config = config or FieldguardConfig()
    raw = introspect(
        cls,
        context=context,
        localns=localns,
        validate_patterns=config.patterns.validate_early,
    )
    return create_default_validator().validate(raw)


class ValidatorRegistry:
    """Maps shape classes (and union variant classes) to compiled validators."""

    def __init__(self, config: FieldguardConfig | None = None):
        self.config = config or FieldguardConfig()
        self._compiled: dict[type, CompiledShape] = {}
        self._lock = threading.Lock()

    def register(
        self,
        cls: type,
        *,
        context: Any = None,
        localns: dict | None = None,
        config: FieldguardConfig | None = None,
    ) -> CompiledShape:
        """Compile ``cls`` now and cache the result, replacing any earlier one."""
        with self._lock:
            return self._compile(cls, context, localns, config or self.config)

    def get(self, cls: type) -> CompiledShape:
        """Compiled validator for ``cls``, compiling it on first use."""
        compiled = self._compiled.get(cls)
        if compiled is not None:
            return compiled
        with self._lock:
            compiled = self._compiled.get(cls)
            if compiled is None:
                owner = enclosing_union(cls) or cls
                if not is_shape_class(owner):
                    raise TypeError(f"cannot validate {cls.__qualname__}: not a fieldguard shape")
                context = getattr(owner, "__fieldguard_context__", None)
                compiled = self._compile(owner, context, None, self.config)
        return compiled

    def __contains__(self, cls: type) -> bool:
        return cls in self._compiled

    def _compile(
        self,
        cls: type,
        context: Any,
        localns: dict | None,
        config: FieldguardConfig,
    ) -> CompiledShape:
        shape = compile_shape(cls, context=context, localns=localns, config=config)
        compiled = CompiledShape(shape, synthesize(shape, self.errors_of))
        self._compiled[cls] = compiled
        for variant in shape.variants:
            self._compiled[variant.cls] = compiled
        logger.debug(f"Registered validator for {shape.name}")
        return compiled

    def errors_of(self, value: Any, ctx: Any) -> Errors:
        """Error tree of a delegated value.

        Shapes use their own validator. ``None`` has nothing to report,
        sequences and sets produce one entry per element and mappings one
        entry per key.
        """
        cls = type(value)
        if cls in self._compiled or is_shape_class(cls) or enclosing_union(cls) is not None:
            return self.get(cls).validator(value, ctx)
        if value is None:
            return EMPTY
        if isinstance(value, (list, tuple, set, frozenset)) and not is_namedtuple(cls):
            items = ListBuilder()
            for item in value:
                items.push(self.errors_of(item, ctx))
            return items.build()
        if isinstance(value, dict):
            taken = {key for key in value if isinstance(key, str)}
            fields: dict[str, Errors] = {}
            for key, item in value.items():
                name = _entry_key(key, taken)
                taken.add(name)
                fields[name] = self.errors_of(item, ctx)
            return FieldErrors(fields)
        raise TypeError(f"cannot validate {cls.__qualname__}: not a fieldguard shape")


def enclosing_union(cls: type) -> type | None:
    """The ``TaggedUnion`` that declares ``cls`` as a variant, if any."""
    if not isinstance(cls, type):
        return None
    return vars(cls).get("__fieldguard_union__")


def _entry_key(key: Any, taken: set[str]) -> str:
    """Error key of a mapping entry.

    String keys are used as is. Other keys use ``str(key)``, qualified with the
    key type when that text is already taken by another entry.
    """
    if isinstance(key, str):
        return key
    name = str(key)
    if name in taken:
        name = f"{name} ({type(key).__name__})"
    base, index = name, 1
    while name in taken:
        index += 1
        name = f"{base}#{index}"
    return name


REGISTRY = ValidatorRegistry()
