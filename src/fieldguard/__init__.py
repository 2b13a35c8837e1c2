"""fieldguard - Schema-driven validation for Python data shapes.

fieldguard reads validation rules from field annotations, checks them when a
class is defined and synthesizes one validator per shape that reports every
violation as a structured error tree.
"""

__version__ = "0.1.0"
__author__ = "rpapub"
__email__ = "contact@rpapub.dev"
__description__ = "Schema-driven validation for Python data shapes"

from fieldguard.compiler import collect_errors, validate, validated
from fieldguard.config import FieldguardConfig
from fieldguard.diagnostics import ShapeDefinitionError
from fieldguard.errors import (
    EMPTY,
    Empty,
    Error,
    Errors,
    FieldErrors,
    FieldguardError,
    ListErrors,
    Simple,
    ValidationError,
)
from fieldguard.parser import guard
from fieldguard.rules import register_bounds
from fieldguard.synthesis import compile_shape
from fieldguard.types import TaggedUnion, i8, i16, i32, i64, u8, u16, u32, u64

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__description__",
    "EMPTY",
    "Empty",
    "Error",
    "Errors",
    "FieldErrors",
    "FieldguardConfig",
    "FieldguardError",
    "ListErrors",
    "ShapeDefinitionError",
    "Simple",
    "TaggedUnion",
    "ValidationError",
    "collect_errors",
    "compile_shape",
    "guard",
    "register_bounds",
    "validate",
    "validated",
    "i8",
    "i16",
    "i32",
    "i64",
    "u8",
    "u16",
    "u32",
    "u64",
]
