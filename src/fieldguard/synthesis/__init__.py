"""Validator synthesis and the per-type validator registry."""

from .registry import (
    REGISTRY,
    CompiledShape,
    ValidatorRegistry,
    compile_shape,
    enclosing_union,
)
from .synthesizer import ShapeValidator, bind_rule, synthesize

__all__ = [
    "REGISTRY",
    "CompiledShape",
    "ShapeValidator",
    "ValidatorRegistry",
    "bind_rule",
    "compile_shape",
    "enclosing_union",
    "synthesize",
]
