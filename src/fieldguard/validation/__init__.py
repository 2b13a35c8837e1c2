"""Definition validation for fieldguard shapes.

Checks annotated shapes for conflicting or incomplete field annotations
before any validator is synthesized.
"""

from .checks import (
    AnnotationSyntaxCheck,
    CompletenessCheck,
    DelegateConflictCheck,
    DuplicateAttributeCheck,
    DuplicateKeyCheck,
    DuplicateRuleCheck,
    ShapeStructureCheck,
    SkipOverrideCheck,
)
from .framework import (
    DefinitionValidator,
    FieldCheck,
    ShapeCheck,
    create_default_validator,
    promote,
)

__all__ = [
    "DefinitionValidator",
    "FieldCheck",
    "ShapeCheck",
    "create_default_validator",
    "promote",
    "AnnotationSyntaxCheck",
    "CompletenessCheck",
    "DelegateConflictCheck",
    "DuplicateAttributeCheck",
    "DuplicateKeyCheck",
    "DuplicateRuleCheck",
    "ShapeStructureCheck",
    "SkipOverrideCheck",
]
