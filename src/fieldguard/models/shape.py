"""Shape descriptions.

``Raw*`` models hold a shape exactly as it was annotated, duplicates and
conflicts included; they are the input of the definition validator.
``Shape``, ``Variant`` and ``Field`` are the validated, immutable results
consumed by the synthesizer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .rule import Rule, RuleSet


class ShapeKind(str, Enum):
    """Kinds of validated shapes."""
    RECORD = "record"
    TUPLE = "tuple"
    UNION = "union"


class VariantKind(str, Enum):
    """Kinds of tagged-union variants."""
    UNIT = "unit"
    RECORD = "record"
    TUPLE = "tuple"


class ItemKind(str, Enum):
    """Kinds of items in a field annotation."""
    RULE = "rule"
    DIVE = "dive"
    SKIP = "skip"
    RENAME = "rename"
    INVALID = "invalid"


@dataclass(frozen=True)
class AnnotationItem:
    """One comma-separated item of a ``guard(...)`` annotation."""
    kind: ItemKind
    text: str
    rule: Rule | None = None
    value: str | None = None
    message: str | None = None  # set for INVALID items

    @property
    def name(self) -> str:
        if self.rule is not None:
            return self.rule.name
        return self.kind.value


@dataclass
class RawField:
    """A field with every annotation item in source order."""
    name: str
    position: int
    type: Any
    location: str
    positional: bool = False
    items: list[AnnotationItem] = field(default_factory=list)

    def items_of(self, kind: ItemKind) -> list[AnnotationItem]:
        return [item for item in self.items if item.kind == kind]

    @property
    def rules(self) -> list[Rule]:
        return [item.rule for item in self.items if item.kind == ItemKind.RULE]

    @property
    def dive(self) -> bool:
        return any(item.kind == ItemKind.DIVE for item in self.items)

    @property
    def skip(self) -> bool:
        return any(item.kind == ItemKind.SKIP for item in self.items)

    @property
    def rename(self) -> str | None:
        renames = self.items_of(ItemKind.RENAME)
        return renames[0].value if renames else None


@dataclass
class RawVariant:
    name: str
    cls: type
    kind: VariantKind
    fields: list[RawField] = field(default_factory=list)


@dataclass
class RawShape:
    """A shape as introspected from its class, before any checks."""
    name: str
    cls: type
    kind: ShapeKind
    context: Any = None
    fields: list[RawField] = field(default_factory=list)
    variants: list[RawVariant] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)  # shape-level problems

    def all_fields(self) -> list[RawField]:
        if self.kind == ShapeKind.UNION:
            return [f for variant in self.variants for f in variant.fields]
        return list(self.fields)


@dataclass(frozen=True)
class Field:
    """A validated field: either rule-bearing or delegated."""
    name: str
    position: int
    type: Any
    rules: RuleSet = field(default_factory=RuleSet)
    dive: bool = False
    rename: str | None = None

    @property
    def key(self) -> str:
        """Key of this field in a record's error map."""
        return self.rename or self.name


@dataclass(frozen=True)
class Variant:
    name: str
    cls: type
    kind: VariantKind
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class Shape:
    """A validated shape, ready for synthesis."""
    name: str
    cls: type
    kind: ShapeKind
    context: Any = None
    fields: tuple[Field, ...] = ()
    variants: tuple[Variant, ...] = ()
