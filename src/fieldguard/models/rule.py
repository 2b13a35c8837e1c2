"""Canonical rule model.

Every rule kind has a fixed priority. The priority orders the rules of a
field and decides rule identity: two rules are the same rule when their
kinds match, whatever their arguments.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class RuleKind(IntEnum):
    """Closed catalog of rule kinds, valued by priority."""
    ASCII = 0
    ALPHANUMERIC = 1
    EMAIL = 2
    URL = 3
    IP = 4
    IP_V4 = 5
    IP_V6 = 6
    CREDIT_CARD = 7
    PHONE_NUMBER = 8
    LENGTH = 9
    RANGE = 10
    CONTAINS = 11
    PREFIX = 12
    SUFFIX = 13
    PATTERN = 14
    CUSTOM = 15

    @property
    def rule_name(self) -> str:
        """Name used for this kind in annotations and messages."""
        return _RULE_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "RuleKind | None":
        return _KINDS_BY_NAME.get(name)

    @property
    def takes_args(self) -> bool:
        return self >= RuleKind.LENGTH


_RULE_NAMES = {
    RuleKind.ASCII: "ascii",
    RuleKind.ALPHANUMERIC: "alphanumeric",
    RuleKind.EMAIL: "email",
    RuleKind.URL: "url",
    RuleKind.IP: "ip",
    RuleKind.IP_V4: "ipv4",
    RuleKind.IP_V6: "ipv6",
    RuleKind.CREDIT_CARD: "credit_card",
    RuleKind.PHONE_NUMBER: "phone_number",
    RuleKind.LENGTH: "length",
    RuleKind.RANGE: "range",
    RuleKind.CONTAINS: "contains",
    RuleKind.PREFIX: "prefix",
    RuleKind.SUFFIX: "suffix",
    RuleKind.PATTERN: "pattern",
    RuleKind.CUSTOM: "custom",
}
_KINDS_BY_NAME = {name: kind for kind, name in _RULE_NAMES.items()}


@dataclass(frozen=True, eq=False)
class Rule:
    """A parsed rule: its kind plus the arguments its evaluator receives.

    ``args`` is the exact argument tuple handed to the evaluator, e.g.
    ``(min, max)`` for ``length`` and ``range`` or ``(text,)`` for
    ``prefix``. For ``custom`` it holds the user callable.
    """
    kind: RuleKind
    args: tuple = ()
    source: str = field(default="", compare=False)

    @property
    def name(self) -> str:
        return self.kind.rule_name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rule):
            return NotImplemented
        return self.kind == other.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def __lt__(self, other: "Rule") -> bool:
        return self.kind < other.kind

    def __str__(self) -> str:
        return self.source or self.name


class RuleSet:
    """Rules of one field, sorted by priority and unique by kind."""

    def __init__(self, rules: Any = ()):
        by_kind: dict[RuleKind, Rule] = {}
        for rule in rules:
            by_kind.setdefault(rule.kind, rule)
        self._rules = tuple(sorted(by_kind.values()))

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, RuleKind):
            return any(rule.kind == item for rule in self._rules)
        return item in self._rules

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self.kinds == other.kinds

    def __hash__(self) -> int:
        return hash(self.kinds)

    @property
    def kinds(self) -> tuple[RuleKind, ...]:
        return tuple(rule.kind for rule in self._rules)

    def get(self, kind: RuleKind) -> Rule | None:
        for rule in self._rules:
            if rule.kind == kind:
                return rule
        return None

    def __repr__(self) -> str:
        return f"RuleSet({', '.join(rule.name for rule in self._rules)})"
