"""Rule evaluators.

Every evaluator is called as ``apply(value, args)`` with the argument tuple
parsed for its rule and raises ``Error`` when the value violates the rule.
``custom`` rules are the exception: the user callable is invoked as
``f(value, context)``.
"""

from collections.abc import Callable

from ..models.rule import RuleKind
from . import length, pattern, range
from .formats import (
    IpKind,
    apply_credit_card,
    apply_email,
    apply_ip,
    apply_phone_number,
    apply_url,
)
from .range import bounds_of, register_bounds
from .text import (
    apply_alphanumeric,
    apply_ascii,
    apply_contains,
    apply_prefix,
    apply_suffix,
)

EVALUATORS: dict[RuleKind, Callable] = {
    RuleKind.ASCII: apply_ascii,
    RuleKind.ALPHANUMERIC: apply_alphanumeric,
    RuleKind.EMAIL: apply_email,
    RuleKind.URL: apply_url,
    RuleKind.IP: apply_ip,
    RuleKind.IP_V4: apply_ip,
    RuleKind.IP_V6: apply_ip,
    RuleKind.CREDIT_CARD: apply_credit_card,
    RuleKind.PHONE_NUMBER: apply_phone_number,
    RuleKind.LENGTH: length.apply,
    RuleKind.RANGE: range.apply,
    RuleKind.CONTAINS: apply_contains,
    RuleKind.PREFIX: apply_prefix,
    RuleKind.SUFFIX: apply_suffix,
    RuleKind.PATTERN: pattern.apply,
}


def evaluator_for(kind: RuleKind) -> Callable:
    """Evaluator of a built-in rule kind."""
    if kind == RuleKind.CUSTOM:
        raise KeyError("custom rules carry their own evaluator")
    return EVALUATORS[kind]


__all__ = [
    "EVALUATORS",
    "IpKind",
    "bounds_of",
    "evaluator_for",
    "register_bounds",
]
