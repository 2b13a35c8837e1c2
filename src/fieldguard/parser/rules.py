"""Parse a single rule item into a ``Rule``.

Arguments are validated here, at definition time. ``range`` bounds and
``custom`` references are Python expressions evaluated once in the
namespace of the module that defines the shape.
"""

import ast
import builtins
import inspect
import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Any

from ..models.rule import Rule, RuleKind
from ..rules import IpKind
from ..rules.pattern import PATTERNS
from ..rules.range import bounds_of, unwrap_type

logger = logging.getLogger(__name__)


class RuleParseError(ValueError):
    """A rule item is malformed; the message is reported as-is."""


@dataclass
class ParseContext:
    """What rule parsing needs to know about the field being annotated."""
    field_type: Any = None
    globalns: dict = field(default_factory=dict)
    localns: dict | None = None
    validate_patterns: bool = True


def parse_rule(name: str, call: ast.Call | None, text: str, ctx: ParseContext) -> Rule:
    """Parse rule ``name`` with its optional argument list.

    Raises:
        RuleParseError: unknown rule name or invalid arguments
    """
    kind = RuleKind.from_name(name)
    if kind is None:
        raise RuleParseError(f"unrecognized rule `{name}`")

    if not kind.takes_args:
        if call is not None:
            raise RuleParseError(f"`{name}` does not accept any args")
        return Rule(kind, _NO_ARG_RULES.get(kind, ()), text)

    if call is None:
        raise RuleParseError(f"`{name}` expects arguments")

    parser = _ARG_PARSERS[kind]
    return Rule(kind, parser(name, call, ctx), text)


_NO_ARG_RULES = {
    RuleKind.IP: (IpKind.ANY,),
    RuleKind.IP_V4: (IpKind.V4,),
    RuleKind.IP_V6: (IpKind.V6,),
}


def _named_args(name: str, call: ast.Call) -> dict[str, ast.expr]:
    """Collect ``min``/``max`` keyword arguments."""
    if call.args:
        raise RuleParseError("expected named arguments `min`, `max`")
    named: dict[str, ast.expr] = {}
    for keyword in call.keywords:
        if keyword.arg is None:
            raise RuleParseError("expected named arguments `min`, `max`")
        if keyword.arg not in ("min", "max"):
            raise RuleParseError(f"unexpected `{keyword.arg}`")
        named[keyword.arg] = keyword.value
    if not named:
        raise RuleParseError("please provide at least one of: `min`, `max`")
    return named


def _parse_length(name: str, call: ast.Call, ctx: ParseContext) -> tuple:
    named = _named_args(name, call)
    values: dict[str, int] = {}
    for key, node in named.items():
        value = node.value if isinstance(node, ast.Constant) else None
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise RuleParseError("value must be a non-negative integer")
        values[key] = value

    minimum = values.get("min")
    maximum = values.get("max")
    if minimum is not None and maximum is not None and minimum >= maximum:
        raise RuleParseError("min must be smaller than max")
    return (
        minimum if minimum is not None else 0,
        maximum if maximum is not None else sys.maxsize,
    )


def _parse_range(name: str, call: ast.Call, ctx: ParseContext) -> tuple:
    named = _named_args(name, call)
    values = {key: _evaluate(node, key, ctx) for key, node in named.items()}

    if "min" not in values or "max" not in values:
        missing = "min" if "min" not in values else "max"
        bounds = bounds_of(ctx.field_type)
        if bounds is None:
            raise RuleParseError(
                f"`range` without `{missing}` requires a type with natural bounds, "
                f"`{_type_name(ctx.field_type)}` has none"
            )
        values.setdefault("min", bounds[0])
        values.setdefault("max", bounds[1])
    return values["min"], values["max"]


def _parse_text(name: str, call: ast.Call, ctx: ParseContext) -> str:
    if call.keywords or len(call.args) != 1:
        raise RuleParseError(f"`{name}` expects a single string literal")
    node = call.args[0]
    if not isinstance(node, ast.Constant) or not isinstance(node.value, str):
        raise RuleParseError("expected a string literal")
    if not node.value:
        raise RuleParseError("string must not be empty")
    return node.value


def _parse_substring(name: str, call: ast.Call, ctx: ParseContext) -> tuple:
    return (_parse_text(name, call, ctx),)


def _parse_pattern(name: str, call: ast.Call, ctx: ParseContext) -> tuple:
    text = _parse_text(name, call, ctx)
    if ctx.validate_patterns:
        try:
            PATTERNS.get(text)
        except re.error as e:
            raise RuleParseError(f"invalid regex: {e}")
    else:
        logger.debug(f"Deferring compilation of pattern /{text}/ to first use")
    return (text,)


def _parse_custom(name: str, call: ast.Call, ctx: ParseContext) -> tuple:
    if call.keywords or len(call.args) != 1:
        raise RuleParseError("`custom` expects a single function")
    node = call.args[0]
    if not isinstance(node, ast.Lambda) and not _is_reference(node):
        raise RuleParseError("custom rule must be a lambda or a reference to a function")

    reference = ast.unparse(node)
    if isinstance(node, ast.Lambda):
        func = _evaluate(node, reference, ctx)
    else:
        func = _resolve(node, ctx)
    if not callable(func):
        raise RuleParseError(f"`{reference}` is not callable")
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # builtins without introspectable signatures are trusted
        return (func,)
    try:
        signature.bind(None, None)
    except TypeError:
        raise RuleParseError("custom rule must accept (value, context)")
    return (func,)


def _is_reference(node: ast.expr) -> bool:
    """True for `name` or a dotted `module.name` path."""
    while isinstance(node, ast.Attribute):
        node = node.value
    return isinstance(node, ast.Name)


def _resolve(node: ast.expr, ctx: ParseContext) -> Any:
    """Look up a `name` or dotted `module.name` reference."""
    if isinstance(node, ast.Attribute):
        owner = _resolve(node.value, ctx)
        try:
            return getattr(owner, node.attr)
        except AttributeError:
            raise RuleParseError(f"name `{ast.unparse(node)}` is not defined")
    for namespace in (ctx.localns or {}, ctx.globalns, vars(builtins)):
        if node.id in namespace:
            return namespace[node.id]
    raise RuleParseError(f"name `{node.id}` is not defined")


def _evaluate(node: ast.expr, label: str, ctx: ParseContext) -> Any:
    expression = ast.Expression(body=node)
    ast.fix_missing_locations(expression)
    code = compile(expression, "<annotation>", "eval")
    try:
        return eval(code, ctx.globalns, ctx.localns)
    except NameError as e:
        missing = getattr(e, "name", None) or label
        raise RuleParseError(f"name `{missing}` is not defined")
    except Exception as e:
        raise RuleParseError(f"could not evaluate `{label}`: {e}")


def _type_name(tp: Any) -> str:
    tp = unwrap_type(tp)
    return getattr(tp, "__name__", None) or repr(tp)


_ARG_PARSERS = {
    RuleKind.LENGTH: _parse_length,
    RuleKind.RANGE: _parse_range,
    RuleKind.CONTAINS: _parse_substring,
    RuleKind.PREFIX: _parse_substring,
    RuleKind.SUFFIX: _parse_substring,
    RuleKind.PATTERN: _parse_pattern,
    RuleKind.CUSTOM: _parse_custom,
}
