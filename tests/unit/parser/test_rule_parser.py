"""Tests for rule argument parsing."""

import ast
import sys
from types import SimpleNamespace

import pytest

from fieldguard.models.rule import RuleKind
from fieldguard.parser.rules import ParseContext, RuleParseError, parse_rule
from fieldguard.rules import IpKind
from fieldguard.rules.pattern import PATTERNS
from fieldguard.types import u8


def check_positive(value, ctx):
    return None


def one_arg(value):
    return None


def _parse(text: str, ctx: ParseContext | None = None):
    node = ast.parse(text, mode="eval").body
    if isinstance(node, ast.Call):
        return parse_rule(node.func.id, node, text, ctx or ParseContext(field_type=str))
    return parse_rule(node.id, None, text, ctx or ParseContext(field_type=str))


def _error(text: str, ctx: ParseContext | None = None) -> str:
    with pytest.raises(RuleParseError) as excinfo:
        _parse(text, ctx)
    return str(excinfo.value)


class TestArgumentlessRules:

    def test_ip_families(self):
        assert _parse("ip").args == (IpKind.ANY,)
        assert _parse("ipv4").args == (IpKind.V4,)
        assert _parse("ipv6").args == (IpKind.V6,)

    def test_source_is_kept(self):
        assert _parse("email").source == "email"

    def test_unknown(self):
        assert _error("regex") == "unrecognized rule `regex`"


class TestLength:

    def test_defaults(self):
        assert _parse("length(max=5)").args == (0, 5)
        assert _parse("length(min=2)").args == (2, sys.maxsize)
        assert _parse("length(min=1, max=64)").args == (1, 64)

    @pytest.mark.parametrize("text,message", [
        ("length(min=-1)", "value must be a non-negative integer"),
        ("length(min=True)", "value must be a non-negative integer"),
        ("length(min='1')", "value must be a non-negative integer"),
        ("length(min=3, max=3)", "min must be smaller than max"),
        ("length(min=5, max=3)", "min must be smaller than max"),
        ("length(1, 2)", "expected named arguments `min`, `max`"),
        ("length(size=1)", "unexpected `size`"),
        ("length()", "please provide at least one of: `min`, `max`"),
    ])
    def test_invalid(self, text, message):
        assert _error(text) == message


class TestRange:

    def test_natural_bounds_fill_missing_side(self):
        ctx = ParseContext(field_type=u8)
        assert _parse("range(min=1)", ctx).args == (1, 255)
        assert _parse("range(max=9)", ctx).args == (0, 9)

    def test_optional_type_keeps_bounds(self):
        ctx = ParseContext(field_type=u8 | None)
        assert _parse("range(min=1)", ctx).args == (1, 255)

    def test_missing_capability(self):
        assert _error("range(max=10)", ParseContext(field_type=int)) == (
            "`range` without `min` requires a type with natural bounds, `int` has none"
        )
        assert _error("range(min=0)", ParseContext(field_type=int)) == (
            "`range` without `max` requires a type with natural bounds, `int` has none"
        )

    def test_expressions_use_module_namespace(self):
        ctx = ParseContext(field_type=int, globalns={"LIMIT": 5})
        assert _parse("range(min=LIMIT, max=LIMIT * 2)", ctx).args == (5, 10)

    def test_no_ordering_check(self):
        assert _parse("range(min=1, max=0)", ParseContext(field_type=int)).args == (1, 0)

    def test_undefined_name(self):
        assert _error("range(min=missing, max=1)", ParseContext(field_type=int)) == (
            "name `missing` is not defined"
        )


class TestSubstringRules:

    def test_literal(self):
        assert _parse('prefix("https://")').args == ("https://",)

    @pytest.mark.parametrize("text,message", [
        ("prefix(1)", "expected a string literal"),
        ('suffix("")', "string must not be empty"),
        ('contains("a", "b")', "`contains` expects a single string literal"),
        ('contains(text="a")', "`contains` expects a single string literal"),
    ])
    def test_invalid(self, text, message):
        assert _error(text) == message


class TestPattern:

    def test_compiled_at_definition_time(self):
        rule = _parse(r'pattern("^[a-z]+-early$")')
        assert rule.args == ("^[a-z]+-early$",)
        assert "^[a-z]+-early$" in PATTERNS

    def test_invalid_regex(self):
        assert _error('pattern("[a-")').startswith("invalid regex: ")

    def test_deferred_compilation(self):
        ctx = ParseContext(field_type=str, validate_patterns=False)
        rule = _parse('pattern("(deferred-unclosed")', ctx)
        assert rule.args == ("(deferred-unclosed",)
        assert "(deferred-unclosed" not in PATTERNS


class TestCustom:

    def test_function_reference(self):
        ctx = ParseContext(globalns={"check_positive": check_positive})
        assert _parse("custom(check_positive)", ctx).args == (check_positive,)

    def test_dotted_reference(self):
        ctx = ParseContext(globalns={"helpers": SimpleNamespace(check=check_positive)})
        assert _parse("custom(helpers.check)", ctx).args == (check_positive,)

    def test_local_names_shadow_module_names(self):
        ctx = ParseContext(globalns={"check": one_arg}, localns={"check": check_positive})
        assert _parse("custom(check)", ctx).args == (check_positive,)

    def test_missing_attribute(self):
        ctx = ParseContext(globalns={"helpers": SimpleNamespace()})
        assert _error("custom(helpers.check)", ctx) == "name `helpers.check` is not defined"

    def test_lambda(self):
        (func,) = _parse("custom(lambda value, ctx: None)").args
        assert func("x", None) is None

    @pytest.mark.parametrize("text,message", [
        ("custom(42)", "custom rule must be a lambda or a reference to a function"),
        ("custom(f())", "custom rule must be a lambda or a reference to a function"),
        ("custom(nope)", "name `nope` is not defined"),
        ("custom(NOT_CALLABLE)", "`NOT_CALLABLE` is not callable"),
        ("custom(one_arg)", "custom rule must accept (value, context)"),
        ("custom(lambda value: None)", "custom rule must accept (value, context)"),
        ("custom(check_positive, one_arg)", "`custom` expects a single function"),
    ])
    def test_invalid(self, text, message):
        ctx = ParseContext(globalns={
            "NOT_CALLABLE": 3,
            "one_arg": one_arg,
            "check_positive": check_positive,
        })
        assert _error(text, ctx) == message

    def test_requires_arguments(self):
        assert _error("custom") == "`custom` expects arguments"

    def test_kind(self):
        assert _parse("custom(lambda v, c: None)").kind == RuleKind.CUSTOM
