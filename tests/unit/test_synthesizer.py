"""Tests for validator synthesis."""

from dataclasses import dataclass
from typing import Annotated, Any, NamedTuple, Optional

import pytest

from fieldguard import EMPTY, Error, TaggedUnion, guard, u8
from fieldguard.errors import FieldErrors, ListErrors, Simple
from fieldguard.models.rule import Rule, RuleKind
from fieldguard.synthesis import bind_rule, compile_shape, synthesize


def no_delegate(value, ctx):
    raise AssertionError("unexpected delegation")


def reject_admin(value, ctx):
    if value == "admin":
        raise Error("reserved name")


def returns_error(value, ctx):
    if value == "root":
        return Error("reserved name")
    return None


def seen_by(value, ctx):
    ctx.append(value)


@dataclass
class Person:
    name: Annotated[str, guard("length(min=1, max=8), ascii, custom(reject_admin)")]
    age: Annotated[u8, guard("range(min=18)")]


@dataclass
class Renamed:
    user_name: Annotated[str, guard('length(min=1), rename = "userName"')]
    note: Annotated[str, guard("skip")] = ""


class Point(NamedTuple):
    x: Annotated[int, guard("range(min=0, max=100)")]
    y: Annotated[int, guard("range(min=0, max=100)")]


class Nothing:
    pass


class Figure(TaggedUnion):
    @dataclass
    class Circle:
        radius: Annotated[float, guard("range(min=0.0)")]

    class Segment(NamedTuple):
        length: Annotated[float, guard("range(min=0.0)")]

    class Dot:
        pass


@dataclass
class Nickname:
    value: Annotated[Optional[str], guard("length(min=3)")]
    anything: Annotated[Any, guard("length(min=3)")] = None


@dataclass
class Returning:
    name: Annotated[str, guard("custom(returns_error)")]


@dataclass
class Spy:
    first: Annotated[str, guard("custom(seen_by)")]
    second: Annotated[str, guard("custom(seen_by)")]


def _validator(cls, delegate=no_delegate):
    return synthesize(compile_shape(cls), delegate)


class TestRecord:

    def test_valid_instance(self):
        errors = _validator(Person)(Person("ada", 36), None)
        assert errors == FieldErrors({"name": Simple(), "age": Simple()})
        assert errors.is_empty()

    def test_every_failing_rule_is_reported_in_priority_order(self):
        errors = _validator(Person)(Person("añadir-admin", 3), None)
        assert errors["name"] == Simple([Error("not ascii"), Error("length is greater than 8")])
        assert errors["age"] == Simple([Error("lower than 18")])

    def test_custom_rule_raising(self):
        errors = _validator(Person)(Person("admin", 20), None)
        assert errors.flatten() == [("name", Error("reserved name"))]

    def test_custom_rule_returning_error(self):
        errors = _validator(Returning)(Returning("root"), None)
        assert errors["name"] == Simple([Error("reserved name")])
        assert _validator(Returning)(Returning("ada"), None).is_empty()

    def test_rename_key_and_skip(self):
        errors = _validator(Renamed)(Renamed(""), None)
        assert list(errors.fields) == ["userName"]
        assert errors["userName"] == Simple([Error("length is lower than 1")])

    def test_no_short_circuit_across_fields(self):
        calls = []
        _validator(Spy)(Spy("a", "b"), calls)
        assert calls == ["a", "b"]


class TestTuple:

    def test_positional_errors(self):
        errors = _validator(Point)(Point(-1, 200), None)
        assert errors == ListErrors([Simple([Error("lower than 0")]), Simple([Error("greater than 100")])])

    def test_unit_class(self):
        errors = _validator(Nothing)(Nothing(), None)
        assert errors == ListErrors([])
        assert errors.is_empty()


class TestUnion:

    def test_dispatch_per_variant(self):
        validate = _validator(Figure)
        assert validate(Figure.Circle(-1.0), None) == FieldErrors({"radius": Simple([Error("lower than 0.0")])})
        assert validate(Figure.Segment(-2.0), None) == ListErrors([Simple([Error("lower than 0.0")])])
        assert validate(Figure.Dot(), None) is EMPTY

    def test_foreign_instance(self):
        with pytest.raises(TypeError, match="is not a variant of Figure"):
            _validator(Figure)(Point(1, 2), None)


class TestOptional:

    def test_none_passes_every_rule(self):
        assert _validator(Nickname)(Nickname(None), None).is_empty()

    def test_value_is_still_checked(self):
        errors = _validator(Nickname)(Nickname("ab", "xy"), None)
        assert errors.flatten() == [
            ("value", Error("length is lower than 3")),
            ("anything", Error("length is lower than 3")),
        ]


class TestDelegation:

    def test_delegate_receives_value_and_context(self):
        @dataclass
        class Wrapper:
            inner: Annotated[Person, guard("dive")]

        nested = FieldErrors({"name": Simple([Error("x")])})
        seen = []

        def delegate(value, ctx):
            seen.append((value, ctx))
            return nested

        person = Person("ada", 30)
        errors = _validator(Wrapper, delegate)(Wrapper(person), "ctx")
        assert seen == [(person, "ctx")]
        assert errors["inner"] is nested


class TestBindRule:

    def test_builtin(self):
        check = bind_rule(Rule(RuleKind.LENGTH, (1, 2)))
        check("a", None)
        with pytest.raises(Error):
            check("abc", None)

    def test_custom_is_called_directly(self):
        check = bind_rule(Rule(RuleKind.CUSTOM, (reject_admin,)))
        assert check is reject_admin
