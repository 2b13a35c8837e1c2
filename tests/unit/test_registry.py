"""Tests for the validator registry and shared caches."""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Annotated

import pytest

from fieldguard import EMPTY, Error, FieldguardConfig, ShapeDefinitionError, TaggedUnion, guard
from fieldguard.errors import FieldErrors, ListErrors, Simple
from fieldguard.rules.pattern import PatternCache
from fieldguard.synthesis import ValidatorRegistry, enclosing_union
from fieldguard.synthesis import registry as registry_module


@dataclass
class Item:
    name: Annotated[str, guard("length(min=1)")]


class Signal(TaggedUnion):
    @dataclass
    class Level:
        value: Annotated[float, guard("range(min=0.0, max=1.0)")]

    class Off:
        pass


@dataclass
class Unchecked:
    name: str


@dataclass
class LatePattern:
    code: Annotated[str, guard('pattern("[unclosed-late")')]


class Plain:
    pass


class TestLookup:

    def test_lazy_compilation_is_cached(self):
        registry = ValidatorRegistry()
        assert Item not in registry
        compiled = registry.get(Item)
        assert Item in registry
        assert registry.get(Item) is compiled

    def test_variants_share_the_union_validator(self):
        registry = ValidatorRegistry()
        assert registry.get(Signal.Level) is registry.get(Signal)
        assert registry.get(Signal.Off).shape.name == "Signal"

    def test_register_replaces(self):
        registry = ValidatorRegistry()
        first = registry.get(Item)
        second = registry.register(Item)
        assert second is not first
        assert registry.get(Item) is second

    def test_definition_errors_propagate(self):
        with pytest.raises(ShapeDefinitionError):
            ValidatorRegistry().get(Unchecked)

    def test_not_a_shape(self):
        with pytest.raises(TypeError, match="not a fieldguard shape"):
            ValidatorRegistry().get(Plain)

    def test_config_controls_pattern_checks(self):
        with pytest.raises(ShapeDefinitionError):
            ValidatorRegistry().get(LatePattern)
        lenient = FieldguardConfig(patterns={"validateEarly": False})
        assert ValidatorRegistry(lenient).get(LatePattern).shape.name == "LatePattern"

    def test_default_context(self):
        class Ctx:
            pass

        compiled = ValidatorRegistry().register(Item, context=Ctx)
        assert isinstance(compiled.default_context(), Ctx)
        assert ValidatorRegistry().get(Item).default_context() is None


class TestEnclosingUnion:

    def test_variant(self):
        assert enclosing_union(Signal.Level) is Signal
        assert enclosing_union(Signal.Off) is Signal

    def test_not_a_variant(self):
        assert enclosing_union(Item) is None
        assert enclosing_union(Signal) is None
        assert enclosing_union(42) is None

    def test_union_declared_in_a_function(self):
        class Reading(TaggedUnion):
            @dataclass
            class Value:
                amount: Annotated[float, guard("range(min=0.0)")]

            class Missing:
                pass

        assert enclosing_union(Reading.Value) is Reading
        assert enclosing_union(Reading.Missing) is Reading

        registry = ValidatorRegistry()
        assert registry.errors_of(Reading.Missing(), None) is EMPTY
        assert registry.errors_of(Reading.Value(-1.0), None).flatten() == [
            ("amount", Error("lower than 0.0")),
        ]
        assert registry.get(Reading.Value) is registry.get(Reading)


class TestDelegatedValues:

    def test_none(self):
        assert ValidatorRegistry().errors_of(None, None) is EMPTY

    def test_shape(self):
        errors = ValidatorRegistry().errors_of(Item(""), None)
        assert errors == FieldErrors({"name": Simple([Error("length is lower than 1")])})

    def test_sequence(self):
        errors = ValidatorRegistry().errors_of([Item("a"), Item("")], None)
        assert isinstance(errors, ListErrors)
        assert errors.flatten() == [("[1].name", Error("length is lower than 1"))]

    def test_mapping_keys_are_strings(self):
        errors = ValidatorRegistry().errors_of({1: Item(""), 2: Item("b")}, None)
        assert list(errors.fields) == ["1", "2"]
        assert not errors["1"].is_empty()

    def test_mapping_keys_that_print_alike_stay_apart(self):
        errors = ValidatorRegistry().errors_of({1: Item(""), "1": Item("ok")}, None)
        assert list(errors.fields) == ["1 (int)", "1"]
        assert errors.flatten() == [("1 (int).name", Error("length is lower than 1"))]
        assert errors["1"].is_empty()

    def test_variant_instance(self):
        errors = ValidatorRegistry().errors_of(Signal.Level(2.0), None)
        assert errors.flatten() == [("value", Error("greater than 1.0"))]

    def test_unsupported_value(self):
        with pytest.raises(TypeError, match="cannot validate int"):
            ValidatorRegistry().errors_of(42, None)


class TestConcurrency:

    def test_compiled_once_under_concurrent_first_use(self, monkeypatch):
        calls = []
        original = registry_module.compile_shape

        def counting(cls, **kwargs):
            calls.append(cls)
            return original(cls, **kwargs)

        monkeypatch.setattr(registry_module, "compile_shape", counting)
        registry = ValidatorRegistry()
        barrier = threading.Barrier(8)

        def lookup(_):
            barrier.wait()
            return registry.get(Item)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lookup, range(8)))

        assert calls == [Item]
        assert all(result is results[0] for result in results)

    def test_pattern_compiled_once(self):
        cache = PatternCache()
        barrier = threading.Barrier(8)

        def lookup(_):
            barrier.wait()
            return cache.get(r"^[a-z]{2,}\d*$")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lookup, range(8)))

        assert cache.compilations == 1
        assert len(cache) == 1
        assert all(result is results[0] for result in results)
