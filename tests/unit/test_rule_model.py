"""Tests for the canonical rule model."""

import itertools

from fieldguard.models.rule import Rule, RuleKind, RuleSet


class TestRuleKind:

    def test_priorities_follow_catalog_order(self):
        assert [kind.rule_name for kind in sorted(RuleKind)] == [
            "ascii", "alphanumeric", "email", "url", "ip", "ipv4", "ipv6",
            "credit_card", "phone_number", "length", "range", "contains",
            "prefix", "suffix", "pattern", "custom",
        ]

    def test_from_name(self):
        assert RuleKind.from_name("ipv4") is RuleKind.IP_V4
        assert RuleKind.from_name("regex") is None

    def test_takes_args(self):
        assert not RuleKind.PHONE_NUMBER.takes_args
        assert RuleKind.LENGTH.takes_args
        assert RuleKind.CUSTOM.takes_args


class TestRule:

    def test_identity_is_kind_only(self):
        assert Rule(RuleKind.LENGTH, (1, 10)) == Rule(RuleKind.LENGTH, (0, 5))
        assert hash(Rule(RuleKind.LENGTH, (1, 10))) == hash(Rule(RuleKind.LENGTH, (0, 5)))
        assert Rule(RuleKind.LENGTH) != Rule(RuleKind.RANGE)

    def test_ordering_by_priority(self):
        assert Rule(RuleKind.ASCII) < Rule(RuleKind.CUSTOM)

    def test_str_prefers_source(self):
        assert str(Rule(RuleKind.LENGTH, (1, 2), "length(min=1, max=2)")) == "length(min=1, max=2)"
        assert str(Rule(RuleKind.EMAIL)) == "email"


class TestRuleSet:

    def test_sorted_by_priority(self):
        rules = RuleSet([Rule(RuleKind.PATTERN, ("x",)), Rule(RuleKind.ASCII), Rule(RuleKind.LENGTH, (1, 2))])
        assert rules.kinds == (RuleKind.ASCII, RuleKind.LENGTH, RuleKind.PATTERN)

    def test_deterministic_under_permutation(self):
        rules = [Rule(RuleKind.EMAIL), Rule(RuleKind.LENGTH, (1, 64)), Rule(RuleKind.ASCII)]
        sets = {RuleSet(order) for order in itertools.permutations(rules)}
        assert len(sets) == 1
        assert [rule.name for rule in next(iter(sets))] == ["ascii", "email", "length"]

    def test_first_rule_of_a_kind_wins(self):
        rules = RuleSet([Rule(RuleKind.LENGTH, (1, 5)), Rule(RuleKind.LENGTH, (2, 3))])
        assert len(rules) == 1
        assert rules.get(RuleKind.LENGTH).args == (1, 5)

    def test_membership(self):
        rules = RuleSet([Rule(RuleKind.URL)])
        assert RuleKind.URL in rules
        assert Rule(RuleKind.URL) in rules
        assert RuleKind.EMAIL not in rules
        assert rules.get(RuleKind.EMAIL) is None

    def test_empty(self):
        assert not RuleSet()
        assert repr(RuleSet([Rule(RuleKind.IP)])) == "RuleSet(ip)"
