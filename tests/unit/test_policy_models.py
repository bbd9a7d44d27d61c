"""Tests for policy data models."""

import dataclasses

import pytest

from readygate.policy.models import PatternRule, Policy, Severity


def test_severity_values():
    assert Severity.ERROR.value == "error"
    assert Severity.WARNING.value == "warning"
    assert [s.value for s in Severity] == ["error", "warning"]


def test_pattern_rule_compiles_once():
    rule = PatternRule(id="x", pattern=r"foo\d", message="m", severity=Severity.ERROR)
    assert rule.regex.search("a foo1 b")
    assert rule.regex is rule.regex


def test_pattern_rule_equality_ignores_compiled_regex():
    a = PatternRule(id="x", pattern="foo", message="m", severity=Severity.ERROR)
    b = PatternRule(id="x", pattern="foo", message="m", severity=Severity.ERROR)
    assert a == b


def test_pattern_rule_frozen():
    rule = PatternRule(id="x", pattern="foo", message="m", severity=Severity.WARNING)
    with pytest.raises(dataclasses.FrozenInstanceError):
        rule.id = "y"  # type: ignore[misc]


def test_policy_defaults():
    policy = Policy(version="1")
    assert policy.name == "unnamed"
    assert policy.scan_paths == ()
    assert policy.forbidden_patterns == ()
    assert dict(policy.allowed_exceptions) == {}


def test_policy_rule_lookup(gate_policy: Policy):
    assert gate_policy.rule("legacy-branding").severity == Severity.WARNING
    assert gate_policy.rule("missing") is None


def test_policy_exceptions_are_read_only():
    source = {"demo-credentials": ["fixtures/**"]}
    policy = Policy(version="1", allowed_exceptions=source)
    source["other"] = ["x"]

    assert dict(policy.allowed_exceptions) == {"demo-credentials": ("fixtures/**",)}
    with pytest.raises(TypeError):
        policy.allowed_exceptions["other"] = ("x",)  # type: ignore[index]
