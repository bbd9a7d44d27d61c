"""Tests for runtime profile validation."""

import json

import pytest

from readygate.profiles.models import (
    CanonicalKeyWarning,
    PlaceholderViolation,
    ProfileError,
    ProfileName,
    get_profile,
)
from readygate.profiles.render import render_config_json, render_config_text
from readygate.profiles.validator import (
    find_placeholder,
    resolve_canonical_keys,
    resolve_profile_name,
    validate,
)


GOOD_PROD = {
    "DATABASE_PATH": "/var/lib/app/app.db",
    "STORE_ID": "store-001",
    "JWT_SECRET": "3f9c1e7a2b8d4c6e9a0f1b2c3d4e5f60",
}


class TestProfileName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("dev", ProfileName.DEV),
            ("development", ProfileName.DEV),
            ("Demo", ProfileName.DEMO),
            (" PROD ", ProfileName.PROD),
            ("production", ProfileName.PROD),
        ],
    )
    def test_parse(self, raw, expected):
        assert ProfileName.parse(raw) is expected

    def test_unknown_profile(self):
        with pytest.raises(ProfileError, match="Valid options: dev, demo, prod"):
            ProfileName.parse("staging")

    def test_get_profile_accepts_names(self):
        assert get_profile("prod").name is ProfileName.PROD
        assert get_profile(ProfileName.DEMO).name is ProfileName.DEMO


class TestResolveProfileName:
    def test_explicit_wins(self):
        assert resolve_profile_name("prod", {"RUNTIME_PROFILE": "demo"}) is ProfileName.PROD

    def test_from_environment(self):
        assert resolve_profile_name(None, {"RUNTIME_PROFILE": "demo"}) is ProfileName.DEMO

    def test_defaults_to_dev(self):
        assert resolve_profile_name(None, {}) is ProfileName.DEV

    def test_invalid_environment_value(self):
        with pytest.raises(ProfileError):
            resolve_profile_name(None, {"RUNTIME_PROFILE": "qa"})


class TestProd:
    def test_complete_config_passes(self):
        result = validate("prod", GOOD_PROD)
        assert result.passed
        assert result.errors() == []

    def test_all_missing_fields_reported(self):
        result = validate("prod", {})
        assert result.missing_fields == ("DATABASE_PATH", "JWT_SECRET", "STORE_ID")
        assert not result.passed
        assert "STORE_ID is required in prod profile" in result.errors()

    def test_blank_values_count_as_missing(self):
        result = validate("prod", {**GOOD_PROD, "STORE_ID": "   "})
        assert result.missing_fields == ("STORE_ID",)

    def test_placeholder_secret_rejected(self):
        result = validate("prod", {**GOOD_PROD, "JWT_SECRET": "change-in-production"})
        assert result.placeholder_violations == (
            PlaceholderViolation(field="JWT_SECRET", matched_pattern="change-in-production"),
        )
        assert not result.passed
        assert (
            "JWT_SECRET contains placeholder value 'change-in-production' in prod profile"
            in result.errors()
        )

    def test_single_placeholder_on_otherwise_complete_config(self):
        result = validate(
            "prod", {"DATABASE_PATH": "x", "STORE_ID": "y", "JWT_SECRET": "CHANGE_ME"}
        )
        assert result.missing_fields == ()
        assert result.placeholder_violations == (
            PlaceholderViolation(field="JWT_SECRET", matched_pattern="CHANGE_ME"),
        )

    def test_placeholder_match_ignores_case_and_is_substring(self):
        result = validate("prod", {**GOOD_PROD, "API_KEY": "prefix-change_me-suffix"})
        assert [v.field for v in result.placeholder_violations] == ["API_KEY"]

    def test_every_problem_reported_together(self):
        result = validate(
            "prod",
            {"JWT_SECRET": "secret123", "SMTP_PASSWORD": "password123"},
        )
        assert result.missing_fields == ("DATABASE_PATH", "STORE_ID")
        assert [v.field for v in result.placeholder_violations] == [
            "JWT_SECRET",
            "SMTP_PASSWORD",
        ]
        assert len(result.errors()) == 4

    def test_demo_flag_is_unsafe(self):
        result = validate("prod", {**GOOD_PROD, "ENABLE_DEMO": True})
        assert [s.field for s in result.unsafe_settings] == ["ENABLE_DEMO"]
        assert not result.passed

    def test_disabled_demo_flag_is_fine(self):
        assert validate("prod", {**GOOD_PROD, "ENABLE_DEMO": "false"}).passed

    def test_localhost_redirect_with_integrations(self):
        config = {
            **GOOD_PROD,
            "INTEGRATIONS_ENABLED": "true",
            "QUICKBOOKS_REDIRECT_URI": "http://localhost:8080/callback",
        }
        result = validate("prod", config)
        assert [s.field for s in result.unsafe_settings] == ["QUICKBOOKS_REDIRECT_URI"]

    def test_localhost_redirect_without_integrations(self):
        config = {**GOOD_PROD, "QUICKBOOKS_REDIRECT_URI": "http://localhost:8080/cb"}
        assert validate("prod", config).passed


class TestCanonicalKeys:
    def test_deprecated_alias_satisfies_required_field(self):
        config = {"DATABASE_URL": "/data/app.db", "STORE_ID": "s", "JWT_SECRET": "k" * 32}
        result = validate("prod", config)
        assert result.passed
        assert result.canonical_key_warnings == (
            CanonicalKeyWarning(deprecated_key="DATABASE_URL", canonical_key="DATABASE_PATH"),
        )

    def test_canonical_key_wins(self):
        resolved, warnings = resolve_canonical_keys(
            {"DATABASE_PATH": "/new.db", "DB_PATH": "/old.db"}
        )
        assert resolved["DATABASE_PATH"] == "/new.db"
        assert warnings == []

    def test_first_alias_in_fallback_order(self):
        resolved, warnings = resolve_canonical_keys(
            {"SQLITE_PATH": "/c.db", "DB_PATH": "/b.db"}
        )
        assert resolved["DATABASE_PATH"] == "/b.db"
        assert [w.deprecated_key for w in warnings] == ["DB_PATH"]

    def test_warning_is_logged(self, caplog):
        with caplog.at_level("WARNING"):
            validate("dev", {"DB_URL": "/x.db"})
        assert "DB_URL is deprecated. Please use DATABASE_PATH instead." in caplog.text

    def test_deprecated_key_never_fails_validation(self):
        assert validate("dev", {"SQLITE_URL": "/x.db"}).passed


class TestDevAndDemo:
    def test_dev_accepts_anything(self):
        result = validate("dev", {"JWT_SECRET": "CHANGE_ME"})
        assert result.passed
        assert result.advisories == ()

    def test_demo_placeholders_are_advisory(self):
        result = validate("demo", {"JWT_SECRET": "CHANGE_ME", "ENABLE_DEMO": "true"})
        assert result.passed
        assert result.placeholder_violations == ()
        assert any("JWT_SECRET" in note for note in result.advisories)

    def test_demo_without_demo_flag_advises(self):
        result = validate("demo", {})
        assert result.passed
        assert any("ENABLE_DEMO" in note for note in result.advisories)


def test_find_placeholder_first_match():
    patterns = ("CHANGE_ME", "secret123")
    assert find_placeholder("secret123-CHANGE_ME", patterns) == "CHANGE_ME"
    assert find_placeholder("s3cure", patterns) is None


def test_render_config_text_and_json():
    result = validate("prod", {"JWT_SECRET": "your-secret-key", "DB_PATH": "/x.db"})
    text = render_config_text(result)
    assert "MISSING FIELDS" in text
    assert "PLACEHOLDER SECRETS" in text
    assert "DEPRECATED KEYS" in text
    assert "FAILED" in text

    data = json.loads(render_config_json(result))
    assert data["profile"] == "prod"
    assert data["passed"] is False
    assert data["missing_fields"] == ["STORE_ID"]
    assert data["canonical_key_warnings"] == [
        {"deprecated_key": "DB_PATH", "canonical_key": "DATABASE_PATH"}
    ]


def test_render_config_text_passed():
    assert "PASSED" in render_config_text(validate("prod", GOOD_PROD))
