"""Runtime profile definitions and validation result models."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ProfileError(ValueError):
    """Unknown runtime profile name."""


class ProfileName(enum.Enum):
    DEV = "dev"
    DEMO = "demo"
    PROD = "prod"

    @classmethod
    def parse(cls, value: str | ProfileName) -> ProfileName:
        """Parse a profile name, accepting ``development``/``production`` aliases."""
        if isinstance(value, ProfileName):
            return value
        normalized = value.strip().lower()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ProfileError(
                f"Invalid runtime profile '{value}'. Valid options: dev, demo, prod"
            ) from None


_ALIASES = {"development": "dev", "production": "prod"}

CANONICAL_DATABASE_KEY = "DATABASE_PATH"

# Legacy names for DATABASE_PATH, in fallback order
DEPRECATED_DATABASE_KEYS = (
    "DATABASE_URL",
    "DB_PATH",
    "DB_URL",
    "SQLITE_PATH",
    "SQLITE_URL",
)

CANONICAL_KEYS: dict[str, tuple[str, ...]] = {
    CANONICAL_DATABASE_KEY: DEPRECATED_DATABASE_KEYS,
}

PLACEHOLDER_PATTERNS = (
    "CHANGE_ME",
    "secret123",
    "password123",
    "test-secret",
    "your-secret-key",
    "change-in-production",
)


@dataclass(frozen=True)
class RuntimeProfile:
    """Validation rules for one deployment profile."""

    name: ProfileName
    required_fields: frozenset[str] = frozenset()
    placeholder_patterns: tuple[str, ...] = ()
    # Placeholders that only produce advisories
    advisory_placeholder_patterns: tuple[str, ...] = ()
    # Flags that must not be truthy under this profile
    forbidden_flags: tuple[str, ...] = ()
    # Flags that should be truthy; an advisory is emitted otherwise
    expected_flags: tuple[str, ...] = ()
    redirect_uri_fields: tuple[str, ...] = ()
    localhost_redirects_forbidden: bool = False


PROFILES: dict[ProfileName, RuntimeProfile] = {
    ProfileName.DEV: RuntimeProfile(name=ProfileName.DEV),
    ProfileName.DEMO: RuntimeProfile(
        name=ProfileName.DEMO,
        advisory_placeholder_patterns=PLACEHOLDER_PATTERNS,
        expected_flags=("ENABLE_DEMO",),
    ),
    ProfileName.PROD: RuntimeProfile(
        name=ProfileName.PROD,
        required_fields=frozenset({CANONICAL_DATABASE_KEY, "STORE_ID", "JWT_SECRET"}),
        placeholder_patterns=PLACEHOLDER_PATTERNS,
        forbidden_flags=("ENABLE_DEMO", "ENABLE_DEV_ENDPOINTS"),
        redirect_uri_fields=("QUICKBOOKS_REDIRECT_URI", "GOOGLE_DRIVE_REDIRECT_URI"),
        localhost_redirects_forbidden=True,
    ),
}


def get_profile(name: str | ProfileName | RuntimeProfile) -> RuntimeProfile:
    if isinstance(name, RuntimeProfile):
        return name
    return PROFILES[ProfileName.parse(name)]


@dataclass(frozen=True)
class PlaceholderViolation:
    field: str
    matched_pattern: str


@dataclass(frozen=True)
class CanonicalKeyWarning:
    deprecated_key: str
    canonical_key: str


@dataclass(frozen=True)
class UnsafeSetting:
    field: str
    reason: str


@dataclass(frozen=True)
class ConfigValidationResult:
    """Every problem found in one config, never just the first."""

    profile: ProfileName
    missing_fields: tuple[str, ...] = ()
    placeholder_violations: tuple[PlaceholderViolation, ...] = ()
    canonical_key_warnings: tuple[CanonicalKeyWarning, ...] = ()
    unsafe_settings: tuple[UnsafeSetting, ...] = ()
    advisories: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not (
            self.missing_fields or self.placeholder_violations or self.unsafe_settings
        )

    def errors(self) -> list[str]:
        """Failing problems as human-readable lines."""
        lines = [
            f"{name} is required in {self.profile.value} profile"
            for name in self.missing_fields
        ]
        lines.extend(
            f"{v.field} contains placeholder value '{v.matched_pattern}' "
            f"in {self.profile.value} profile"
            for v in self.placeholder_violations
        )
        lines.extend(f"{s.field}: {s.reason}" for s in self.unsafe_settings)
        return lines

    def to_dict(self) -> dict[str, object]:
        return {
            "profile": self.profile.value,
            "passed": self.passed,
            "missing_fields": list(self.missing_fields),
            "placeholder_violations": [
                {"field": v.field, "matched_pattern": v.matched_pattern}
                for v in self.placeholder_violations
            ],
            "canonical_key_warnings": [
                {"deprecated_key": w.deprecated_key, "canonical_key": w.canonical_key}
                for w in self.canonical_key_warnings
            ],
            "unsafe_settings": [
                {"field": s.field, "reason": s.reason} for s in self.unsafe_settings
            ],
            "advisories": list(self.advisories),
        }
