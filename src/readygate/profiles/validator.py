"""Runtime profile validator: checks a flat config map against a profile.

Every check appends to its own accumulator; nothing short-circuits, so one
call reports all missing keys, all placeholder secrets and all unsafe flags.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from readygate.profiles.models import (
    CANONICAL_KEYS,
    CanonicalKeyWarning,
    ConfigValidationResult,
    PlaceholderViolation,
    ProfileName,
    RuntimeProfile,
    UnsafeSetting,
    get_profile,
)

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "RUNTIME_PROFILE"

_TRUTHY = {"1", "true", "yes", "on"}
_LOCAL_HOSTS = ("localhost", "127.0.0.1")


def resolve_profile_name(
    explicit: str | None = None,
    env: Mapping[str, str] | None = None,
) -> ProfileName:
    """Explicit name, else ``RUNTIME_PROFILE``, else ``dev``."""
    if explicit:
        return ProfileName.parse(explicit)
    env = os.environ if env is None else env
    from_env = env.get(PROFILE_ENV_VAR)
    if from_env:
        return ProfileName.parse(from_env)
    return ProfileName.DEV


def validate(
    profile: str | ProfileName | RuntimeProfile,
    config: Mapping[str, object],
) -> ConfigValidationResult:
    """Validate ``config`` against ``profile`` and return every problem found."""
    rules = get_profile(profile)
    values = {str(key): _as_str(value) for key, value in config.items()}

    resolved, canonical_warnings = resolve_canonical_keys(values)

    missing = sorted(
        name for name in rules.required_fields if not _present(resolved.get(name))
    )

    placeholders: list[PlaceholderViolation] = []
    for key in sorted(values):
        matched = find_placeholder(values[key], rules.placeholder_patterns)
        if matched is not None:
            placeholders.append(PlaceholderViolation(field=key, matched_pattern=matched))

    unsafe = _unsafe_settings(rules, values)
    advisories = _advisories(rules, values)
    for note in advisories:
        logger.warning(note)

    result = ConfigValidationResult(
        profile=rules.name,
        missing_fields=tuple(missing),
        placeholder_violations=tuple(placeholders),
        canonical_key_warnings=tuple(canonical_warnings),
        unsafe_settings=tuple(unsafe),
        advisories=tuple(advisories),
    )
    logger.info(
        "Validated config for profile %s: %s",
        rules.name.value,
        "passed" if result.passed else f"{len(result.errors())} problem(s)",
    )
    return result


def resolve_canonical_keys(
    values: Mapping[str, str],
) -> tuple[dict[str, str], list[CanonicalKeyWarning]]:
    """Fold deprecated key names onto their canonical key.

    The canonical key always wins when set. Otherwise the first deprecated
    alias that is set supplies the value and is reported once.
    """
    resolved = dict(values)
    warnings: list[CanonicalKeyWarning] = []
    for canonical, aliases in CANONICAL_KEYS.items():
        if _present(values.get(canonical)):
            continue
        for alias in aliases:
            if _present(values.get(alias)):
                resolved[canonical] = values[alias]
                warnings.append(
                    CanonicalKeyWarning(deprecated_key=alias, canonical_key=canonical)
                )
                logger.warning(
                    "%s is deprecated. Please use %s instead.", alias, canonical
                )
                break
    return resolved, warnings


def find_placeholder(value: str, patterns: tuple[str, ...]) -> str | None:
    """Return the first placeholder contained in ``value``, ignoring case."""
    lowered = value.lower()
    for pattern in patterns:
        if pattern.lower() in lowered:
            return pattern
    return None


def _unsafe_settings(
    rules: RuntimeProfile, values: Mapping[str, str]
) -> list[UnsafeSetting]:
    unsafe: list[UnsafeSetting] = []
    profile = rules.name.value

    for flag in rules.forbidden_flags:
        if _truthy(values.get(flag)):
            unsafe.append(
                UnsafeSetting(
                    field=flag,
                    reason=f"{flag}={values[flag]} is not allowed in {profile} profile",
                )
            )

    if rules.localhost_redirects_forbidden and _truthy(
        values.get("INTEGRATIONS_ENABLED")
    ):
        for name in rules.redirect_uri_fields:
            uri = values.get(name, "")
            if any(host in uri.lower() for host in _LOCAL_HOSTS):
                unsafe.append(
                    UnsafeSetting(
                        field=name,
                        reason=(
                            f"OAuth redirect URI points at localhost ('{uri}') "
                            f"in {profile} profile with integrations enabled"
                        ),
                    )
                )
    return unsafe


def _advisories(rules: RuntimeProfile, values: Mapping[str, str]) -> list[str]:
    notes: list[str] = []
    profile = rules.name.value
    for key in sorted(values):
        matched = find_placeholder(values[key], rules.advisory_placeholder_patterns)
        if matched is not None:
            notes.append(
                f"{key} contains placeholder value '{matched}' in {profile} profile; "
                "acceptable here but it must be changed for production"
            )
    for flag in rules.expected_flags:
        if not _truthy(values.get(flag)):
            notes.append(
                f"{profile} profile is active but {flag} is not enabled; "
                f"consider setting {flag}=true"
            )
    return notes


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def _truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def _as_str(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
