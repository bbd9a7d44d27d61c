"""Text and JSON renderings of a ConfigValidationResult."""

from __future__ import annotations

import json

from readygate.profiles.models import ConfigValidationResult


def render_config_text(result: ConfigValidationResult) -> str:
    lines = [f"readygate config check: profile {result.profile.value}", ""]

    if result.missing_fields:
        lines.append(f"MISSING FIELDS ({len(result.missing_fields)})")
        lines.extend(f"  {name}" for name in result.missing_fields)
        lines.append("")

    if result.placeholder_violations:
        lines.append(f"PLACEHOLDER SECRETS ({len(result.placeholder_violations)})")
        lines.extend(
            f"  {v.field}: contains '{v.matched_pattern}'"
            for v in result.placeholder_violations
        )
        lines.append("")

    if result.unsafe_settings:
        lines.append(f"UNSAFE SETTINGS ({len(result.unsafe_settings)})")
        lines.extend(f"  {s.field}: {s.reason}" for s in result.unsafe_settings)
        lines.append("")

    if result.canonical_key_warnings:
        lines.append(f"DEPRECATED KEYS ({len(result.canonical_key_warnings)})")
        lines.extend(
            f"  {w.deprecated_key} is deprecated, use {w.canonical_key}"
            for w in result.canonical_key_warnings
        )
        lines.append("")

    if result.advisories:
        lines.append(f"ADVISORIES ({len(result.advisories)})")
        lines.extend(f"  {note}" for note in result.advisories)
        lines.append("")

    problems = len(result.errors())
    lines.append("PASSED" if result.passed else f"FAILED: {problems} problem(s)")
    return "\n".join(lines) + "\n"


def render_config_json(result: ConfigValidationResult) -> str:
    return json.dumps(result.to_dict(), indent=2) + "\n"
