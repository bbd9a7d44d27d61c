"""Load, validate and resolve Policy objects from YAML or JSON files."""

from __future__ import annotations

import importlib.resources
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from readygate.policy.models import PatternRule, Policy, Severity
from readygate.policy.schema import PolicyDocument

logger = logging.getLogger(__name__)

_PRESET_PREFIX = "preset:"
DEFAULT_PRESET = "default"
_NO_SCAN_PATHS = "scanPaths: at least one scan path is required"


class PolicyError(ValueError):
    """A policy is unreadable, malformed or fails validation.

    ``errors`` holds every problem found, one human-readable entry each.
    """

    def __init__(self, errors: list[str] | str, source: str = "") -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        self.source = source
        where = f" {source}" if source else ""
        if len(self.errors) == 1:
            message = f"Invalid policy{where}: {self.errors[0]}"
        else:
            lines = "\n".join(f"  - {e}" for e in self.errors)
            message = f"Invalid policy{where}: {len(self.errors)} errors\n{lines}"
        super().__init__(message)


def load_policy(path: str | Path, _chain: tuple[str, ...] = ()) -> Policy:
    """Load a policy from a YAML or JSON file path."""
    path = Path(path)
    key = str(path.resolve())
    _check_cycle(key, _chain)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PolicyError(f"cannot read policy file: {e}", source=str(path)) from e
    data = _parse(text, source=str(path))
    return _build_policy(
        data,
        source=str(path),
        default_name=path.stem,
        base_dir=path.parent,
        _chain=_chain + (key,),
    )


def load_policy_from_string(
    text: str,
    name: str = "inline",
    base_dir: str | Path | None = None,
) -> Policy:
    """Parse a YAML/JSON string into a Policy, resolving inheritance."""
    data = _parse(text, source=name)
    return _build_policy(
        data,
        source=name,
        default_name=name,
        base_dir=Path(base_dir) if base_dir else Path.cwd(),
        _chain=(),
    )


def load_preset(name: str, _chain: tuple[str, ...] = ()) -> Policy:
    """Load one of the policies bundled with readygate."""
    key = f"{_PRESET_PREFIX}{name}"
    _check_cycle(key, _chain)
    resource = importlib.resources.files("readygate.policy.presets").joinpath(
        f"{name}.yaml"
    )
    if not resource.is_file():
        raise PolicyError(f"unknown preset '{name}'", source=key)
    data = _parse(resource.read_text(encoding="utf-8"), source=key)
    return _build_policy(
        data,
        source=key,
        default_name=name,
        base_dir=Path.cwd(),
        _chain=_chain + (key,),
    )


def resolve_policy(path: str | Path | None) -> Policy:
    """Load ``path``, or the bundled default policy when no path is given."""
    if path:
        return load_policy(path)
    logger.info("No policy given, using preset '%s'", DEFAULT_PRESET)
    return load_preset(DEFAULT_PRESET)


def _check_cycle(key: str, chain: tuple[str, ...]) -> None:
    if key in chain:
        cycle = " -> ".join(chain + (key,))
        raise PolicyError(f"Circular policy inheritance detected: {cycle}", source=key)


def _parse(text: str, source: str) -> dict[str, Any]:
    # JSON is a subset of YAML, so one parser serves both formats
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PolicyError(f"document is not valid YAML/JSON: {e}", source=source) from e
    if not isinstance(data, dict):
        raise PolicyError("Policy document must be a mapping", source=source)
    return data


def _build_policy(
    data: dict[str, Any],
    source: str,
    default_name: str,
    base_dir: Path,
    _chain: tuple[str, ...],
) -> Policy:
    errors = _duplicate_ids(data)
    try:
        doc = PolicyDocument.model_validate(data)
    except ValidationError as e:
        errors[:0] = _format_validation_errors(e, data)
        # Without inheritance the raw document alone decides the scan paths
        if not data.get("inherit") and not data.get("scanPaths"):
            errors.append(_NO_SCAN_PATHS)
        raise PolicyError(errors, source=source) from e

    own_rules = [
        PatternRule(
            id=r.id,
            pattern=r.pattern,
            message=r.message,
            severity=Severity(r.severity),
        )
        for r in doc.forbidden_patterns
    ]
    parents = [_load_ref(ref, base_dir, _chain) for ref in doc.inherit]

    # Own rules first; an inherited rule is shadowed by an own rule with the same id
    rules = list(own_rules)
    rule_ids = {r.id for r in rules}
    for parent in parents:
        for rule in parent.forbidden_patterns:
            if rule.id not in rule_ids:
                rules.append(rule)
                rule_ids.add(rule.id)

    scan_paths = _unique(doc.scan_paths, *(p.scan_paths for p in parents))
    exclusions = _unique(doc.exclusions, *(p.exclusions for p in parents))

    exceptions: dict[str, tuple[str, ...]] = {
        key: _unique(globs) for key, globs in doc.allowed_exceptions.items()
    }
    for parent in parents:
        for key, globs in parent.allowed_exceptions.items():
            exceptions[key] = _unique(exceptions.get(key, ()), globs)

    if not scan_paths:
        errors.append(_NO_SCAN_PATHS)
    if errors:
        raise PolicyError(errors, source=source)

    for key in sorted(exceptions):
        if key not in rule_ids:
            logger.warning(
                "Policy %s: allowedExceptions names unknown pattern id '%s'",
                source,
                key,
            )

    return Policy(
        version=doc.version,
        scan_paths=scan_paths,
        exclusions=exclusions,
        forbidden_patterns=tuple(rules),
        allowed_exceptions=exceptions,
        name=doc.name or default_name,
        inherit=tuple(doc.inherit),
    )


def _load_ref(ref: str, base_dir: Path, _chain: tuple[str, ...]) -> Policy:
    if ref.startswith(_PRESET_PREFIX):
        return load_preset(ref[len(_PRESET_PREFIX) :], _chain)
    # Treat as file path, relative to the including document
    path = Path(ref)
    if not path.is_absolute():
        path = base_dir / path
    return load_policy(path, _chain)


def _unique(*groups) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


def _format_validation_errors(exc: ValidationError, data: dict[str, Any]) -> list[str]:
    """Render pydantic errors as ``location: message`` lines naming the rule id."""
    raw_rules = data.get("forbiddenPatterns")
    lines: list[str] = []
    for err in exc.errors():
        loc = list(err["loc"])
        parts: list[str] = []
        for i, item in enumerate(loc):
            if isinstance(item, int):
                parts[-1] = f"{parts[-1]}[{item}]"
                if (
                    i == 1
                    and loc[0] == "forbiddenPatterns"
                    and isinstance(raw_rules, list)
                    and item < len(raw_rules)
                    and isinstance(raw_rules[item], dict)
                    and raw_rules[item].get("id")
                ):
                    parts[-1] += f" (id={raw_rules[item]['id']})"
            else:
                parts.append(str(item))
        location = ".".join(parts) or "<document>"
        lines.append(f"{location}: {err['msg']}")
    return lines


def _duplicate_ids(data: dict[str, Any]) -> list[str]:
    """Duplicate rule ids, read from the raw document so schema errors don't hide them."""
    raw_rules = data.get("forbiddenPatterns")
    if not isinstance(raw_rules, list):
        return []
    errors: list[str] = []
    seen: set[str] = set()
    for raw in raw_rules:
        if not isinstance(raw, dict) or raw.get("id") is None:
            continue
        rule_id = str(raw["id"]).strip()
        if rule_id in seen:
            errors.append(f"forbiddenPatterns: duplicate pattern id '{rule_id}'")
        seen.add(rule_id)
    return errors
