"""Policy data models: immutable dataclasses used across the entire codebase."""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class Severity(enum.Enum):
    """Violation severity. Only ``ERROR`` fails the gate."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class PatternRule:
    """A single forbidden pattern, matched line by line."""

    id: str
    pattern: str
    message: str
    severity: Severity
    regex: re.Pattern[str] = field(compare=False, repr=False, default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.regex is None:
            object.__setattr__(self, "regex", re.compile(self.pattern))


@dataclass(frozen=True)
class Policy:
    """A complete, validated policy definition."""

    version: str
    scan_paths: tuple[str, ...] = ()
    exclusions: tuple[str, ...] = ()
    forbidden_patterns: tuple[PatternRule, ...] = ()
    allowed_exceptions: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    name: str = "unnamed"
    inherit: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "allowed_exceptions",
            MappingProxyType(
                {key: tuple(globs) for key, globs in self.allowed_exceptions.items()}
            ),
        )

    def rule(self, pattern_id: str) -> PatternRule | None:
        for rule in self.forbidden_patterns:
            if rule.id == pattern_id:
                return rule
        return None
