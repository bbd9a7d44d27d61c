"""Scanner data models: violations, scan warnings and the final report."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field

from readygate.policy.models import Severity


@dataclass(frozen=True)
class Violation:
    """One forbidden-pattern match in one file/line."""

    file: str
    line: int
    pattern_id: str
    severity: Severity
    message: str
    excerpt: str

    @property
    def sort_key(self) -> tuple[str, int, str]:
        return (self.file, self.line, self.pattern_id)

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "line": self.line,
            "pattern_id": self.pattern_id,
            "severity": self.severity.value,
            "message": self.message,
            "excerpt": self.excerpt,
        }


class WarningKind(enum.Enum):
    """Recoverable problems met while enumerating or reading files."""

    MISSING_PATH = "missing_path"
    UNREADABLE_FILE = "unreadable_file"
    UNREADABLE_DIR = "unreadable_dir"


@dataclass(frozen=True)
class ScanWarning:
    """A non-fatal scan problem, annotated on the report."""

    kind: WarningKind
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "path": self.path, "message": self.message}


@dataclass(frozen=True)
class ScanReport:
    """Aggregate, immutable result of one complete scan."""

    timestamp: str
    scanned_file_count: int
    violations: tuple[Violation, ...] = ()
    violations_by_severity: Mapping[str, int] = field(default_factory=dict)
    duration: float = 0.0
    warnings: tuple[ScanWarning, ...] = ()
    policy_name: str = ""
    policy_version: str = ""

    @property
    def error_count(self) -> int:
        return self.violations_by_severity.get(Severity.ERROR.value, 0)

    @property
    def warning_count(self) -> int:
        return self.violations_by_severity.get(Severity.WARNING.value, 0)

    @property
    def passed(self) -> bool:
        return self.error_count == 0
