"""Pattern matcher: applies compiled forbidden patterns to one file."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from readygate.policy.models import PatternRule
from readygate.scanner.models import ScanWarning, Violation, WarningKind

logger = logging.getLogger(__name__)

# Bytes inspected when deciding whether a file is binary
_BINARY_SNIFF_SIZE = 8192

EXCERPT_MAX = 160

ExceptionCheck = Callable[[str, str], bool]


@dataclass
class FileMatch:
    """Outcome of matching one file."""

    file: str
    violations: list[Violation] = field(default_factory=list)
    warning: ScanWarning | None = None
    binary: bool = False


def excerpt(line: str, limit: int = EXCERPT_MAX) -> str:
    """Trim a matching line for display, bounding its length."""
    text = line.strip()
    if len(text) > limit:
        return text[: limit - 3].rstrip() + "..."
    return text


def is_binary(data: bytes) -> bool:
    return b"\x00" in data[:_BINARY_SNIFF_SIZE]


def split_lines(content: str) -> list[str]:
    """Split on newline only; form feeds and Unicode separators stay inside a line."""
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def match_lines(
    content: str,
    file: str,
    patterns: Iterable[PatternRule],
) -> list[Violation]:
    """Match every pattern against every line; first match per line and pattern."""
    violations: list[Violation] = []
    rules = list(patterns)
    if not rules:
        return violations

    for line_num, line in enumerate(split_lines(content), start=1):
        for rule in rules:
            if rule.regex.search(line) is None:
                continue
            violations.append(
                Violation(
                    file=file,
                    line=line_num,
                    pattern_id=rule.id,
                    severity=rule.severity,
                    message=rule.message,
                    excerpt=excerpt(line),
                )
            )
    return violations


def match_file(
    root: str | Path,
    file: str,
    patterns: Iterable[PatternRule],
    is_excepted: ExceptionCheck | None = None,
) -> FileMatch:
    """Scan one repo-relative ``file`` under ``root``.

    Patterns excepted for the file are dropped up front. Binary files are
    skipped; unreadable files become a warning rather than an error.
    """
    result = FileMatch(file=file)
    active = [
        rule
        for rule in patterns
        if is_excepted is None or not is_excepted(rule.id, file)
    ]

    try:
        data = (Path(root) / file).read_bytes()
    except OSError as e:
        logger.warning("Cannot read %s: %s", file, e)
        result.warning = ScanWarning(
            kind=WarningKind.UNREADABLE_FILE,
            path=file,
            message=e.strerror or str(e),
        )
        return result

    if is_binary(data):
        logger.debug("Skipping binary file %s", file)
        result.binary = True
        return result

    content = data.decode("utf-8", errors="ignore")
    result.violations = match_lines(content, file, active)
    return result
