"""Report aggregation and rendering (text and JSON)."""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from itertools import groupby
from pathlib import Path

from readygate.policy.models import Policy, Severity
from readygate.scanner.models import ScanReport, ScanWarning, Violation

logger = logging.getLogger(__name__)

DEFAULT_REPORT_PATH = "readygate-report.json"


class OutputFormat(enum.Enum):
    TEXT = "text"
    JSON = "json"
    BOTH = "both"


def count_by_severity(violations: Iterable[Violation]) -> dict[str, int]:
    """Count violations per severity, with a zero entry for every severity."""
    counts = {severity.value: 0 for severity in Severity}
    for v in violations:
        counts[v.severity.value] += 1
    return counts


def aggregate(
    violations: Iterable[Violation],
    scanned_file_count: int,
    duration: float = 0.0,
    warnings: Iterable[ScanWarning] = (),
    policy: Policy | None = None,
    timestamp: str | None = None,
) -> ScanReport:
    """Build the immutable report; ordering is (file, line, pattern_id)."""
    ordered = tuple(sorted(violations, key=lambda v: v.sort_key))
    return ScanReport(
        timestamp=timestamp or _utc_now(),
        scanned_file_count=scanned_file_count,
        violations=ordered,
        violations_by_severity=count_by_severity(ordered),
        duration=duration,
        warnings=tuple(sorted(warnings, key=lambda w: (w.path, w.kind.value))),
        policy_name=policy.name if policy else "",
        policy_version=policy.version if policy else "",
    )


def report_to_dict(report: ScanReport) -> dict[str, object]:
    return {
        "timestamp": report.timestamp,
        "policy": {"name": report.policy_name, "version": report.policy_version},
        "scanned_file_count": report.scanned_file_count,
        "violations": [v.to_dict() for v in report.violations],
        "violations_by_severity": dict(report.violations_by_severity),
        "warnings": [w.to_dict() for w in report.warnings],
        "duration_ms": int(round(report.duration * 1000)),
    }


def render_json(report: ScanReport) -> str:
    return json.dumps(report_to_dict(report), indent=2) + "\n"


def render_text(report: ScanReport) -> str:
    """Human-readable report: grouped by severity (errors first), then by file."""
    lines = [
        f"readygate scan: policy {report.policy_name or '-'} "
        f"(version {report.policy_version or '-'})",
        f"Scanned {report.scanned_file_count} files at {report.timestamp}",
        "",
    ]

    for severity in Severity:
        matching = [v for v in report.violations if v.severity is severity]
        if not matching:
            continue
        lines.append(f"{severity.value.upper()}S ({len(matching)})")
        for file, group in groupby(matching, key=lambda v: v.file):
            lines.append(f"  {file}")
            for v in group:
                lines.append(f"    L{v.line} [{v.pattern_id}] {v.message}")
                lines.append(f"      {v.excerpt}")
        lines.append("")

    if report.warnings:
        lines.append(f"SCAN WARNINGS ({len(report.warnings)})")
        for w in report.warnings:
            lines.append(f"  {w.path}: {w.message} ({w.kind.value})")
        lines.append("")

    counts = ", ".join(
        f"{report.violations_by_severity.get(s.value, 0)} {s.value}(s)" for s in Severity
    )
    status = "PASSED" if report.passed else "FAILED"
    lines.append(f"{status}: {counts} in {report.duration:.2f}s")
    return "\n".join(lines) + "\n"


def write_report(
    report: ScanReport,
    fmt: OutputFormat,
    output: str | Path | None = None,
) -> str | None:
    """Write the report and return whatever should be echoed to the user.

    ``text``/``json`` go to ``output`` when given, otherwise they are returned
    for echo. ``both`` writes JSON to ``output`` (or the default report path)
    and returns the text rendering.
    """
    return write_rendered(render_text(report), render_json(report), fmt, output)


def write_rendered(
    text: str,
    json_text: str,
    fmt: OutputFormat,
    output: str | Path | None = None,
) -> str | None:
    """Route pre-rendered text/JSON documents according to ``fmt``."""
    if fmt is OutputFormat.BOTH:
        _write(Path(output or DEFAULT_REPORT_PATH), json_text)
        return text

    rendered = json_text if fmt is OutputFormat.JSON else text
    if output is None:
        return rendered
    _write(Path(output), rendered)
    return None


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote report to %s", path)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
