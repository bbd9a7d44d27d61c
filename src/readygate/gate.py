"""Gate orchestration: runs the scanner and/or the config validator and
maps their results onto a process exit code."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from readygate.policy.models import Policy
from readygate.profiles.models import ConfigValidationResult, ProfileName, RuntimeProfile
from readygate.profiles.render import render_config_text
from readygate.profiles.validator import validate
from readygate.scanner.engine import ScanEngine
from readygate.scanner.models import ScanReport
from readygate.scanner.report import render_text, report_to_dict

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VIOLATIONS = 1
# Policy errors, unknown profiles and exceeded scan budgets
EXIT_FATAL = 2


def scan_exit_code(report: ScanReport) -> int:
    """0 iff no error-severity violation was found; warnings never count."""
    return EXIT_OK if report.error_count == 0 else EXIT_VIOLATIONS


def config_exit_code(result: ConfigValidationResult) -> int:
    return EXIT_OK if result.passed else EXIT_VIOLATIONS


@dataclass(frozen=True)
class GateResult:
    """Combined outcome of one gate run."""

    report: ScanReport | None = None
    config_result: ConfigValidationResult | None = None

    @property
    def exit_code(self) -> int:
        codes = [EXIT_OK]
        if self.report is not None:
            codes.append(scan_exit_code(self.report))
        if self.config_result is not None:
            codes.append(config_exit_code(self.config_result))
        return max(codes)

    @property
    def passed(self) -> bool:
        return self.exit_code == EXIT_OK


def run_scan(
    policy: Policy,
    root: str | Path = ".",
    workers: int | None = None,
    timeout: float | None = None,
) -> ScanReport:
    return ScanEngine(policy, root=root, workers=workers, timeout=timeout).scan()


def run_gate(
    policy: Policy | None = None,
    root: str | Path = ".",
    profile: str | ProfileName | RuntimeProfile | None = None,
    config: Mapping[str, object] | None = None,
    workers: int | None = None,
    timeout: float | None = None,
) -> GateResult:
    """Run whichever halves were requested.

    The scan runs when a policy is given; config validation runs when a
    profile is given (an absent config is treated as empty).
    """
    report = None
    if policy is not None:
        report = run_scan(policy, root=root, workers=workers, timeout=timeout)

    config_result = None
    if profile is not None:
        config_result = validate(profile, config or {})

    result = GateResult(report=report, config_result=config_result)
    logger.info("Gate finished with exit code %d", result.exit_code)
    return result


def render_gate_text(result: GateResult) -> str:
    parts = []
    if result.report is not None:
        parts.append(render_text(result.report))
    if result.config_result is not None:
        parts.append(render_config_text(result.config_result))
    parts.append("GATE PASSED\n" if result.passed else "GATE FAILED\n")
    return "\n".join(parts)


def render_gate_json(result: GateResult) -> str:
    document = {
        "passed": result.passed,
        "exit_code": result.exit_code,
        "scan": report_to_dict(result.report) if result.report else None,
        "config": result.config_result.to_dict() if result.config_result else None,
    }
    return json.dumps(document, indent=2) + "\n"
