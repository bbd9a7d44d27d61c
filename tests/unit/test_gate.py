"""Tests for gate orchestration and exit codes."""

import json

from readygate.gate import (
    EXIT_OK,
    EXIT_VIOLATIONS,
    GateResult,
    render_gate_json,
    render_gate_text,
    run_gate,
    run_scan,
    scan_exit_code,
)
from readygate.policy.models import Policy, Severity
from readygate.scanner.models import Violation
from readygate.scanner.report import aggregate

GOOD_PROD = {
    "DATABASE_PATH": "/var/lib/app/app.db",
    "STORE_ID": "store-001",
    "JWT_SECRET": "3f9c1e7a2b8d4c6e9a0f1b2c3d4e5f60",
}


def _report(*severities):
    return aggregate(
        [
            Violation("a.rs", i + 1, f"rule-{i}", severity, "m", "x")
            for i, severity in enumerate(severities)
        ],
        scanned_file_count=1,
    )


def test_scan_exit_code_ignores_warnings():
    assert scan_exit_code(_report()) == EXIT_OK
    assert scan_exit_code(_report(Severity.WARNING, Severity.WARNING)) == EXIT_OK
    assert scan_exit_code(_report(Severity.WARNING, Severity.ERROR)) == EXIT_VIOLATIONS


def test_empty_gate_passes():
    result = GateResult()
    assert result.exit_code == EXIT_OK
    assert result.passed


def test_run_scan(make_tree, gate_policy: Policy):
    root = make_tree({"backend/a.rs": "admin123\n", "frontend/a.ts": ""})
    report = run_scan(gate_policy, root=root, workers=1)
    assert report.error_count == 1


def test_run_gate_combines_both_halves(make_tree, gate_policy: Policy):
    root = make_tree({"backend/a.rs": "fn main() {}\n", "frontend/a.ts": ""})

    clean = run_gate(gate_policy, root=root, profile="prod", config=GOOD_PROD)
    assert clean.passed
    assert clean.report is not None and clean.config_result is not None

    failing = run_gate(gate_policy, root=root, profile="prod", config={})
    assert failing.exit_code == EXIT_VIOLATIONS
    assert failing.report.passed
    assert not failing.config_result.passed


def test_run_gate_config_only():
    result = run_gate(profile="dev")
    assert result.report is None
    assert result.passed


def test_render_gate_text_and_json(make_tree, gate_policy: Policy):
    root = make_tree({"backend/a.rs": "admin123\n", "frontend/a.ts": ""})
    result = run_gate(gate_policy, root=root, profile="prod", config=GOOD_PROD)

    text = render_gate_text(result)
    assert "ERRORS (1)" in text
    assert "PASSED" in text
    assert text.rstrip().endswith("GATE FAILED")

    data = json.loads(render_gate_json(result))
    assert data["passed"] is False
    assert data["exit_code"] == EXIT_VIOLATIONS
    assert data["scan"]["violations_by_severity"] == {"error": 1, "warning": 0}
    assert data["config"]["passed"] is True


def test_render_gate_json_config_only():
    data = json.loads(render_gate_json(run_gate(profile="dev")))
    assert data["scan"] is None
    assert data["exit_code"] == EXIT_OK
