"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from readygate.policy.models import PatternRule, Policy, Severity


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_policy_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_policy.yaml"


@pytest.fixture
def json_policy_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_policy.json"


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _make(files: dict[str, str | bytes]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def gate_policy() -> Policy:
    return Policy(
        version="1",
        name="test",
        scan_paths=("backend", "frontend"),
        exclusions=("archive/**", "**/tests/**", "**/*.test.ts"),
        forbidden_patterns=(
            PatternRule(
                id="demo-credentials",
                pattern=r"\badmin123\b",
                message="Demo credentials must not ship",
                severity=Severity.ERROR,
            ),
            PatternRule(
                id="legacy-branding",
                pattern=r"(?i)caps[ -]?pos",
                message="Legacy branding",
                severity=Severity.WARNING,
            ),
            PatternRule(
                id="sql-format",
                pattern=r'format!\(\s*"SELECT',
                message="SQL built with format!",
                severity=Severity.ERROR,
            ),
        ),
        allowed_exceptions={"demo-credentials": ("backend/fixtures/**",)},
    )
