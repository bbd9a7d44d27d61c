"""Helpers shared by the CLI commands."""

from __future__ import annotations

import os
from typing import NoReturn

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from readygate.config import GateConfig
from readygate.gate import EXIT_FATAL
from readygate.policy.loader import PolicyError, resolve_policy
from readygate.policy.models import Policy, Severity
from readygate.profiles.models import ConfigValidationResult, ProfileError, ProfileName
from readygate.profiles.validator import resolve_profile_name
from readygate.scanner.engine import ScanEngine, ScanTimeoutError
from readygate.scanner.models import ScanReport

console = Console(stderr=True)

_SEVERITY_COLORS = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
}

FORMAT_CHOICES = ["text", "json", "both"]


def fail(message: str) -> NoReturn:
    """Print a fatal error and exit with the fatal exit code."""
    console.print(f"[red bold]error:[/red bold] {escape(message)}")
    raise SystemExit(EXIT_FATAL)


def gate_config(ctx: click.Context) -> GateConfig:
    return ctx.obj["config"]


def load_policy_or_fail(ctx: click.Context) -> Policy:
    try:
        return resolve_policy(gate_config(ctx).policy_path)
    except PolicyError as e:
        fail(str(e))


def resolve_profile_or_fail(ctx: click.Context, explicit: str | None) -> ProfileName:
    try:
        return resolve_profile_name(explicit or gate_config(ctx).profile, env={})
    except ProfileError as e:
        fail(str(e))


def scan_or_fail(
    ctx: click.Context,
    policy: Policy,
    root: str,
    workers: int | None,
    timeout: float | None,
) -> ScanReport:
    config = gate_config(ctx)
    engine = ScanEngine(
        policy,
        root=root,
        workers=workers or config.workers,
        timeout=timeout or config.scan_timeout,
    )
    try:
        return engine.scan()
    except ScanTimeoutError as e:
        fail(str(e))


def load_config_map(config_file: str | None, use_env: bool) -> dict[str, object]:
    """Environment (optional) overlaid by a flat YAML/JSON mapping file."""
    values: dict[str, object] = dict(os.environ) if use_env else {}
    if not config_file:
        return values

    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        fail(f"cannot read config file {config_file}: {e}")
    if data is None:
        return values
    if not isinstance(data, dict):
        fail(f"config file {config_file} must contain a mapping")

    nested = sorted(str(k) for k, v in data.items() if isinstance(v, (dict, list)))
    if nested:
        fail(f"config file {config_file} must be flat; nested keys: {', '.join(nested)}")
    values.update({str(k): v for k, v in data.items()})
    return values


def print_scan_summary(report: ScanReport, show_table: bool) -> None:
    if show_table and report.violations:
        table = Table(title="Violations", show_lines=False)
        table.add_column("Severity", style="bold", width=8)
        table.add_column("File", style="cyan")
        table.add_column("Line", justify="right")
        table.add_column("Pattern")
        table.add_column("Excerpt", max_width=60)
        for v in report.violations:
            color = _SEVERITY_COLORS.get(v.severity, "white")
            table.add_row(
                f"[{color}]{v.severity.value}[/{color}]",
                escape(v.file),
                str(v.line),
                escape(v.pattern_id),
                escape(v.excerpt),
            )
        console.print(table)

    console.print(
        f"Scanned {report.scanned_file_count} files in {report.duration:.2f}s: "
        f"[red]{report.error_count} error(s)[/red], "
        f"[yellow]{report.warning_count} warning(s)[/yellow]"
    )
    if report.warnings:
        console.print(f"[dim]{len(report.warnings)} scan warning(s)[/dim]")


def print_config_summary(result: ConfigValidationResult) -> None:
    if result.passed:
        console.print(f"[green]Config passes the {result.profile.value} profile.[/green]")
        return
    console.print(
        f"[red]Config fails the {result.profile.value} profile "
        f"with {len(result.errors())} problem(s):[/red]"
    )
    for line in result.errors():
        console.print(f"  - {escape(line)}")
