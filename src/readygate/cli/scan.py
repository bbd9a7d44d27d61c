"""CLI command: readygate scan [ROOT], the forbidden-pattern scan."""

from __future__ import annotations

import click

from readygate.cli._common import (
    FORMAT_CHOICES,
    console,
    fail,
    gate_config,
    load_policy_or_fail,
    print_scan_summary,
    scan_or_fail,
)
from readygate.gate import scan_exit_code
from readygate.scanner.report import OutputFormat, write_report


@click.command()
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(FORMAT_CHOICES),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to this path instead of stdout.",
)
@click.option("--workers", "-w", type=click.IntRange(min=1), help="Worker threads.")
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0, min_open=True),
    help="Scan budget in seconds; exceeding it fails the run.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    root: str,
    fmt: str,
    output: str | None,
    workers: int | None,
    timeout: float | None,
) -> None:
    """Scan a repository for forbidden patterns."""
    policy = load_policy_or_fail(ctx)
    console.print(
        f"[bold]readygate[/bold] scanning [cyan]{root}[/cyan] "
        f"with policy [cyan]{policy.name}[/cyan] (version {policy.version})\n"
    )

    report = scan_or_fail(ctx, policy, root, workers, timeout)
    output = output or gate_config(ctx).output_path
    try:
        echoed = write_report(report, OutputFormat(fmt), output)
    except OSError as e:
        fail(f"cannot write report: {e}")
    if echoed is not None:
        click.echo(echoed, nl=False)

    print_scan_summary(report, show_table=echoed is None or fmt == "json")
    ctx.exit(scan_exit_code(report))
