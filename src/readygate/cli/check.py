"""CLI command: readygate check [ROOT], the full gate (scan and config)."""

from __future__ import annotations

import click

from readygate.cli._common import (
    FORMAT_CHOICES,
    console,
    fail,
    gate_config,
    load_config_map,
    load_policy_or_fail,
    print_config_summary,
    print_scan_summary,
    resolve_profile_or_fail,
    scan_or_fail,
)
from readygate.gate import GateResult, render_gate_json, render_gate_text
from readygate.profiles.validator import validate
from readygate.scanner.report import OutputFormat, write_rendered


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--profile", "-P", "profile_name", help="Runtime profile: dev, demo or prod.")
@click.option(
    "--config-file",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Flat YAML/JSON mapping overlaid on the environment.",
)
@click.option("--env/--no-env", "use_env", default=True, show_default=True)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(FORMAT_CHOICES),
    default="text",
    show_default=True,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
@click.option("--workers", "-w", type=click.IntRange(min=1))
@click.option("--timeout", "-t", type=click.FloatRange(min=0, min_open=True))
@click.pass_context
def check(
    ctx: click.Context,
    root: str,
    profile_name: str | None,
    config_file: str | None,
    use_env: bool,
    fmt: str,
    output: str | None,
    workers: int | None,
    timeout: float | None,
) -> None:
    """Run the full readiness gate: source scan and config validation."""
    policy = load_policy_or_fail(ctx)
    profile = resolve_profile_or_fail(ctx, profile_name)
    console.print(
        f"[bold]readygate[/bold] checking [cyan]{root}[/cyan] with policy "
        f"[cyan]{policy.name}[/cyan] and profile [cyan]{profile.value}[/cyan]\n"
    )

    report = scan_or_fail(ctx, policy, root, workers, timeout)
    config_result = validate(profile, load_config_map(config_file, use_env))
    result = GateResult(report=report, config_result=config_result)

    try:
        echoed = write_rendered(
            render_gate_text(result),
            render_gate_json(result),
            OutputFormat(fmt),
            output or gate_config(ctx).output_path,
        )
    except OSError as e:
        fail(f"cannot write report: {e}")
    if echoed is not None:
        click.echo(echoed, nl=False)

    print_scan_summary(report, show_table=echoed is None or fmt == "json")
    print_config_summary(config_result)
    ctx.exit(result.exit_code)
