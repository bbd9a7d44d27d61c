"""CLI command: readygate check-config, runtime profile validation."""

from __future__ import annotations

import click

from readygate.cli._common import (
    load_config_map,
    print_config_summary,
    resolve_profile_or_fail,
)
from readygate.gate import config_exit_code
from readygate.profiles.render import render_config_json, render_config_text
from readygate.profiles.validator import validate


@click.command("check-config")
@click.option(
    "--profile",
    "-P",
    "profile_name",
    help="Runtime profile: dev, demo or prod (default: $RUNTIME_PROFILE or dev).",
)
@click.option(
    "--config-file",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Flat YAML/JSON mapping overlaid on the environment.",
)
@click.option(
    "--env/--no-env",
    "use_env",
    default=True,
    show_default=True,
    help="Include the process environment in the validated config.",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)
@click.pass_context
def check_config(
    ctx: click.Context,
    profile_name: str | None,
    config_file: str | None,
    use_env: bool,
    fmt: str,
) -> None:
    """Validate runtime configuration against a deployment profile."""
    profile = resolve_profile_or_fail(ctx, profile_name)
    values = load_config_map(config_file, use_env)

    result = validate(profile, values)
    if fmt == "json":
        click.echo(render_config_json(result), nl=False)
    else:
        click.echo(render_config_text(result), nl=False)

    print_config_summary(result)
    ctx.exit(config_exit_code(result))
