"""CLI entry point: Click group with global options."""

from __future__ import annotations

import logging

import click

from readygate import __version__
from readygate.config import GateConfig


@click.group()
@click.version_option(version=__version__, prog_name="readygate")
@click.option(
    "--policy",
    "-p",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML or JSON policy file (default: bundled preset).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, policy: str | None, verbose: bool) -> None:
    """readygate: production-readiness gate for source trees and runtime config."""
    ctx.ensure_object(dict)
    config = GateConfig.load()
    if policy:
        config.policy_path = policy
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from readygate.cli.check import check  # noqa: F811
    from readygate.cli.check_config import check_config  # noqa: F811
    from readygate.cli.scan import scan  # noqa: F811

    main.add_command(scan)
    main.add_command(check_config)
    main.add_command(check)


_register_commands()
