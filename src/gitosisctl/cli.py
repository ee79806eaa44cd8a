"""Root CLI group for gitosisctl with global flags and command registration."""

from __future__ import annotations

import click

from gitosisctl import __version__
from gitosisctl.commands import register_commands
from gitosisctl.commands._context import AppContext
from gitosisctl.config.settings import GitosisSettings


@click.group()
@click.version_option(version=__version__, prog_name="gitosisctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and error details.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """gitosisctl — manage gitosis groups and members in a replicated gitosis-admin repo."""
    settings = GitosisSettings.load(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)


register_commands(cli)
