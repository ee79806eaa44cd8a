"""Command: provision the working copy (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisCommand

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext


@click.command(
    "init",
    cls=GitosisCommand,
    examples="""\
  gitosisctl init git@git.example.com:gitosis-admin.git
  gitosisctl init            # uses [git] gitosis_remote""",
)
@click.argument("remote", required=False, default=None)
@click.pass_obj
def init_cmd(app: AppContext, remote: str | None) -> None:
    """Clone the authority repository into the configured working copy."""
    remote_url = remote or app.settings.git.gitosis_remote
    if not remote_url:
        raise click.UsageError("No REMOTE given and [git] gitosis_remote is not set.")
    app.emit(app.service.provision(remote_url))
