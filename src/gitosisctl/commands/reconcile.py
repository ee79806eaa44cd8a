"""Command: resolve a commit that was made locally but never pushed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisCommand

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext


@click.command(
    cls=GitosisCommand,
    examples="""\
  gitosisctl reconcile --push
  gitosisctl reconcile --discard""",
)
@click.option(
    "--push",
    "strategy",
    flag_value="push",
    help="Retry pushing local commits to the remote.",
)
@click.option(
    "--discard",
    "strategy",
    flag_value="discard",
    help="Drop local commits and reset to the remote tip.",
)
@click.pass_obj
def reconcile(app: AppContext, strategy: str | None) -> None:
    """Reconcile the working copy after an UNPUSHED_COMMIT failure."""
    if strategy is None:
        raise click.UsageError("Pass --push or --discard.")
    app.emit(app.service.reconcile(strategy))
