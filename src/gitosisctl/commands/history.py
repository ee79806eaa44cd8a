"""Command: recent commits of the working copy (the audit trail)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisCommand

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext


@click.command(
    cls=GitosisCommand,
    examples="""\
  gitosisctl history
  gitosisctl --json history --limit 50""",
)
@click.option("--limit", default=10, type=click.IntRange(min=1), help="Number of commits.")
@click.pass_obj
def history(app: AppContext, limit: int) -> None:
    """Show the latest commit messages."""
    app.emit(app.service.history(limit))
