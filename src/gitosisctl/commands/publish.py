"""Command: commit and push manual edits to gitosis.conf."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisCommand

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext


@click.command(
    cls=GitosisCommand,
    examples="""\
  gitosisctl publish 'Granting writable myapp to group infra'""",
)
@click.argument("message")
@click.pass_obj
def publish(app: AppContext, message: str) -> None:
    """Commit everything modified in the working copy with MESSAGE and push."""
    app.emit(app.service.publish(message))
