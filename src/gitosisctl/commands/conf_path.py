"""Command: print the location of gitosis.conf."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisCommand
from gitosisctl.domain.errors import ConfigurationMissing
from gitosisctl.services.access import conf_path as resolve_conf_path
from gitosisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext


@click.command(
    "conf-path",
    cls=GitosisCommand,
    examples="""\
  gitosisctl conf-path
  gitosisctl -q conf-path""",
)
@click.pass_obj
def conf_path(app: AppContext) -> None:
    """Print the path of the config file inside the working copy."""
    try:
        path = resolve_conf_path(app.settings)
    except ConfigurationMissing as exc:
        app.emit(ServiceResult.failure("conf_path", exc))
        return
    app.emit(ServiceResult(ok=True, op="conf_path", data={"path": str(path)}))
