"""Command group: add and remove group members."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisGroup

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext

_MEMBER_EXAMPLES = """\
  gitosisctl member add myapp alice@laptop
  gitosisctl member remove myapp alice@laptop"""


@click.group(cls=GitosisGroup, examples=_MEMBER_EXAMPLES)
def member() -> None:
    """Manage the members list of a group."""


@member.command("add")
@click.argument("group")
@click.argument("name")
@click.pass_obj
def add_member(app: AppContext, group: str, name: str) -> None:
    """Append NAME to GROUP's members, then commit and push."""
    app.emit(app.service.add_member(group, name))


@member.command("remove")
@click.argument("group")
@click.argument("name")
@click.pass_obj
def remove_member(app: AppContext, group: str, name: str) -> None:
    """Remove NAME from GROUP's members, then commit and push."""
    app.emit(app.service.remove_member(group, name))
