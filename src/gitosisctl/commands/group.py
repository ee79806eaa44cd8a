"""Command group: create, remove and inspect groups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.commands._base import GitosisGroup

if TYPE_CHECKING:
    from gitosisctl.commands._context import AppContext

_GROUP_EXAMPLES = """\
  gitosisctl group add myapp
  gitosisctl group show myapp
  gitosisctl group list
  gitosisctl --json group remove myapp"""


@click.group(cls=GitosisGroup, examples=_GROUP_EXAMPLES)
def group() -> None:
    """Manage [group ...] sections of gitosis.conf."""


@group.command(
    "add",
    examples="""\
  gitosisctl group add myapp
  gitosisctl --json group add myapp""",
)
@click.argument("name")
@click.pass_obj
def add_group(app: AppContext, name: str) -> None:
    """Create an empty group, then commit and push."""
    app.emit(app.service.add_group(name))


@group.command(
    "remove",
    examples="""\
  gitosisctl group remove myapp""",
)
@click.argument("name")
@click.pass_obj
def remove_group(app: AppContext, name: str) -> None:
    """Delete a group, then commit and push."""
    app.emit(app.service.remove_group(name))


@group.command(
    "list",
    examples="""\
  gitosisctl group list
  gitosisctl -q group list""",
)
@click.pass_obj
def list_groups(app: AppContext) -> None:
    """List groups and their members in file order."""
    app.emit(app.service.list_groups())


@group.command(
    "show",
    examples="""\
  gitosisctl group show myapp""",
)
@click.argument("name")
@click.pass_obj
def show_group(app: AppContext, name: str) -> None:
    """Show the members of one group."""
    app.emit(app.service.show_group(name))
