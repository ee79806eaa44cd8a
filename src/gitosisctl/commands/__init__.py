"""Subcommand modules for gitosisctl.

register_commands() imports lazily so ``gitosisctl --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from gitosisctl.commands.group import group
    from gitosisctl.commands.member import member

    cli.add_command(group)
    cli.add_command(member)

    # --- Standalone commands ---
    from gitosisctl.commands.conf_path import conf_path
    from gitosisctl.commands.history import history
    from gitosisctl.commands.init_cmd import init_cmd
    from gitosisctl.commands.publish import publish
    from gitosisctl.commands.reconcile import reconcile

    cli.add_command(init_cmd)
    cli.add_command(publish)
    cli.add_command(history)
    cli.add_command(reconcile)
    cli.add_command(conf_path)
