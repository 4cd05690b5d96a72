"""Subcommand modules for mwchain.

Provides register_commands() which uses deferred imports to keep
``mwchain --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from mwchain.commands.check import check
    from mwchain.commands.show import show

    cli.add_command(check)
    cli.add_command(show)
