"""Command: validate interceptor imports and handler bindings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mwchain.commands._base import MwCommand

if TYPE_CHECKING:
    from mwchain.commands._context import AppContext


@click.command(
    cls=MwCommand,
    examples="""\
  mwchain check
  mwchain --json check
  mwchain -c config/mwchain.toml check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Import every interceptor and resolve every binding."""
    from mwchain.services.bindings import BindingService

    app.emit(BindingService(app.runtime).check())
