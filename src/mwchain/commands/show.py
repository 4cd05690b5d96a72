"""Command: print the resolved interceptor chain for handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mwchain.commands._base import MwCommand

if TYPE_CHECKING:
    from mwchain.commands._context import AppContext


@click.command(
    cls=MwCommand,
    examples="""\
  mwchain show
  mwchain show Query.user
  mwchain --json show Mutation.updateUser""",
)
@click.argument("handler_id", required=False)
@click.pass_obj
def show(app: AppContext, handler_id: str | None) -> None:
    """Show the ordered interceptors bound to HANDLER_ID (or to every handler)."""
    from mwchain.services.bindings import BindingService

    app.emit(BindingService(app.runtime).show(handler_id))
