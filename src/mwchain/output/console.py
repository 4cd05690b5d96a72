"""Buffered Rich consoles using the mwchain theme.

Formatters render into a console backed by StringIO and return the text,
so callers decide which stream it goes to. Rich drops colour by itself
when the buffer is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MW_THEME = Theme(
    {
        "mw.ok": "bold green",
        "mw.error": "bold red",
        "mw.warning": "bold yellow",
        "mw.op": "bold cyan",
        "mw.key": "dim",
        "mw.handler": "bold blue",
        "mw.interceptor": "magenta",
    }
)

DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int = DEFAULT_WIDTH) -> Console:
    """A themed console writing into a fresh buffer; long lines are not wrapped."""
    return Console(
        file=StringIO(),
        theme=MW_THEME,
        width=width,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console was not created by create_console()"
        raise TypeError(msg)
    return buffer.getvalue()
