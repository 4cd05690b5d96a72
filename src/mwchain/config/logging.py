"""Log routing for the mwchain CLI.

Records from the ``mwchain`` namespace, stdlib and structlog alike, go to
a single stream handler formatted by structlog's ProcessorFormatter:
console rendering by default, JSON lines with ``--log-json``. Library
hosts that never call :func:`configure_logging` keep their own setup.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog
from structlog.types import Processor

# Marks handlers installed here so reconfiguring replaces only those.
_HANDLER_MARK = "_mwchain_handler"


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(log_json: bool, stream: IO[str]) -> list[Processor]:
    if log_json:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    isatty = getattr(stream, "isatty", None)
    return [structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install the mwchain handler on the root logger and return it.

    Args:
        verbose: Let ``mwchain`` DEBUG records through (otherwise WARNING+).
        log_json: Render JSON lines instead of console output.
        stream: Destination (default: stderr at call time).
    """
    stream = stream or sys.stderr
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(log_json, stream),
            ],
        )
    )
    setattr(handler, _HANDLER_MARK, True)

    root = logging.getLogger()
    for previous in [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]:
        root.removeHandler(previous)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("mwchain").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return handler
