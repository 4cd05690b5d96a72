"""Interceptor and chain-handle protocols plus the chain status lifecycle.

A chain run moves ``not_started -> running`` and then into exactly one
terminal status. Terminal statuses have no outgoing transitions.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mwchain.domain.context import RequestContext


class ChainStatus(StrEnum):
    """Lifecycle of a single chain run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"  # target fired
    SHORT_CIRCUITED = "short_circuited"  # target never fired
    FAILED = "failed"  # run ended by an exception


CHAIN_TRANSITIONS: dict[str, list[str]] = {
    "not_started": ["running"],
    "running": ["completed", "short_circuited", "failed"],
    "completed": [],
    "short_circuited": [],
    "failed": [],
}

TERMINAL_STATUSES = frozenset(
    {ChainStatus.COMPLETED, ChainStatus.SHORT_CIRCUITED, ChainStatus.FAILED}
)


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = CHAIN_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


@runtime_checkable
class ChainHandle(Protocol):
    """Control object handed to each interceptor."""

    def next(self, context: RequestContext | None = None) -> None: ...

    def result(self) -> Any: ...

    def set_result(self, value: Any) -> None: ...


@runtime_checkable
class Interceptor(Protocol):
    """A unit of cross-cutting logic inserted before a handler.

    ``apply`` either calls ``chain.next(...)`` to continue, or returns
    without calling it to short-circuit the handler.
    """

    def apply(self, context: RequestContext, chain: ChainHandle) -> None: ...


class FunctionInterceptor:
    """Adapt a plain ``fn(context, chain)`` callable to :class:`Interceptor`."""

    def __init__(
        self,
        func: Callable[[RequestContext, ChainHandle], None],
        name: str | None = None,
    ) -> None:
        self._func = func
        self.name = name or getattr(func, "__name__", type(func).__name__)

    def apply(self, context: RequestContext, chain: ChainHandle) -> None:
        self._func(context, chain)

    def __repr__(self) -> str:
        return f"FunctionInterceptor({self.name!r})"


def interceptor(
    func: Callable[[RequestContext, ChainHandle], None] | None = None,
    *,
    name: str | None = None,
) -> Any:
    """Decorator form of :class:`FunctionInterceptor`.

    Usable bare (``@interceptor``) or with a name (``@interceptor(name="auth")``).
    """
    if func is None:
        return lambda f: FunctionInterceptor(f, name=name)
    return FunctionInterceptor(func, name=name)


def interceptor_name(obj: object) -> str:
    """Human-readable name for logs and reports."""
    name = getattr(obj, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(obj).__name__
