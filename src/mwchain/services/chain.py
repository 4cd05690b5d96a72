"""Chain state machine and executor.

A :class:`Chain` drives one run over a fixed interceptor tuple. Control
only advances through an explicit ``chain.next(...)`` made by the
interceptor currently running; returning without it short-circuits the
handler. The continuation recurses on the same call stack, so code placed
after ``chain.next(...)`` in an interceptor runs after everything deeper
in the chain has finished.

INVARIANT: the target fires at most once per run, each interceptor may
continue at most once, and no continuation is accepted once the run is
terminal. Violations raise ChainIntegrityError.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from mwchain.domain.errors import ChainIntegrityError, DomainError
from mwchain.domain.types import ChainStatus, Interceptor, interceptor_name, is_valid_transition
from mwchain.services.boundary import error_boundary
from mwchain.services.telemetry import trace_span

if TYPE_CHECKING:
    from mwchain.domain.context import RequestContext
    from mwchain.plugins.event_bus import EventBus
    from mwchain.services.target import TargetInvocation

logger = logging.getLogger(__name__)


class Chain:
    """Chain handle and per-run state.

    Exposed to interceptors as the ``chain`` argument of ``apply``.
    """

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        context: RequestContext,
        target: TargetInvocation,
        *,
        handler_id: str | None = None,
    ) -> None:
        self._interceptors = tuple(interceptors)
        self._context = context
        self._target = target
        self._handler_id = handler_id or getattr(context, "handler_id", "") or ""
        self._status = ChainStatus.NOT_STARTED
        self._cursor = -1
        self._active: list[int] = []
        self._continued = [False] * len(self._interceptors)
        self._target_executed = False
        self._result: Any = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def status(self) -> ChainStatus:
        return self._status

    @property
    def context(self) -> RequestContext:
        """The working context (the one most recently passed to ``next``)."""
        return self._context

    @property
    def cursor(self) -> int:
        """Index of the furthest interceptor dispatched; -1 before the first."""
        return self._cursor

    @property
    def target_executed(self) -> bool:
        return self._target_executed

    @property
    def handler_id(self) -> str:
        return self._handler_id

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    # ------------------------------------------------------------------
    # Handle API
    # ------------------------------------------------------------------

    def next(self, context: RequestContext | None = None) -> None:
        """Continue the chain, optionally replacing the working context.

        Dispatches the interceptor after the caller, or the target when the
        caller is the last interceptor. Failures raised further down are
        classified before they propagate back to the caller.
        """
        if self._status is not ChainStatus.RUNNING:
            msg = f"Continuation invoked on chain {self._handler_id!r} in status {self._status}"
            raise ChainIntegrityError(msg)
        if not self._active:
            msg = f"Continuation invoked outside a running interceptor on {self._handler_id!r}"
            raise ChainIntegrityError(msg)

        position = self._active[-1]
        if self._continued[position]:
            name = interceptor_name(self._interceptors[position])
            msg = f"Interceptor {name} (#{position}) invoked the continuation more than once"
            raise ChainIntegrityError(msg)
        self._continued[position] = True

        if context is not None:
            self._context = context

        with error_boundary("inner"):
            if position < len(self._interceptors) - 1:
                self._dispatch(position + 1)
            else:
                self._fire_target()

    def result(self) -> Any:
        """The result slot: the target's return value, or what an interceptor set."""
        return self._result

    def set_result(self, value: Any) -> None:
        """Assign the result slot (short-circuit value or post-processed result)."""
        if self._status is not ChainStatus.RUNNING:
            msg = f"Result assigned on chain {self._handler_id!r} in status {self._status}"
            raise ChainIntegrityError(msg)
        self._result = value

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> Any:
        """Execute the chain to completion or short-circuit and return the result."""
        if self._status is not ChainStatus.NOT_STARTED:
            msg = f"Chain {self._handler_id!r} has already been run"
            raise ChainIntegrityError(msg)
        self._transition(ChainStatus.RUNNING)

        try:
            if self._interceptors:
                self._dispatch(0)
            else:
                self._fire_target()
        except Exception:
            self._transition(ChainStatus.FAILED)
            raise

        if self._target_executed:
            self._transition(ChainStatus.COMPLETED)
        else:
            self._transition(ChainStatus.SHORT_CIRCUITED)
        return self._result

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, position: int) -> None:
        self._cursor = position
        current = self._interceptors[position]
        name = interceptor_name(current)
        logger.debug("Dispatching interceptor %s (#%d) for %s", name, position, self._handler_id)

        self._active.append(position)
        try:
            with trace_span(f"interceptor:{name}", kind="interceptor", position=position) as span:
                current.apply(self._context, self)
                if span is not None:
                    span.finish("continued" if self._continued[position] else "short_circuited")
        finally:
            self._active.pop()

        if not self._continued[position]:
            logger.debug(
                "Interceptor %s (#%d) short-circuited %s", name, position, self._handler_id
            )

    def _fire_target(self) -> None:
        if self._target_executed:
            msg = f"Target of chain {self._handler_id!r} has already been invoked"
            raise ChainIntegrityError(msg)
        self._target_executed = True

        with trace_span("target", kind="target") as span:
            if self._interceptors:
                self._result = self._target.invoke(self._context)
            else:
                self._result = self._target.invoke()
            if span is not None:
                span.finish("completed")

    def _transition(self, status: ChainStatus) -> None:
        if not is_valid_transition(self._status, status):
            msg = f"Illegal chain transition {self._status} -> {status}"
            raise ChainIntegrityError(msg)
        self._status = status

    def __repr__(self) -> str:
        return (
            f"Chain({self._handler_id!r}, status={self._status}, "
            f"cursor={self._cursor}, interceptors={len(self._interceptors)})"
        )


class ChainExecutor:
    """Runs interceptor chains and applies the outer error boundary.

    Parameters:
        event_bus: Optional bus for the ``post_chain_run`` lifecycle event.
    """

    def __init__(self, *, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    def attach_event_bus(self, event_bus: EventBus | None) -> None:
        """Publish subsequent runs to *event_bus*; None detaches."""
        self._event_bus = event_bus

    def proceed(
        self,
        interceptors: Sequence[Interceptor],
        context: RequestContext,
        target: TargetInvocation,
        *,
        handler_id: str | None = None,
    ) -> Any:
        """Run the chain without the outer boundary.

        With no interceptors the target's own failure propagates unchanged.
        """
        return Chain(interceptors, context, target, handler_id=handler_id).run()

    def execute(
        self,
        interceptors: Sequence[Interceptor],
        context: RequestContext,
        target: TargetInvocation,
        *,
        handler_id: str | None = None,
    ) -> Any:
        """Run the chain; only DomainError or ChainIntegrityError can escape."""
        chain = Chain(interceptors, context, target, handler_id=handler_id)
        error: Exception | None = None
        try:
            with error_boundary("outer"):
                return chain.run()
        except Exception as exc:
            error = exc
            raise
        finally:
            logger.debug("Chain %s finished: %s", chain.handler_id, chain.status)
            self._dispatch_event(chain, error)

    def _dispatch_event(self, chain: Chain, error: Exception | None) -> None:
        """Publish the run outcome. No-op if no event bus is attached.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._event_bus is None:
            return
        if isinstance(error, DomainError):
            error_text: str | None = error.describe()
        else:
            error_text = str(error) if error is not None else None
        payload = {
            "handler_id": chain.handler_id,
            "status": str(chain.status),
            "interceptors": [interceptor_name(i) for i in chain.interceptors],
            "target_executed": chain.target_executed,
            "error": error_text,
        }
        try:
            self._event_bus.dispatch("post_chain_run", payload)
        except Exception:
            logger.warning("Event dispatch failed for post_chain_run", exc_info=True)
