"""Span recording for chain runs and inspection services.

Recording is off unless :func:`enable_telemetry` was called (``--verbose``);
while off, each entry point costs a single ContextVar lookup. While on, a
root span opened by :func:`traced` collects a tree that mirrors the call
stack of a chain run: one ``interceptor`` span per dispatch, nested in
continuation order, and one ``target`` span where the handler ran.

Chain spans record how they ended in ``outcome``:

- ``continued``: the interceptor called ``chain.next``
- ``short_circuited``: it returned without continuing
- ``completed``: the target returned
- ``failed``: an exception left the span
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from mwchain.services.result import ServiceResult

log = structlog.get_logger(__name__)

_recording: ContextVar[bool] = ContextVar("mwchain_recording", default=False)
_current_span: ContextVar[Span | None] = ContextVar("mwchain_current_span", default=None)


@dataclass
class Span:
    """One timed step in a span tree."""

    name: str
    kind: str = "step"
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    outcome: str | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def finish(self, outcome: str | None = None) -> None:
        """Stop the clock; the first recorded outcome wins."""
        if self.finished is None:
            self.finished = time.perf_counter()
        if outcome is not None and self.outcome is None:
            self.outcome = outcome

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def walk(self) -> Iterator[Span]:
        """This span and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.outcome is not None:
            data["outcome"] = self.outcome
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def chain_summary(root: Span) -> dict[str, int]:
    """Count chain activity recorded under *root*."""
    spans = list(root.walk())
    return {
        "interceptors": sum(1 for s in spans if s.kind == "interceptor"),
        "short_circuits": sum(1 for s in spans if s.outcome == "short_circuited"),
        "targets": sum(1 for s in spans if s.kind == "target"),
        "failures": sum(1 for s in spans if s.outcome == "failed"),
    }


@contextmanager
def trace_span(name: str, *, kind: str = "step", **annotations: Any) -> Generator[Span | None]:
    """Record a child of the current span for the duration of the block.

    Yields None when recording is off or no root span is open.
    """
    parent = _current_span.get() if _recording.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, kind=kind, parent=parent, annotations=dict(annotations))
    parent.children.append(span)
    token = _current_span.set(span)
    try:
        yield span
    except Exception:
        span.finish("failed")
        raise
    finally:
        span.finish()
        _current_span.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Open a root span around *func* while recording is on.

    A returned ServiceResult carries the finished tree under
    ``meta["telemetry"]`` and the chain counts under ``meta["chain"]``.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _recording.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__, kind="service")
        token = _current_span.set(root)
        try:
            result = func(*args, **kwargs)
        except Exception:
            root.finish("failed")
            raise
        finally:
            root.finish()
            _current_span.reset(token)
            log.debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                spans=sum(1 for _ in root.walk()),
            )

        if isinstance(result, ServiceResult):
            root.outcome = "ok" if result.ok else "error"
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            if any(s.kind in ("interceptor", "target") for s in root.walk()):
                meta["chain"] = chain_summary(root)
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Start recording spans in the current context."""
    _recording.set(True)


def disable_telemetry() -> None:
    _recording.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, or None when recording is off."""
    if not _recording.get():
        return None
    return _current_span.get()
