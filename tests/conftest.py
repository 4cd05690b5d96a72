"""Shared pytest fixtures for mwchain tests."""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from mwchain.domain.context import RequestContext
from mwchain.domain.types import ChainHandle
from mwchain.services.target import TargetInvocation
from mwchain.services.telemetry import disable_telemetry

_UNSET = object()


class RecordingInterceptor:
    """Interceptor that logs before/after markers into a shared event list."""

    def __init__(
        self,
        name: str,
        events: list[str],
        *,
        proceed: bool = True,
        replacement: RequestContext | None = None,
        result: Any = _UNSET,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.events = events
        self.proceed = proceed
        self.replacement = replacement
        self.result = result
        self.error = error
        self.seen: list[RequestContext] = []

    def apply(self, context: RequestContext, chain: ChainHandle) -> None:
        self.events.append(f"{self.name}:before")
        self.seen.append(context)
        if self.error is not None:
            raise self.error
        if self.result is not _UNSET:
            chain.set_result(self.result)
        if self.proceed:
            chain.next(self.replacement if self.replacement is not None else context)
            self.events.append(f"{self.name}:after")


class RecordingHandler:
    """Business handler stand-in that records every call."""

    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.calls: list[RequestContext] = []
        self.result: Any = "handled"
        self.error: Exception | None = None

    def __call__(self, context: RequestContext, *args: Any, **kwargs: Any) -> Any:
        self.events.append("target")
        self.calls.append(context)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def recording(events: list[str]) -> Callable[..., RecordingInterceptor]:
    """Factory for RecordingInterceptors sharing the ``events`` list."""

    def factory(name: str, **kwargs: Any) -> RecordingInterceptor:
        return RecordingInterceptor(name, events, **kwargs)

    return factory


@pytest.fixture
def handler(events: list[str]) -> RecordingHandler:
    return RecordingHandler(events)


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(handler_id="Query.user", arguments={"id": "42"})


@pytest.fixture
def target(handler: RecordingHandler, context: RequestContext) -> TargetInvocation:
    return TargetInvocation(handler, (context,), context_slot=0)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Undo CLI logging, telemetry and config env overrides after each test."""
    monkeypatch.delenv("MWCHAIN_CONFIG", raising=False)
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    mw = logging.getLogger("mwchain")
    mw_level = mw.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    mw.setLevel(mw_level)
    structlog.reset_defaults()
    disable_telemetry()


SAMPLE_MODULE = "mwchain_sample_interceptors"

SAMPLE_SOURCE = '''\
from mwchain import DomainError, interceptor


class LogInterceptor:
    def apply(self, context, chain):
        context.put("logged", True)
        chain.next(context)


@interceptor
def require_user(context, chain):
    if "user" not in context.metadata:
        raise DomainError("unauthenticated")
    chain.next(context)


def plain_timer(context, chain):
    chain.next(context)


NOT_AN_INTERCEPTOR = 42
'''

SAMPLE_CONFIG = f"""\
[interceptors]
log = "{SAMPLE_MODULE}:LogInterceptor"
auth = "{SAMPLE_MODULE}:require_user"

[bindings]
"Query.user" = ["log", "auth"]
"Query.health" = []
"""


@pytest.fixture
def sample_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Importable module of sample interceptors; returns its module name."""
    (tmp_path / f"{SAMPLE_MODULE}.py").write_text(SAMPLE_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, SAMPLE_MODULE, raising=False)
    importlib.invalidate_caches()
    return SAMPLE_MODULE


@pytest.fixture
def project_root(
    tmp_path: Path,
    sample_module: str,
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """Temp project with mwchain.toml and sample interceptors; CWD set to it."""
    (tmp_path / "mwchain.toml").write_text(SAMPLE_CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path
