"""Tests for EventBus dispatch, sync and pooled."""

from __future__ import annotations

import threading
import time

import pytest

from mwchain.plugins.event_bus import EventBus
from mwchain.plugins.hookspecs import hookimpl
from mwchain.plugins.manager import PluginManager


class BuildRecorder:
    def __init__(self) -> None:
        self.builds: list[list[str]] = []
        self.threads: list[str] = []

    @hookimpl
    def post_build(self, handlers):
        self.builds.append(handlers)
        self.threads.append(threading.current_thread().name)


class ExplodingPlugin:
    @hookimpl
    def post_build(self, handlers):
        raise RuntimeError("plugin bug")


class GatedPlugin:
    def __init__(self, gate: threading.Event) -> None:
        self.gate = gate

    @hookimpl
    def post_build(self, handlers):
        self.gate.wait(timeout=5)


def _bus(*plugins: object, sync: bool = True) -> EventBus:
    pm = PluginManager()
    for plugin in plugins:
        pm.register(plugin)
    return EventBus(pm, sync=sync, max_workers=1)


def _wait_until_idle(bus: EventBus, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while bus.pending and time.monotonic() < deadline:
        time.sleep(0.01)
    assert bus.pending == 0


class TestSyncDispatch:
    def test_inline_dispatch(self) -> None:
        recorder = BuildRecorder()
        bus = _bus(recorder)

        bus.dispatch("post_build", {"handlers": ["Query.user"]})

        assert recorder.builds == [["Query.user"]]
        assert recorder.threads == [threading.current_thread().name]
        assert bus.sync
        assert bus.drain() == 0

    def test_unknown_hook_is_ignored(self) -> None:
        bus = _bus()
        bus.dispatch("no_such_hook", {})
        assert bus.failures == 0

    def test_plugin_failure_is_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        recorder = BuildRecorder()
        bus = _bus(ExplodingPlugin(), recorder)

        with caplog.at_level("WARNING", logger="mwchain.plugins.event_bus"):
            bus.dispatch("post_build", {"handlers": []})

        assert bus.failures == 1
        assert "Hook post_build failed" in caplog.text


class TestPooledDispatch:
    def test_drain_waits_for_pending(self) -> None:
        gate = threading.Event()
        recorder = BuildRecorder()
        bus = _bus(GatedPlugin(gate), recorder, sync=False)

        bus.dispatch("post_build", {"handlers": ["a"]})
        bus.dispatch("post_build", {"handlers": ["b"]})
        assert bus.pending == 2

        gate.set()
        bus.drain()

        assert sorted(h[0] for h in recorder.builds) == ["a", "b"]
        assert all(name != threading.current_thread().name for name in recorder.threads)
        _wait_until_idle(bus)
        bus.shutdown()

    def test_finished_dispatches_are_not_retained(self) -> None:
        recorder = BuildRecorder()
        bus = _bus(recorder, sync=False)

        for i in range(200):
            bus.dispatch("post_build", {"handlers": [str(i)]})

        _wait_until_idle(bus)
        assert len(recorder.builds) == 200
        assert bus.drain() == 0
        bus.shutdown()

    def test_failures_counted_off_thread(self) -> None:
        bus = _bus(ExplodingPlugin(), sync=False)
        bus.dispatch("post_build", {"handlers": []})
        bus.shutdown()
        assert bus.failures == 1

    def test_shutdown_is_idempotent(self) -> None:
        bus = _bus(sync=False)
        bus.shutdown()
        bus.shutdown()
