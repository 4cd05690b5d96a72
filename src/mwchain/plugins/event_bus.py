"""Lifecycle event dispatch via pluggy, inline or on a ThreadPoolExecutor.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mwchain.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventBus:
    """Dispatch lifecycle hooks to registered plugins.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Dispatch inline on the caller's thread.
        max_workers: ThreadPoolExecutor worker count when not *sync*.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        *,
        sync: bool = True,
        max_workers: int = 2,
    ) -> None:
        self._pm = plugin_manager
        self._sync = sync
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: set[Future[bool]] = set()
        self.failures: int = 0
        self._lock = threading.Lock()

    @property
    def sync(self) -> bool:
        return self._sync

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Call *hook_name* with *payload*, inline or on the pool."""
        if self._executor is None:
            self._execute_hook(hook_name, payload)
            return
        future = self._executor.submit(self._execute_hook, hook_name, payload)
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._forget)

    @property
    def pending(self) -> int:
        """Dispatches submitted to the pool that have not finished yet."""
        with self._lock:
            return len(self._futures)

    def drain(self) -> int:
        """Wait for in-flight dispatches. Returns how many were awaited."""
        with self._lock:
            in_flight = list(self._futures)
        for future in in_flight:
            future.result(timeout=30)
        return len(in_flight)

    def shutdown(self) -> None:
        """Drain and stop the worker pool."""
        self.drain()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _execute_hook(self, hook_name: str, payload: dict[str, Any]) -> bool:
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            return True
        try:
            hook_fn(**payload)
        except Exception:
            with self._lock:
                self.failures += 1
            logger.warning("Hook %s failed", hook_name, exc_info=True)
            return False
        return True

    def _forget(self, future: Future[bool]) -> None:
        with self._lock:
            self._futures.discard(future)
