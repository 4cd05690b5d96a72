"""Runtime: wires configuration, registry, plugins, and the chain builder.

The Runtime is the single dependency injected into inspection services and
the entry point for applications that configure chains from mwchain.toml::

    runtime = Runtime(MwSettings.from_cli())
    builder = runtime.builder

    @builder.bind("Query.user", context_arg="ctx")
    def user(ctx, user_id): ...

Everything is created lazily so ``mwchain --help`` never imports
interceptor modules.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mwchain.infrastructure.registry import InterceptorRegistry, load_interceptors

if TYPE_CHECKING:
    from mwchain.config.models import MwConfig
    from mwchain.config.settings import MwSettings
    from mwchain.domain.errors import BindingIssue
    from mwchain.plugins.event_bus import EventBus
    from mwchain.services.builder import ChainBuilder
    from mwchain.services.chain import ChainExecutor

logger = logging.getLogger(__name__)


class Runtime:
    """Lazily built registry → executor → builder stack for one configuration."""

    def __init__(self, settings: MwSettings) -> None:
        self._settings = settings
        self._config: MwConfig | None = None
        self._registry: InterceptorRegistry | None = None
        self._load_issues: list[BindingIssue] = []
        self._event_bus: EventBus | None = None
        self._executor: ChainExecutor | None = None
        self._builder: ChainBuilder | None = None

    @property
    def settings(self) -> MwSettings:
        return self._settings

    @property
    def config(self) -> MwConfig:
        """The validated TOML-backed configuration."""
        if self._config is None:
            self._config = self._settings.to_config()
        return self._config

    @property
    def registry(self) -> InterceptorRegistry:
        """Interceptors imported from ``[interceptors]``; failures are kept in load_issues."""
        if self._registry is None:
            self._registry, self._load_issues = load_interceptors(self.config.interceptors)
            logger.debug(
                "Loaded %d interceptor(s), %d issue(s)",
                len(self._registry),
                len(self._load_issues),
            )
        return self._registry

    @property
    def load_issues(self) -> list[BindingIssue]:
        self.registry  # noqa: B018
        return list(self._load_issues)

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool | None = None) -> EventBus | None:
        """Discover entry-point plugins and wire up the EventBus.

        No-op when plugins are disabled in config. An executor that already
        exists is attached to the new bus.
        """
        if not self.config.plugins.enabled:
            return None

        from mwchain.plugins.event_bus import EventBus
        from mwchain.plugins.manager import PluginManager

        pm = PluginManager()
        pm.load_entry_points()
        events = self.config.events
        self._event_bus = EventBus(
            pm,
            sync=events.sync if sync is None else sync,
            max_workers=events.max_workers,
        )
        if self._executor is not None:
            self._executor.attach_event_bus(self._event_bus)
        return self._event_bus

    @property
    def executor(self) -> ChainExecutor:
        if self._executor is None:
            from mwchain.services.chain import ChainExecutor

            self._executor = ChainExecutor(event_bus=self._event_bus)
        return self._executor

    @property
    def builder(self) -> ChainBuilder:
        """Chain builder over the configured bindings.

        Raises BindingError if any interceptor failed to load or any
        binding references an unknown interceptor.
        """
        if self._builder is None:
            from mwchain.domain.errors import BindingError
            from mwchain.services.builder import ChainBuilder

            if self.load_issues:
                raise BindingError(self.load_issues)
            self._builder = ChainBuilder(
                self.registry,
                self.config.bindings,
                executor=self.executor,
            )
        return self._builder

    def close(self) -> None:
        """Drain and stop the event bus, if any."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        if self._executor is not None:
            self._executor.attach_event_bus(None)
