"""Entry-point plugin loading for mwchain lifecycle hooks.

Plugins come from the ``mwchain.plugins`` entry-point group or are
registered in code. An entry point that names a class is swapped for an
instance built with no arguments.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from mwchain.plugins.hookspecs import MwchainHookSpec

ENTRY_POINT_GROUP = "mwchain.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """pluggy manager preloaded with the mwchain hook specs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager("mwchain")
        self._pm.add_hookspecs(MwchainHookSpec)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def names(self) -> list[str]:
        return [name for name, plugin in self._pm.list_name_plugin() if plugin is not None]

    def register(self, plugin: object, name: str | None = None) -> None:
        """Register *plugin* under *name* (default: its class name)."""
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin %s", name)

    def load_entry_points(self) -> list[str]:
        """Load every plugin advertised under ``mwchain.plugins``; returns all names."""
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        logger.debug("Loaded %d entry-point plugin(s)", count)
        self._instantiate_classes()
        return self.names()

    def _instantiate_classes(self) -> None:
        for name, plugin in list(self._pm.list_name_plugin()):
            if not inspect.isclass(plugin):
                continue
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Skipping plugin %s: construction failed", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
