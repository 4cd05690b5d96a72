"""Extension layer: lifecycle plugins via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from mwchain.plugins.event_bus import EventBus
from mwchain.plugins.hookspecs import hookimpl
from mwchain.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager", "hookimpl"]
