"""Extension layer — plugin system via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from clonekit.plugins.hookspecs import hookimpl
from clonekit.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
