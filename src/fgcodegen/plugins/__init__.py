from __future__ import annotations

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

from typing import Any

from importlib import import_module
import pluggy


from . import hookspecs

__all__ = ["initialize", "get_hook", "register", "unregister", "list_plugins"]

pm = pluggy.PluginManager("fgcodegen")
pm.add_hookspecs(hookspecs)


def _try_register_builtin(plugin_name: str, reregister: bool = False) -> str | None:
    module_package, module_name = plugin_name.rsplit(".", 1)
    try:
        module = import_module(f".{module_name}", module_package)
    except ModuleNotFoundError:
        logger.info(
            "Skip importing %s builtin-plugin module, likely missing dependency",
            module_name,
        )
    else:
        registered = pm.is_registered(module)
        if not reregister and registered:
            return
        if registered:
            pm.unregister(module)
        name = pm.register(module, plugin_name)
        logger.info("registered %s builtin-plugin module", name)
        return name


def register(plugin: object, name: str | None = None) -> str | None:
    """Register a plugin and return its name.

    :param plugin: Plugin object
    :param name: The name under which to register the plugin. If not specified,
                 a name is generated using get_canonical_name().
    :returns: The plugin name. If the name is blocked from registering, returns None.

    If the plugin is already registered, raises a ValueError.
    """
    return pm.register(plugin, name)


def unregister(name: str) -> Any | None:
    """Unregister a plugin

    :param name: The name of the plugin to unregister.
    :returns: The unregistered plugin object or None if not registered
    """
    return pm.unregister(name=name)


def list_plugins() -> list:
    return [pm.get_name(p) for p in pm.get_plugins()]


def initialize():
    """initialize manager and load builtin plugins"""

    _try_register_builtin("fgcodegen.plugins.catalog_builtin")

    # load all fgcodegen plugins found in site-packages
    pm.load_setuptools_entrypoints("fgcodegen")


def get_hook():
    return pm.hook
