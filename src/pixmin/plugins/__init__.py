"""Transformation plugins: the name registry and the built-in optimizers.

The built-in plugins are registered with the module-level ``REGISTRY`` on
import; third-party plugins are discovered through the ``pixmin.plugins``
entry-point group the first time their name is requested.
"""

from .registry import (
    REGISTRY,
    PluginHandle,
    PluginRegistry,
    PluginSpec,
    resolve_plugins,
)
from .builtin import BUILTIN_PLUGINS, register_builtins

register_builtins(REGISTRY)

__all__ = [
    "REGISTRY",
    "PluginHandle",
    "PluginRegistry",
    "PluginSpec",
    "resolve_plugins",
    "BUILTIN_PLUGINS",
    "register_builtins",
]
