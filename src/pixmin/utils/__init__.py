"""
Constants, logging and small helpers shared by the plugin and dispatch
packages.
"""

from .constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_PLUGINS,
    DEFAULT_WORKERS,
    LOG_LEVEL_SETTING,
    STATUS_FAIL,
    STATUS_OK,
    STATUS_STDOUT,
    STDIN_LABEL,
    WORKERS_SETTING,
)
from .logger import LogLevel

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PLUGINS",
    "DEFAULT_WORKERS",
    "LOG_LEVEL_SETTING",
    "STATUS_OK",
    "STATUS_FAIL",
    "STATUS_STDOUT",
    "STDIN_LABEL",
    "WORKERS_SETTING",
    "LogLevel",
]
