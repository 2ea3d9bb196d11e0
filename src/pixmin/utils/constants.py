"""
Constants and configuration settings for image minification.

Values that can be tuned per environment are read from the process
environment (optionally seeded from a ``.env`` file) once, at import time.
CLI flags take precedence over anything defined here.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Plugins applied when the caller does not name any, in application order
BUILTIN_DEFAULT_PLUGINS = ("gifsicle", "jpegtran", "optipng", "svgo")
_env_plugins = [p.strip() for p in os.getenv("PIXMIN_PLUGINS", "").split(",") if p.strip()]
DEFAULT_PLUGINS = tuple(_env_plugins) if _env_plugins else BUILTIN_DEFAULT_PLUGINS

# Entry-point group scanned for externally installed plugins
PLUGIN_ENTRY_POINT_GROUP = "pixmin.plugins"

# Distribution name prefix suggested when a plugin cannot be found
PLUGIN_PACKAGE_PREFIX = "pixmin-"

# Run settings. The raw environment values are validated by the CLI.
DEFAULT_WORKERS = 4
DEFAULT_LOG_LEVEL = "WARN"
WORKERS_SETTING = os.getenv("PIXMIN_WORKERS", "").strip()
LOG_LEVEL_SETTING = os.getenv("PIXMIN_LOG_LEVEL", "").strip()

# Identity used in messages for the piped stdin buffer
STDIN_LABEL = "stdin buffer"

# Magic numbers used by built-in plugins to skip foreign formats
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
JPEG_SIGNATURE = b"\xff\xd8\xff"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Processing status codes
STATUS_OK = "OK"
STATUS_FAIL = "FAIL"
STATUS_STDOUT = "STDOUT"
