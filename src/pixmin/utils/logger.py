"""
Structured logging for pixmin.

Each line carries a UTC timestamp, the level, a dotted event name and
``key=value`` fields, for example::

    2026-01-01 12:00:00 | [INFO] | batch.item | file="a.png" | status="OK" | worker=w1

Every line goes to stderr because stdout may be carrying image bytes. Lines
are written through tqdm so an active progress bar is redrawn beneath them.
"""
import sys
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from tqdm import tqdm

# Thread name prefix given to the batch thread pool; worker ids derive from it
WORKER_THREAD_PREFIX = "pixmin-worker"

_SEPARATOR = " | "
_print_lock = threading.Lock()


class LogLevel(Enum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Look up a level by name, accepting WARNING as an alias for WARN."""
        key = name.strip().upper()
        if key == "WARNING":
            key = "WARN"
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown log level: {name}") from None


_threshold = LogLevel.WARN


def set_log_level(level: LogLevel) -> None:
    global _threshold
    _threshold = level


def enabled(level: LogLevel) -> bool:
    return level.value >= _threshold.value


def worker_id() -> str:
    """``main`` on the main thread, ``w1``, ``w2``... on batch pool threads."""
    name = threading.current_thread().name
    if name == "MainThread":
        return "main"
    prefix, _, index = name.rpartition("_")
    if prefix == WORKER_THREAD_PREFIX and index.isdigit():
        return f"w{int(index) + 1}"
    return name


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, str):
        # single-line output
        escaped = value.replace("\r", "\\r").replace("\n", "\\n").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def format_line(event: str, level: LogLevel, fields: Mapping[str, Any]) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    parts = [timestamp, f"[{level.name}]", event]
    parts.extend(f"{key}={_render(value)}" for key, value in fields.items())
    return _SEPARATOR.join(parts)


def log(event: str, level: LogLevel = LogLevel.INFO, **fields) -> None:
    """
    Log `event` with `fields` if `level` passes the current threshold.

    Args:
        event: Event name (e.g., 'batch.start', 'plugins.resolved')
        level: Log level (TRACE, DEBUG, INFO, WARN, ERROR)
        **fields: Key-value pairs to log; ``worker`` is filled in when absent
    """
    if not enabled(level):
        return
    fields.setdefault("worker", worker_id())
    line = format_line(event, level, fields)
    with _print_lock:
        tqdm.write(line, file=sys.stderr)


def safe_print(*args, **kwargs) -> None:
    """
    Thread-safe print for plain user-facing messages.
    Defaults to stderr; pass file=sys.stdout explicitly for summary text.
    """
    kwargs.setdefault("file", sys.stderr)
    with _print_lock:
        print(*args, **kwargs, flush=True)
