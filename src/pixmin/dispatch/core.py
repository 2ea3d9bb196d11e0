"""
Work items, the transform runner and the output router.

A work item is either a file on disk (``PathItem``) or the piped stdin
buffer (``BufferItem``). ``run_item`` pushes one item's bytes through the
plugin chain and never raises for per-item problems; ``deliver`` then sends
the outcome to the sink chosen once at startup.
"""
import os
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from pixmin.errors import DuplicateDestinationError, MultipleStdoutError
from pixmin.plugins import PluginHandle
from pixmin.utils import STATUS_FAIL, STATUS_OK, STATUS_STDOUT, STDIN_LABEL, LogLevel, logger
from pixmin.utils.file_util import mirror_path


@dataclass(frozen=True)
class PathItem:
    source: Path
    dest_dir: Optional[Path] = None
    base: Optional[Path] = None

    @property
    def label(self) -> str:
        return str(self.source)

    def read(self) -> bytes:
        return self.source.read_bytes()

    def destination(self) -> Optional[Path]:
        """Where the transformed bytes go, or None for stdout."""
        if self.dest_dir is None:
            return None
        if self.base is None:
            return self.dest_dir / self.source.name
        return mirror_path(self.source, self.base, self.dest_dir)


@dataclass(frozen=True)
class BufferItem:
    data: bytes

    @property
    def label(self) -> str:
        return STDIN_LABEL

    def read(self) -> bytes:
        return self.data

    def destination(self) -> Optional[Path]:
        return None


WorkItem = Union[PathItem, BufferItem]


class SinkKind(Enum):
    STDOUT = "stdout"
    DIRECTORY = "directory"
    IN_PLACE = "in-place"


@dataclass(frozen=True)
class SinkMode:
    """Where transformed bytes are delivered. Decided once per run."""

    kind: SinkKind
    path: Optional[Path] = None

    @classmethod
    def stdout(cls) -> "SinkMode":
        return cls(SinkKind.STDOUT)

    @classmethod
    def directory(cls, path) -> "SinkMode":
        return cls(SinkKind.DIRECTORY, Path(path).expanduser())

    @classmethod
    def in_place(cls) -> "SinkMode":
        return cls(SinkKind.IN_PLACE)

    @classmethod
    def from_flags(cls, out_dir: Optional[str], write: bool, piped: bool = False) -> "SinkMode":
        if piped:
            return cls.stdout()
        if write:
            if out_dir:
                logger.log("sink.conflict", LogLevel.WARN,
                           msg="--write given, ignoring --out-dir", out_dir=out_dir)
            return cls.in_place()
        if out_dir:
            return cls.directory(out_dir)
        return cls.stdout()


@dataclass(frozen=True)
class TransformResult:
    item: WorkItem
    data: Optional[bytes] = None
    path: Optional[Path] = None
    error: Optional[str] = None
    plugin: Optional[str] = None
    size_in: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def size_out(self) -> int:
        return len(self.data) if self.data is not None else 0

    @classmethod
    def success(cls, item: WorkItem, data: bytes, path: Optional[Path], size_in: int) -> "TransformResult":
        return cls(item=item, data=data, path=path, size_in=size_in)

    @classmethod
    def failure(cls, item: WorkItem, reason: str, plugin: Optional[str] = None,
                size_in: int = 0) -> "TransformResult":
        return cls(item=item, error=reason, plugin=plugin, size_in=size_in)

    def failed(self, reason: str) -> "TransformResult":
        """Return a copy of a successful result turned into a failure."""
        return replace(self, data=None, error=reason)


def run_item(item: WorkItem, plugins: List[PluginHandle]) -> TransformResult:
    """Apply `plugins` in order to one item's bytes."""
    try:
        data = item.read()
    except OSError as e:
        return TransformResult.failure(item, f"read error: {e}")

    size_in = len(data)
    for plugin in plugins:
        try:
            data = plugin(data)
        except Exception as e:
            return TransformResult.failure(item, str(e) or type(e).__name__, plugin=plugin.name, size_in=size_in)
        if not isinstance(data, (bytes, bytearray)):
            return TransformResult.failure(
                item, f"returned {type(data).__name__} instead of bytes", plugin=plugin.name, size_in=size_in)

    logger.log("batch.transformed", LogLevel.TRACE, file=item.label, size_in=size_in, size_out=len(data))
    return TransformResult.success(item, bytes(data), item.destination(), size_in)


def check_sink_capacity(sink: SinkMode, count: int) -> None:
    """Stdout can take one item at most."""
    if sink.kind is SinkKind.STDOUT and count > 1:
        raise MultipleStdoutError()


def check_distinct_destinations(items: List[WorkItem]) -> None:
    """Concurrent writers must never share an output file."""
    claimed = {}
    for item in items:
        destination = item.destination()
        if destination is None:
            continue
        key = os.path.normcase(os.path.abspath(destination))
        if key in claimed:
            raise DuplicateDestinationError(destination, claimed[key].label, item.label)
        claimed[key] = item


def deliver(result: TransformResult, multi_item: bool,
            stdout: Optional[BinaryIO] = None) -> Tuple[str, TransformResult]:
    """
    Route a transform result to its sink.

    Returns:
        ``(status, result)``. On a write error the returned result is a
        failure carrying the OS error.

    Raises:
        MultipleStdoutError: A stdout-bound result arrives in a multi-item batch.
    """
    if not result.ok:
        return STATUS_FAIL, result

    if result.path is None:
        if multi_item:
            raise MultipleStdoutError()
        stream = stdout if stdout is not None else sys.stdout.buffer
        stream.write(result.data)
        stream.flush()
        return STATUS_STDOUT, result

    try:
        result.path.parent.mkdir(parents=True, exist_ok=True)
        result.path.write_bytes(result.data)
    except OSError as e:
        return STATUS_FAIL, result.failed(f"write error: {e}")

    logger.log("batch.written", LogLevel.DEBUG, file=result.item.label, dst=str(result.path))
    return STATUS_OK, result
