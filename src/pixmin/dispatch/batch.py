"""
Input resolution and the concurrent batch orchestrator.

Items are transformed on a thread pool and each result is routed through the
output router on the calling thread as soon as it settles, so the summary is
complete once every future has been drained.
"""
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, List, Optional, Sequence, Union

from tqdm import tqdm

from pixmin.errors import EmptyPluginChainError
from pixmin.plugins import PluginHandle
from pixmin.utils import DEFAULT_WORKERS, STATUS_FAIL, LogLevel, logger
from pixmin.utils.file_util import common_base, expand_patterns
from . import core
from .core import BufferItem, PathItem, SinkKind, SinkMode, TransformResult, WorkItem

RawInput = Union[bytes, bytearray, str, Sequence[str]]


def resolve_inputs(raw: RawInput, sink: SinkMode) -> List[WorkItem]:
    """Turn a piped buffer or a list of paths/globs into work items."""
    if isinstance(raw, (bytes, bytearray)):
        return [BufferItem(bytes(raw))]
    if isinstance(raw, str):
        raw = [raw]

    files, unmatched = expand_patterns(raw)
    for pattern in unmatched:
        logger.log("inputs.no_match", LogLevel.WARN, pattern=pattern)

    if sink.kind is SinkKind.IN_PLACE:
        return [PathItem(f, dest_dir=f.parent, base=f.parent) for f, _ in files]
    if sink.kind is SinkKind.DIRECTORY:
        # One base for the whole batch keeps same-named files in different folders apart
        base = common_base(b for _, b in files)
        return [PathItem(f, dest_dir=sink.path, base=base) for f, _ in files]
    return [PathItem(f) for f, _ in files]


class FailurePolicy(Enum):
    """How per-item failures affect the exit status."""
    REPORT = "report"
    FAIL = "fail"


class BatchState(Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    DONE = "done"


@dataclass
class BatchSummary:
    total: int = 0
    succeeded: int = 0
    failures: List[TransformResult] = field(default_factory=list)
    results: List[TransformResult] = field(default_factory=list)
    bytes_in: int = 0
    bytes_out: int = 0
    elapsed: float = 0.0

    def record(self, status: str, result: TransformResult) -> None:
        self.results.append(result)
        if status == STATUS_FAIL:
            self.failures.append(result)
            return
        self.succeeded += 1
        self.bytes_in += result.size_in
        self.bytes_out += result.size_out

    @property
    def saved(self) -> int:
        return self.bytes_in - self.bytes_out

    def exit_code(self, policy: FailurePolicy = FailurePolicy.REPORT) -> int:
        if policy is FailurePolicy.FAIL and self.failures:
            return 1
        return 0

    def message(self) -> str:
        noun = "image" if self.succeeded == 1 else "images"
        return f"{self.succeeded} {noun} minified"


class BatchOrchestrator:
    """Dispatch work items concurrently and aggregate their outcomes."""

    def __init__(self, plugins: List[PluginHandle], sink: SinkMode, workers: int = DEFAULT_WORKERS,
                 progress: bool = False, stdout: Optional[BinaryIO] = None):
        if not plugins:
            raise EmptyPluginChainError()
        self.plugins = list(plugins)
        self.sink = sink
        self.workers = max(1, workers)
        self.progress = progress
        self.stdout = stdout
        self.state = BatchState.IDLE

    def run(self, raw: RawInput) -> BatchSummary:
        """
        Resolve `raw` into work items, transform them all and deliver each result.

        Configuration errors (several items bound for stdout, two items sharing
        an output path) are raised before any item is dispatched. Per-item failures are recorded in the summary.
        Any other exception raised while draining the pool propagates.
        """
        start_time = time.time()
        items = resolve_inputs(raw, self.sink)
        core.check_sink_capacity(self.sink, len(items))
        core.check_distinct_destinations(items)

        summary = BatchSummary(total=len(items))
        multi_item = len(items) > 1

        logger.log("batch.start", LogLevel.INFO,
                   items=len(items),
                   sink=self.sink.kind.value,
                   out_dir=str(self.sink.path) if self.sink.path else None,
                   plugins=",".join(p.name for p in self.plugins),
                   workers=self.workers)

        self.state = BatchState.DISPATCHING
        show_progress = self.progress and self.sink.kind is not SinkKind.STDOUT
        with ThreadPoolExecutor(max_workers=self.workers,
                                thread_name_prefix=logger.WORKER_THREAD_PREFIX) as executor, \
                tqdm(total=len(items), desc="Minifying images", unit="image",
                     file=sys.stderr, disable=not show_progress, leave=False) as bar:
            futs = {executor.submit(core.run_item, item, self.plugins): item for item in items}

            self.state = BatchState.AGGREGATING
            for fut in as_completed(futs):
                status, result = core.deliver(fut.result(), multi_item, self.stdout)
                summary.record(status, result)
                bar.update(1)

                if status == STATUS_FAIL:
                    logger.log("batch.item_failed", LogLevel.INFO,
                               file=result.item.label, plugin=result.plugin, error=result.error)
                else:
                    logger.log("batch.item", LogLevel.INFO,
                               file=result.item.label, status=status,
                               size_in=result.size_in, size_out=result.size_out)

        summary.elapsed = time.time() - start_time
        self.state = BatchState.DONE

        logger.log("batch.end", LogLevel.INFO,
                   ok=summary.succeeded,
                   fail=len(summary.failures),
                   bytes_in=summary.bytes_in,
                   bytes_out=summary.bytes_out,
                   saved=summary.saved,
                   runtime=f"{summary.elapsed:.3f}s")
        return summary
