"""Batch dispatch for image minification.

This package provides two levels of functionality:
- core: Work items, sink modes, the per-item transform runner and the output router
- batch: Input resolution and the concurrent batch orchestrator
"""

from .core import (
    BufferItem,
    PathItem,
    SinkKind,
    SinkMode,
    TransformResult,
    WorkItem,
    check_distinct_destinations,
    check_sink_capacity,
    deliver,
    run_item,
)
from .batch import (
    BatchOrchestrator,
    BatchState,
    BatchSummary,
    FailurePolicy,
    resolve_inputs,
)

__all__ = [
    # Items and sinks
    "BufferItem",
    "PathItem",
    "WorkItem",
    "SinkKind",
    "SinkMode",
    # Transform and delivery
    "TransformResult",
    "run_item",
    "deliver",
    "check_sink_capacity",
    "check_distinct_destinations",
    # Batch orchestration
    "BatchOrchestrator",
    "BatchState",
    "BatchSummary",
    "FailurePolicy",
    "resolve_inputs",
]
