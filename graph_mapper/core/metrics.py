"""Mapping metrics.

Counters are written by the Mapper at the end of each top-level call and
read through immutable snapshots.
"""

from __future__ import annotations

import gc
import threading
import tracemalloc
from dataclasses import dataclass


@dataclass(frozen=True)
class MemorySample:
    """Process memory observed when the snapshot was taken.

    ``current_bytes``/``peak_bytes`` come from tracemalloc and are zero
    unless tracing has been started by the application.
    """

    current_bytes: int
    peak_bytes: int
    gc_collections: int


@dataclass(frozen=True)
class MetricsSnapshot:
    total_mappings: int
    total_elapsed_ms: float
    average_elapsed_ms: float
    cycles_detected: int
    memory: MemorySample


def sample_memory() -> MemorySample:
    """Take a memory sample from tracemalloc and the garbage collector."""
    if tracemalloc.is_tracing():
        current, peak = tracemalloc.get_traced_memory()
    else:
        current, peak = 0, 0
    collections = sum(generation.get("collections", 0) for generation in gc.get_stats())
    return MemorySample(current_bytes=current, peak_bytes=peak, gc_collections=collections)


class MappingMetrics:
    """Thread-safe accumulator for mapping counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_mappings = 0
        self._total_elapsed_ms = 0.0
        self._cycles_detected = 0

    def record_mapping(self, elapsed_ms: float) -> None:
        with self._lock:
            self._total_mappings += 1
            self._total_elapsed_ms += elapsed_ms

    def record_cycles(self, count: int = 1) -> None:
        with self._lock:
            self._cycles_detected += count

    def snapshot(self) -> MetricsSnapshot:
        """Return a consistent, read-only view of the counters."""
        with self._lock:
            total = self._total_mappings
            elapsed = self._total_elapsed_ms
            cycles = self._cycles_detected
        return MetricsSnapshot(
            total_mappings=total,
            total_elapsed_ms=elapsed,
            average_elapsed_ms=elapsed / total if total else 0.0,
            cycles_detected=cycles,
            memory=sample_memory(),
        )

    def reset(self) -> None:
        with self._lock:
            self._total_mappings = 0
            self._total_elapsed_ms = 0.0
            self._cycles_detected = 0
