"""Per-call traversal state.

A TraversalContext is created for every top-level mapping call and threaded
through the whole recursion, so a single Mapper can serve concurrent callers
without sharing cycle or depth bookkeeping.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class TraversalContext:
    """Visiting set, depth counter and cancellation flag for one mapping call.

    Attributes:
        visiting: ids of composite sources on the current recursion path.
        open_containers: ids of source containers currently being rebuilt.
        depth: number of composites currently entered.
        cycles_detected: cycle entries seen during this call.
        cancelled: set by an outside wrapper to stop the traversal.
    """

    visiting: set[int] = field(default_factory=set)
    open_containers: set[int] = field(default_factory=set)
    depth: int = 0
    cycles_detected: int = 0
    cancelled: bool = False
    cancellation_reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        """Stop the traversal; destinations are returned as they stand."""
        self.cancelled = True
        self.cancellation_reason = reason

    def is_visiting(self, source: object) -> bool:
        return id(source) in self.visiting

    @contextmanager
    def enter(self, source: object, max_depth: int, *, track: bool) -> Iterator[bool]:
        """Enter one composite level.

        Yields False when the depth limit is exceeded, in which case nothing
        is pushed. Otherwise pushes the source (when ``track``) and yields
        True; the depth counter and visiting set are restored on exit.
        """
        self.depth += 1
        if self.depth > max_depth:
            self.depth -= 1
            yield False
            return

        key = id(source)
        if track:
            self.visiting.add(key)
        try:
            yield True
        finally:
            if track:
                self.visiting.discard(key)
            self.depth -= 1

    @contextmanager
    def open_container(self, source: object) -> Iterator[bool]:
        """Guard a container rebuild; yields False if it is already open."""
        key = id(source)
        if key in self.open_containers:
            yield False
            return
        self.open_containers.add(key)
        try:
            yield True
        finally:
            self.open_containers.discard(key)
