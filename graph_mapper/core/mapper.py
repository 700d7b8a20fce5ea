"""Mapper facade.

The Mapper owns settings, profiles and metrics, and runs each top-level
call through a fresh TraversalEngine and TraversalContext. It also
enforces the single-object versus collection dispatch rules.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from graph_mapper.core.context import TraversalContext
from graph_mapper.core.enums import ContainerKind
from graph_mapper.core.exceptions import (
    CollectionToScalarError,
    ScalarToCollectionError,
    UnsupportedShapeError,
)
from graph_mapper.core.logging import get_logger
from graph_mapper.core.metrics import MappingMetrics, MetricsSnapshot
from graph_mapper.core.settings import MappingSettings
from graph_mapper.mapping.engine import TraversalEngine
from graph_mapper.mapping.profile import ProfileBuilder, ProfileModule, ProfileStore
from graph_mapper.mapping.shapes import (
    AnyShape,
    CompositeShape,
    ContainerShape,
    describe,
    is_collection_value,
)

T = TypeVar("T")

logger = get_logger(__name__)


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", repr(hint))


class Mapper:
    """Object graph mapper.

    Args:
        settings: Mapping policy. Defaults to ``MappingSettings()``.
        profiles: Profile store, shareable between mappers.

    Example::

        mapper = Mapper()
        mapper.create_map(OrderRow, OrderDto).ignore("internal_notes")
        dto = mapper.map(row, OrderDto)
    """

    def __init__(
        self,
        settings: MappingSettings | None = None,
        profiles: ProfileStore | None = None,
    ) -> None:
        self._settings = settings or MappingSettings()
        self._profiles = profiles if profiles is not None else ProfileStore()
        self._metrics = MappingMetrics()

    @property
    def settings(self) -> MappingSettings:
        return self._settings

    @property
    def profiles(self) -> ProfileStore:
        return self._profiles

    @property
    def metrics(self) -> MetricsSnapshot:
        """Snapshot of the counters collected so far."""
        return self._metrics.snapshot()

    def reset_metrics(self) -> None:
        self._metrics.reset()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, **overrides: Any) -> Mapper:
        """Replace settings with a validated copy carrying ``overrides``."""
        self._settings = self._settings.with_overrides(**overrides)
        return self

    def create_map(self, source_type: Any, destination_type: Any) -> ProfileBuilder:
        """Start (or continue) the profile for a source/destination pair."""
        return self._profiles.create_map(source_type, destination_type)

    def add_profile(self, module: ProfileModule | type[ProfileModule]) -> Mapper:
        """Register a profile module (an instance or a no-argument class)."""
        instance = module() if isinstance(module, type) else module
        instance.configure(self._profiles)
        return self

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def map(
        self,
        source: Any,
        destination_type: Any,
        *,
        context: TraversalContext | None = None,
    ) -> Any:
        """Map ``source`` into a freshly allocated ``destination_type``.

        Raises:
            CollectionToScalarError: Collection source, non-collection type.
            ScalarToCollectionError: Single source, collection type.
            UnsupportedShapeError: No way to build the destination container.
        """
        shape = describe(destination_type)
        with self._run(context) as (engine, ctx):
            if source is None:
                return None if engine.settings.propagate_nulls else engine.allocate(shape)

            if isinstance(shape, ContainerShape):
                if self._accepts_collection(source, shape):
                    return engine.map_collection(source, shape, ctx)
                raise ScalarToCollectionError(
                    _type_name(destination_type), from_mapping=isinstance(source, Mapping)
                )

            if not isinstance(shape, AnyShape) and is_collection_value(source):
                raise CollectionToScalarError(_type_name(destination_type))

            return engine.convert_value(source, shape, ctx)

    def map_into(
        self,
        source: Any,
        destination: T,
        *,
        context: TraversalContext | None = None,
    ) -> T:
        """Fill an existing destination from ``source`` and return it.

        A None source leaves the destination untouched.
        """
        if source is None:
            return destination
        shape = describe(type(destination))
        if not isinstance(shape, CompositeShape):
            raise UnsupportedShapeError(
                type(destination).__name__, "map_into needs a composite destination"
            )
        if is_collection_value(source):
            raise CollectionToScalarError(type(destination).__name__)
        with self._run(context) as (engine, ctx):
            return engine.map_into(source, destination, ctx)  # type: ignore[no-any-return]

    def map_many(self, sources: Iterable[Any] | None, destination_type: Any) -> list[Any]:
        """Map each element independently; None elements stay None."""
        if sources is None:
            return []
        return [None if item is None else self.map(item, destination_type) for item in sources]

    def clone(self, value: T) -> T:
        """Deep copy ``value`` by mapping it onto its own type."""
        if value is None:
            return value
        return self.map(value, type(value))  # type: ignore[no-any-return]

    @staticmethod
    def _accepts_collection(source: Any, shape: ContainerShape) -> bool:
        if isinstance(source, Mapping):
            return shape.container_kind is ContainerKind.MAPPING
        return is_collection_value(source)

    @contextmanager
    def _run(
        self,
        context: TraversalContext | None,
    ) -> Iterator[tuple[TraversalEngine, TraversalContext]]:
        """One top-level call: fresh engine, timing, and metrics flush."""
        ctx = context if context is not None else TraversalContext()
        engine = TraversalEngine(self._settings, self._profiles)
        cycles_before = ctx.cycles_detected
        started = time.perf_counter()
        try:
            yield engine, ctx
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            cycles = ctx.cycles_detected - cycles_before
            if cycles:
                self._metrics.record_cycles(cycles)
            if engine.settings.collect_metrics:
                self._metrics.record_mapping(elapsed_ms)
            logger.debug("mapping_completed", elapsed_ms=round(elapsed_ms, 3), cycles=cycles)


_default_mapper = Mapper()


def get_default_mapper() -> Mapper:
    """Process-wide mapper used by map_to() and deep_clone()."""
    return _default_mapper


def configure_default(**overrides: Any) -> Mapper:
    return _default_mapper.configure(**overrides)


def map_to(source: Any, destination_type: Any) -> Any:
    """Map with the default mapper."""
    return _default_mapper.map(source, destination_type)


def deep_clone(value: T) -> T:
    """Deep copy with the default mapper."""
    return _default_mapper.clone(value)
