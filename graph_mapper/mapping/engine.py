"""Object graph traversal.

TraversalEngine fills destinations from sources member by member. It is
stateless between calls: cycle detection, depth and cancellation live in
the TraversalContext passed down the recursion.

Order for one (source, destination) pair:
1. Absent source, cancellation, cycle and depth checks.
2. Profile member rules, then conditional rules.
3. Default copying of same-named members not ruled or ignored.
4. Profile post-transforms.
"""

from __future__ import annotations

import dataclasses
import inspect
import queue
import types
from collections.abc import Iterable, Mapping
from typing import Any

from graph_mapper.core.context import TraversalContext
from graph_mapper.core.enums import ContainerKind, ShapeKind
from graph_mapper.core.exceptions import ConversionError, MappingUsageError
from graph_mapper.core.logging import get_logger
from graph_mapper.core.settings import MappingSettings
from graph_mapper.mapping.containers import rebuild
from graph_mapper.mapping.converter import ScalarConverter, default_value
from graph_mapper.mapping.profile import MappingProfile, ProfileStore
from graph_mapper.mapping.shapes import (
    AnyShape,
    CompositeShape,
    ContainerShape,
    MemberDescriptor,
    Shape,
    describe,
    is_collection_value,
)

logger = get_logger(__name__)

_MISSING = object()


class _CallbackError(Exception):
    """Carries a profile callback failure past per-member skipping."""

    def __init__(self, original: Exception) -> None:
        super().__init__(original)
        self.original = original


def _type_name(obj: Any) -> str:
    return getattr(obj, "__name__", repr(obj))


def _is_composite_value(value: Any) -> bool:
    """Can ``value`` be read member by member?"""
    if isinstance(value, (Mapping, types.SimpleNamespace)):
        return True
    return describe(type(value)).kind is ShapeKind.COMPOSITE


def _read_member(source: Any, name: str) -> Any:
    """Read a same-named member from a source, or ``_MISSING``.

    Mappings are read by key, everything else by attribute. Write-only
    properties and methods never count as members.
    """
    if isinstance(source, Mapping):
        return source[name] if name in source else _MISSING

    shape = describe(type(source))
    if isinstance(shape, CompositeShape):
        member = shape.member(name)
        if member is not None and not member.readable:
            return _MISSING
    value = getattr(source, name, _MISSING)
    if inspect.isroutine(value):
        return _MISSING
    return value


def _assign_member(destination: Any, shape: Shape, name: str, value: Any) -> None:
    """Set a member, bypassing frozen dataclass / pydantic guards."""
    if isinstance(shape, CompositeShape) and shape.frozen:
        object.__setattr__(destination, name, value)
    else:
        setattr(destination, name, value)


def _iterate_source(value: Any) -> Iterable[Any]:
    """Iterate a source collection in removal order without consuming it."""
    if isinstance(value, queue.PriorityQueue):
        return sorted(value.queue)
    if isinstance(value, queue.LifoQueue):
        return list(reversed(value.queue))
    if isinstance(value, queue.Queue):
        return list(value.queue)
    if isinstance(value, queue.SimpleQueue):
        raise ConversionError(value, "collection", "SimpleQueue cannot be read without draining")
    return value


class TraversalEngine:
    """Recursive mapper for one settings snapshot and profile store.

    Args:
        settings: Policy for the whole traversal.
        profiles: Store consulted for every composite pair.
    """

    def __init__(self, settings: MappingSettings, profiles: ProfileStore) -> None:
        self._settings = settings
        self._profiles = profiles
        self._converter = ScalarConverter(strict=settings.strict_conversion)

    @property
    def settings(self) -> MappingSettings:
        return self._settings

    @property
    def converter(self) -> ScalarConverter:
        return self._converter

    # ------------------------------------------------------------------
    # Composites
    # ------------------------------------------------------------------

    def map_into(self, source: Any, destination: Any, context: TraversalContext) -> Any:
        """Fill ``destination`` from ``source`` and return it (or its transform)."""
        settings = self._settings
        if source is None:
            if settings.propagate_nulls:
                return None
            return self.allocate(describe(type(destination)))

        if context.cancelled:
            return destination

        if settings.detect_cycles and context.is_visiting(source):
            context.cycles_detected += 1
            logger.debug(
                "mapping_cycle_detected",
                source_type=type(source).__name__,
                depth=context.depth,
            )
            return destination

        with context.enter(source, settings.max_depth, track=settings.detect_cycles) as entered:
            if not entered:
                logger.debug(
                    "mapping_depth_exceeded",
                    source_type=type(source).__name__,
                    max_depth=settings.max_depth,
                )
                return destination
            try:
                return self._populate(source, destination, context)
            except _CallbackError as failure:
                if context.depth > 1:
                    raise
                original = failure.original
            # Outermost composite: re-raise the user's exception as it was.
            raise original

    def _populate(self, source: Any, destination: Any, context: TraversalContext) -> Any:
        shape = describe(type(destination))
        profile = self._profiles.lookup(type(source), type(destination))
        excluded: frozenset[str] = frozenset()

        if profile is not None:
            excluded = profile.excluded_members
            try:
                self._apply_rules(profile, source, destination, shape)
            except Exception as exc:
                raise _CallbackError(exc) from exc

        if context.cancelled:
            logger.debug(
                "mapping_cancelled",
                destination_type=type(destination).__name__,
                reason=context.cancellation_reason,
            )
            return destination

        if isinstance(shape, CompositeShape):
            for member in shape.members:
                if member.writable and member.name not in excluded:
                    self._copy_member(source, destination, shape, member, context)

        if profile is not None:
            try:
                for transform in profile.transforms:
                    destination = transform(destination)
            except Exception as exc:
                raise _CallbackError(exc) from exc
        return destination

    @staticmethod
    def _apply_rules(profile: MappingProfile, source: Any, destination: Any, shape: Shape) -> None:
        for rule in profile.member_rules:
            _assign_member(destination, shape, rule.member, rule.compute(source))
        for conditional in profile.conditional_rules:
            conditional.apply(source, destination)

    def _copy_member(
        self,
        source: Any,
        destination: Any,
        shape: CompositeShape,
        member: MemberDescriptor,
        context: TraversalContext,
    ) -> None:
        try:
            value = _read_member(source, member.name)
            if value is _MISSING:
                return
            converted = self.convert_value(value, describe(member.hint), context)
            _assign_member(destination, shape, member.name, converted)
        except (MappingUsageError, _CallbackError):
            raise
        except Exception as exc:
            logger.debug(
                "mapping_member_skipped",
                destination_type=shape.python_type.__name__,
                member=member.name,
                error=str(exc),
            )

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def convert_value(self, value: Any, shape: Shape, context: TraversalContext) -> Any:
        """Produce the destination value for one source value."""
        if value is None:
            if self._settings.propagate_nulls or shape.nullable:
                return None
            return self.allocate(shape)

        if isinstance(shape, AnyShape):
            return value
        if isinstance(shape, ContainerShape):
            return self.map_collection(value, shape, context)
        if isinstance(shape, CompositeShape):
            if _is_composite_value(value):
                return self.map_into(value, self.allocate(shape), context)
            # scalar into composite is a failed conversion: absent, then null rules
            converted = self._converter.convert(value, shape)
            if converted is None:
                return self.convert_value(None, shape, context)
            return converted
        return self._converter.convert(value, shape)

    def map_collection(self, value: Any, shape: ContainerShape, context: TraversalContext) -> Any:
        """Map each element of a source collection and rebuild the target container.

        Absent elements stay absent. A container already being rebuilt
        further up the path yields an empty container.
        """
        is_mapping = isinstance(value, Mapping)
        target = _type_name(shape.hint)
        if not (is_mapping or is_collection_value(value)):
            raise ConversionError(value, target, "source is not a collection")

        with context.open_container(value) as opened:
            if not opened:
                if self._settings.detect_cycles:
                    context.cycles_detected += 1
                    logger.debug(
                        "mapping_cycle_detected",
                        source_type=type(value).__name__,
                        depth=context.depth,
                    )
                return rebuild([], shape)

            if shape.container_kind is ContainerKind.MAPPING:
                pairs = value.items() if is_mapping else _iterate_source(value)
                key_shape = describe(shape.key_hint)
                value_shape = describe(shape.element_hint)
                return rebuild(
                    [
                        (
                            self._element(key, key_shape, context),
                            self._element(item, value_shape, context),
                        )
                        for key, item in pairs
                    ],
                    shape,
                )

            if is_mapping:
                raise ConversionError(value, target, "mapping source for a non-mapping collection")
            return rebuild(
                [
                    self._element(item, describe(shape.hint_at(index)), context)
                    for index, item in enumerate(_iterate_source(value))
                ],
                shape,
            )

    def _element(self, item: Any, shape: Shape, context: TraversalContext) -> Any:
        if item is None:
            return None
        return self.convert_value(item, shape, context)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def allocate(self, shape: Shape) -> Any:
        """Fresh default-constructed value for a shape."""
        if isinstance(shape, CompositeShape):
            return self._instantiate(shape)
        if isinstance(shape, ContainerShape):
            return rebuild([], shape)
        return default_value(shape)

    def _placeholder(self, member: MemberDescriptor) -> Any:
        shape = describe(member.hint)
        if isinstance(shape, ContainerShape):
            return rebuild([], shape)
        return default_value(shape)

    def _instantiate(self, shape: CompositeShape) -> Any:
        cls = shape.python_type
        try:
            return cls()
        except (TypeError, ValueError):
            pass

        defaults = {m.name: self._placeholder(m) for m in shape.members if m.required}
        if shape.model == "pydantic":
            return cls.model_construct(**defaults)  # type: ignore[attr-defined]
        try:
            return cls(**defaults)
        except (TypeError, ValueError):
            pass

        instance = cls.__new__(cls)
        if shape.model == "dataclass":
            for f in dataclasses.fields(cls):
                if f.default is not dataclasses.MISSING:
                    value = f.default
                elif f.default_factory is not dataclasses.MISSING:
                    value = f.default_factory()
                else:
                    value = defaults.get(f.name)
                object.__setattr__(instance, f.name, value)
        return instance
