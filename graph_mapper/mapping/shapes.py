"""Shape descriptors.

describe() turns a runtime type or typing construct into an immutable shape
that drives every mapping decision. Shapes are computed once per hint and
cached; member hints are stored unresolved so self-referential types
describe lazily.

Supported composites: dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

import collections
import collections.abc as cabc
import dataclasses
import datetime as dt
import enum
import inspect
import queue
import types
import typing
import uuid
from decimal import Decimal
from fractions import Fraction
from functools import lru_cache
from typing import Annotated, Any, ClassVar, Literal, Union, get_args, get_origin

import annotated_types
from pydantic import AwareDatetime, BaseModel, NaiveDatetime
from pydantic.fields import FieldInfo

from graph_mapper.core.enums import ContainerKind, ShapeKind

NUMERIC_TYPES: tuple[type, ...] = (int, float, Decimal, Fraction, complex)
PRIMITIVE_TYPES: tuple[type, ...] = (bool, *NUMERIC_TYPES, bytes, bytearray, uuid.UUID)
TEMPORAL_TYPES: tuple[type, ...] = (dt.datetime, dt.date, dt.time, dt.timedelta)


@dataclasses.dataclass(frozen=True)
class NumericBounds:
    """Inclusive/exclusive limits of a numeric domain."""

    ge: Decimal | None = None
    gt: Decimal | None = None
    le: Decimal | None = None
    lt: Decimal | None = None

    def contains(self, value: Decimal) -> bool:
        if not value.is_finite():
            return False
        if self.ge is not None and value < self.ge:
            return False
        if self.gt is not None and value <= self.gt:
            return False
        if self.le is not None and value > self.le:
            return False
        if self.lt is not None and value >= self.lt:
            return False
        return True


@dataclasses.dataclass(frozen=True)
class MemberDescriptor:
    """One named member of a composite shape."""

    name: str
    hint: Any
    readable: bool = True
    writable: bool = True
    optional: bool = False
    required: bool = False  # must be supplied at construction time


@dataclasses.dataclass(frozen=True, kw_only=True)
class Shape:
    """Base for all shape variants."""

    hint: Any
    nullable: bool = False
    kind: ClassVar[ShapeKind] = ShapeKind.ANY


@dataclasses.dataclass(frozen=True, kw_only=True)
class AnyShape(Shape):
    """Values are passed through untouched."""


@dataclasses.dataclass(frozen=True, kw_only=True)
class PrimitiveShape(Shape):
    python_type: type
    bounds: NumericBounds | None = None
    kind: ClassVar[ShapeKind] = ShapeKind.PRIMITIVE

    @property
    def is_numeric(self) -> bool:
        return issubclass(self.python_type, NUMERIC_TYPES) and self.python_type is not bool


@dataclasses.dataclass(frozen=True, kw_only=True)
class TextShape(Shape):
    python_type: type = str
    kind: ClassVar[ShapeKind] = ShapeKind.TEXT


@dataclasses.dataclass(frozen=True, kw_only=True)
class TemporalShape(Shape):
    """Date/time family. ``aware`` is True/False for offset-required/forbidden."""

    python_type: type
    aware: bool | None = None
    kind: ClassVar[ShapeKind] = ShapeKind.TEMPORAL


@dataclasses.dataclass(frozen=True, kw_only=True)
class EnumShape(Shape):
    python_type: type[enum.Enum]
    kind: ClassVar[ShapeKind] = ShapeKind.ENUMERATION

    @property
    def first_member(self) -> enum.Enum | None:
        return next(iter(self.python_type), None)


@dataclasses.dataclass(frozen=True, kw_only=True)
class ContainerShape(Shape):
    """A collection target.

    ``element_hint`` is the value hint for mappings, ``key_hint`` the key
    hint. ``fixed_hints`` holds per-position hints of ``tuple[A, B]`` and
    NamedTuple shapes.
    """

    python_type: type | None
    container_kind: ContainerKind
    element_hint: Any = Any
    key_hint: Any = Any
    fixed_hints: tuple[Any, ...] | None = None
    kind: ClassVar[ShapeKind] = ShapeKind.CONTAINER

    def hint_at(self, index: int) -> Any:
        if self.fixed_hints is not None:
            return self.fixed_hints[index] if index < len(self.fixed_hints) else Any
        return self.element_hint


@dataclasses.dataclass(frozen=True, kw_only=True)
class CompositeShape(Shape):
    python_type: type
    members: tuple[MemberDescriptor, ...]
    model: Literal["dataclass", "pydantic", "plain"]
    frozen: bool = False
    kind: ClassVar[ShapeKind] = ShapeKind.COMPOSITE

    def member(self, name: str) -> MemberDescriptor | None:
        for member in self.members:
            if member.name == name:
                return member
        return None

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in self.members]


def describe(hint: Any) -> Shape:
    """Return the cached shape for a type or typing construct."""
    try:
        return _describe_cached(hint)
    except TypeError:
        # unhashable typing construct
        return _describe(hint, ())


def classify(hint: Any) -> ShapeKind:
    """Return only the kind of a hint's shape."""
    return describe(hint).kind


def is_collection_value(value: object) -> bool:
    """Runtime check: is ``value`` a collection (text and mappings excluded)."""
    if isinstance(value, (str, bytes, bytearray, cabc.Mapping, BaseModel)):
        return False
    return describe(type(value)).kind is ShapeKind.CONTAINER


def is_optional(hint: Any) -> bool:
    hint, _ = _strip_annotated(hint)
    if get_origin(hint) in (Union, types.UnionType):
        return type(None) in get_args(hint)
    return hint is None or hint is type(None)


@lru_cache(maxsize=1024)
def _describe_cached(hint: Any) -> Shape:
    return _describe(hint, ())


def _describe(hint: Any, metadata: tuple[Any, ...]) -> Shape:
    hint, extra = _strip_annotated(hint)
    metadata = metadata + extra
    origin = get_origin(hint)

    if origin in (Union, types.UnionType):
        args = get_args(hint)
        arms = [a for a in args if a is not type(None)]
        nullable = len(arms) < len(args)
        if len(arms) == 1:
            return dataclasses.replace(_describe(arms[0], metadata), nullable=nullable)
        return AnyShape(hint=hint, nullable=nullable)

    if hint is Any or hint is object or hint is None or hint is type(None):
        return AnyShape(hint=hint, nullable=True)
    if isinstance(hint, (typing.TypeVar, str, typing.ForwardRef)):
        return AnyShape(hint=hint)
    if isinstance(hint, typing.NewType):
        return _describe(hint.__supertype__, metadata)

    if origin is not None:
        if isinstance(origin, type) and _is_container_class(origin):
            return _container_shape(hint, origin, get_args(hint))
        if isinstance(origin, type) and origin is not type:
            return _describe(origin, metadata)
        return AnyShape(hint=hint)

    if not isinstance(hint, type):
        return AnyShape(hint=hint)

    if hint is AwareDatetime or hint is NaiveDatetime:
        return TemporalShape(hint=hint, python_type=dt.datetime, aware=hint is AwareDatetime)
    if issubclass(hint, enum.Enum):
        return EnumShape(hint=hint, python_type=hint)
    if issubclass(hint, str):
        return TextShape(hint=hint, python_type=hint)
    if issubclass(hint, PRIMITIVE_TYPES):
        return PrimitiveShape(hint=hint, python_type=hint, bounds=_bounds_from(metadata))
    if issubclass(hint, TEMPORAL_TYPES):
        return TemporalShape(hint=hint, python_type=hint)
    if issubclass(hint, BaseModel) or dataclasses.is_dataclass(hint):
        return _composite_shape(hint)
    if _is_container_class(hint):
        return _container_shape(hint, hint, ())

    shape = _composite_shape(hint)
    if not any(m.writable for m in shape.members):
        # opaque value type (Path, re.Pattern, ...): converted, never traversed
        return PrimitiveShape(hint=hint, python_type=hint)
    return shape


def _strip_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        return hint.__origin__, tuple(hint.__metadata__)
    return hint, ()


def _bounds_from(metadata: tuple[Any, ...]) -> NumericBounds | None:
    limits: dict[str, Decimal] = {}
    for item in _flatten_metadata(metadata):
        for name in ("ge", "gt", "le", "lt"):
            if isinstance(item, getattr(annotated_types, name.capitalize())):
                limits[name] = Decimal(str(getattr(item, name)))
    return NumericBounds(**limits) if limits else None


def _flatten_metadata(metadata: tuple[Any, ...]) -> list[Any]:
    flat: list[Any] = []
    for item in metadata:
        if isinstance(item, FieldInfo):
            flat.extend(_flatten_metadata(tuple(item.metadata)))
        elif isinstance(item, annotated_types.GroupedMetadata):
            flat.extend(_flatten_metadata(tuple(item)))
        else:
            flat.append(item)
    return flat


# --- Containers ---


def _is_container_class(cls: type) -> bool:
    if issubclass(cls, (str, bytes, bytearray, BaseModel)):
        return False
    if issubclass(cls, (queue.Queue, queue.SimpleQueue)):
        return True
    return issubclass(cls, cabc.Iterable)


def _container_kind(cls: type) -> ContainerKind:
    if issubclass(cls, cabc.Mapping):
        return ContainerKind.MAPPING
    if issubclass(cls, tuple):
        return ContainerKind.ARRAY
    if issubclass(cls, queue.LifoQueue):
        return ContainerKind.LIFO
    if issubclass(cls, (queue.Queue, queue.SimpleQueue)):
        return ContainerKind.FIFO
    if issubclass(cls, cabc.Set):
        return ContainerKind.SET
    if issubclass(cls, (cabc.MutableSequence, collections.UserList)):
        return ContainerKind.SEQUENCE
    if inspect.isabstract(cls) and issubclass(list, cls):
        return ContainerKind.SEQUENCE
    return ContainerKind.OTHER


def _container_shape(hint: Any, cls: type, args: tuple[Any, ...]) -> ContainerShape:
    kind = _container_kind(cls)

    if kind is ContainerKind.MAPPING:
        key_hint = args[0] if len(args) > 0 else Any
        value_hint = args[1] if len(args) > 1 else Any
        return ContainerShape(
            hint=hint,
            python_type=cls,
            container_kind=kind,
            key_hint=key_hint,
            element_hint=value_hint,
        )

    if kind is ContainerKind.ARRAY:
        if len(args) == 2 and args[1] is Ellipsis:
            return ContainerShape(
                hint=hint, python_type=cls, container_kind=kind, element_hint=args[0]
            )
        if args and args != ((),):
            return ContainerShape(hint=hint, python_type=cls, container_kind=kind, fixed_hints=args)
        if hasattr(cls, "_fields"):
            field_hints = _type_hints(cls)
            fixed = tuple(field_hints.get(name, Any) for name in cls._fields)
            return ContainerShape(
                hint=hint, python_type=cls, container_kind=kind, fixed_hints=fixed
            )
        return ContainerShape(hint=hint, python_type=cls, container_kind=kind)

    return ContainerShape(
        hint=hint,
        python_type=cls,
        container_kind=kind,
        element_hint=args[0] if args else Any,
    )


# --- Composites ---


def _type_hints(obj: Any) -> dict[str, Any]:
    """Resolve annotations, falling back to raw ones when names don't resolve."""
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError):
        raw: dict[str, Any] = {}
        for klass in reversed(getattr(obj, "__mro__", (obj,))):
            raw.update(getattr(klass, "__annotations__", {}))
        return raw


def _is_classvar(hint: Any) -> bool:
    if hint is ClassVar or get_origin(hint) is ClassVar:
        return True
    return isinstance(hint, str) and hint.startswith(("ClassVar", "typing.ClassVar"))


def _composite_shape(cls: type) -> CompositeShape:
    hints = _type_hints(cls)
    members: dict[str, MemberDescriptor] = {}
    frozen = False

    if issubclass(cls, BaseModel):
        model = "pydantic"
        frozen = bool(cls.model_config.get("frozen", False))
        for name, info in cls.model_fields.items():
            # pydantic has already resolved the annotation and split off its metadata
            hint = info.annotation
            if info.metadata:
                hint = Annotated[(hint, *info.metadata)]
            members[name] = MemberDescriptor(
                name=name,
                hint=hint,
                optional=is_optional(hint),
                required=info.is_required(),
            )
    elif dataclasses.is_dataclass(cls):
        model = "dataclass"
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        for f in dataclasses.fields(cls):
            hint = hints.get(f.name, f.type)
            members[f.name] = MemberDescriptor(
                name=f.name,
                hint=hint,
                optional=is_optional(hint),
                required=f.init
                and f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING,
            )
    else:
        model = "plain"
        for name, hint in hints.items():
            if name.startswith("_") or _is_classvar(hint):
                continue
            members[name] = MemberDescriptor(name=name, hint=hint, optional=is_optional(hint))
        for name, param in _init_parameters(cls):
            hint = members[name].hint if name in members else param.annotation
            members[name] = MemberDescriptor(
                name=name,
                hint=hint,
                optional=is_optional(hint),
                required=param.default is inspect.Parameter.empty,
            )

    for name, prop in _properties(cls):
        if name in members:
            continue
        hint = _type_hints(prop.fget).get("return", Any) if prop.fget else Any
        members[name] = MemberDescriptor(
            name=name,
            hint=hint,
            readable=prop.fget is not None,
            writable=prop.fset is not None,
            optional=is_optional(hint),
        )

    return CompositeShape(
        hint=cls,
        python_type=cls,
        members=tuple(members.values()),
        model=model,  # type: ignore[arg-type]
        frozen=frozen,
    )


def _init_parameters(cls: type) -> list[tuple[str, inspect.Parameter]]:
    """Named ``__init__`` parameters of a plain class, annotations resolved."""
    if cls.__init__ is object.__init__:  # type: ignore[misc]
        return []
    try:
        signature = inspect.signature(cls.__init__)  # type: ignore[misc]
    except (ValueError, TypeError):
        return []
    resolved = _type_hints(cls.__init__)  # type: ignore[misc]

    params: list[tuple[str, inspect.Parameter]] = []
    for name, param in signature.parameters.items():
        if name == "self" or name.startswith("_"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = resolved.get(name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = Any
        params.append((name, param.replace(annotation=annotation)))
    return params


def _properties(cls: type) -> list[tuple[str, property]]:
    found: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass is BaseModel:
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_"):
                found[name] = attr
    return list(found.items())
