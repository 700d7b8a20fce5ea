"""Unit tests for shape descriptors and classification."""

from __future__ import annotations

import collections
import collections.abc as cabc
import datetime as dt
import enum
import queue
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, NamedTuple, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict

from graph_mapper.core.enums import ContainerKind, ShapeKind
from graph_mapper.mapping.shapes import (
    AnyShape,
    CompositeShape,
    ContainerShape,
    EnumShape,
    PrimitiveShape,
    TemporalShape,
    TextShape,
    classify,
    describe,
    is_collection_value,
    is_optional,
)
from graph_mapper.mapping.types import Int32, UInt8


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Node:
    value: int = 0
    next: Node | None = None


@dataclass(frozen=True)
class Point:
    x: int
    y: int = 0


@dataclass
class Basket:
    items: list[str] = field(default_factory=list)


class Account(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    owner: str = ""


class Customer:
    nickname: str

    def __init__(self, name: str, tier: int = 1) -> None:
        self.name = name
        self.tier = tier
        self.nickname = ""

    @property
    def display(self) -> str:
        return f"{self.name} ({self.tier})"


class Token:
    def __init__(self) -> None:
        self._raw = "x"

    @property
    def raw(self) -> str:
        return self._raw


class Pair(NamedTuple):
    left: int
    right: str


class TestScalarShapes:
    def test_int(self) -> None:
        shape = describe(int)
        assert isinstance(shape, PrimitiveShape)
        assert shape.python_type is int
        assert shape.bounds is None
        assert shape.is_numeric

    def test_bool_is_not_numeric(self) -> None:
        shape = describe(bool)
        assert isinstance(shape, PrimitiveShape)
        assert not shape.is_numeric

    def test_sized_int_has_bounds(self) -> None:
        shape = describe(Int32)
        assert isinstance(shape, PrimitiveShape)
        assert shape.python_type is int
        assert shape.bounds is not None
        assert shape.bounds.contains(Decimal(-(2**31)))
        assert shape.bounds.contains(Decimal(2**31 - 1))
        assert not shape.bounds.contains(Decimal(2**31))

    def test_unsigned_bounds(self) -> None:
        shape = describe(UInt8)
        assert shape.bounds is not None  # type: ignore[attr-defined]
        assert not shape.bounds.contains(Decimal(-1))  # type: ignore[attr-defined]

    def test_text(self) -> None:
        assert isinstance(describe(str), TextShape)

    def test_temporal(self) -> None:
        shape = describe(dt.datetime)
        assert isinstance(shape, TemporalShape)
        assert shape.aware is None

    def test_aware_datetime_marker(self) -> None:
        shape = describe(AwareDatetime)
        assert isinstance(shape, TemporalShape)
        assert shape.python_type is dt.datetime
        assert shape.aware is True

    def test_enum(self) -> None:
        shape = describe(Color)
        assert isinstance(shape, EnumShape)
        assert shape.first_member is Color.RED

    def test_uuid_and_decimal_are_primitive(self) -> None:
        assert classify(uuid.UUID) is ShapeKind.PRIMITIVE
        assert classify(Decimal) is ShapeKind.PRIMITIVE

    def test_any_and_object(self) -> None:
        assert isinstance(describe(Any), AnyShape)
        assert isinstance(describe(object), AnyShape)


class TestOptional:
    def test_optional_marks_nullable(self) -> None:
        shape = describe(Optional[int])  # noqa: UP007
        assert isinstance(shape, PrimitiveShape)
        assert shape.nullable

    def test_pipe_union_with_none(self) -> None:
        shape = describe(str | None)
        assert isinstance(shape, TextShape)
        assert shape.nullable

    def test_multi_arm_union_is_any(self) -> None:
        assert isinstance(describe(int | str), AnyShape)

    def test_is_optional(self) -> None:
        assert is_optional(int | None)
        assert not is_optional(int)


class TestContainerShapes:
    def test_list(self) -> None:
        shape = describe(list[int])
        assert isinstance(shape, ContainerShape)
        assert shape.container_kind is ContainerKind.SEQUENCE
        assert shape.element_hint is int

    def test_variadic_tuple(self) -> None:
        shape = describe(tuple[int, ...])
        assert shape.container_kind is ContainerKind.ARRAY  # type: ignore[attr-defined]
        assert shape.hint_at(5) is int  # type: ignore[attr-defined]

    def test_fixed_tuple(self) -> None:
        shape = describe(tuple[int, str])
        assert shape.fixed_hints == (int, str)  # type: ignore[attr-defined]
        assert shape.hint_at(1) is str  # type: ignore[attr-defined]
        assert shape.hint_at(2) is Any  # type: ignore[attr-defined]

    def test_named_tuple(self) -> None:
        shape = describe(Pair)
        assert isinstance(shape, ContainerShape)
        assert shape.container_kind is ContainerKind.ARRAY
        assert shape.fixed_hints == (int, str)

    def test_dict(self) -> None:
        shape = describe(dict[str, int])
        assert shape.container_kind is ContainerKind.MAPPING  # type: ignore[attr-defined]
        assert shape.key_hint is str  # type: ignore[attr-defined]
        assert shape.element_hint is int  # type: ignore[attr-defined]

    def test_queues(self) -> None:
        assert describe(queue.LifoQueue).container_kind is ContainerKind.LIFO  # type: ignore[attr-defined]
        assert describe(queue.Queue).container_kind is ContainerKind.FIFO  # type: ignore[attr-defined]

    def test_sets(self) -> None:
        assert describe(set[int]).container_kind is ContainerKind.SET  # type: ignore[attr-defined]
        assert describe(frozenset).container_kind is ContainerKind.SET  # type: ignore[attr-defined]

    def test_deque_and_abstract_sequence(self) -> None:
        assert describe(collections.deque).container_kind is ContainerKind.SEQUENCE  # type: ignore[attr-defined]
        shape = describe(cabc.Sequence[int])
        assert shape.container_kind is ContainerKind.SEQUENCE  # type: ignore[attr-defined]

    def test_text_is_not_a_container(self) -> None:
        assert classify(str) is ShapeKind.TEXT
        assert classify(bytes) is ShapeKind.PRIMITIVE


class TestCompositeShapes:
    def test_dataclass_members(self) -> None:
        shape = describe(Point)
        assert isinstance(shape, CompositeShape)
        assert shape.model == "dataclass"
        assert shape.frozen
        assert shape.member_names == ["x", "y"]
        assert shape.member("x").required  # type: ignore[union-attr]
        assert not shape.member("y").required  # type: ignore[union-attr]

    def test_self_referential_dataclass(self) -> None:
        shape = describe(Node)
        assert isinstance(shape, CompositeShape)
        member = shape.member("next")
        assert member is not None
        assert member.optional
        nested = describe(member.hint)
        assert isinstance(nested, CompositeShape)
        assert nested.python_type is Node
        assert nested.nullable

    def test_pydantic_members(self) -> None:
        shape = describe(Account)
        assert isinstance(shape, CompositeShape)
        assert shape.model == "pydantic"
        assert shape.frozen
        assert shape.member_names == ["id", "owner"]
        assert shape.member("id").required  # type: ignore[union-attr]

    def test_plain_class_members(self) -> None:
        shape = describe(Customer)
        assert isinstance(shape, CompositeShape)
        assert shape.model == "plain"
        assert set(shape.member_names) == {"nickname", "name", "tier", "display"}
        display = shape.member("display")
        assert display is not None
        assert display.readable
        assert not display.writable

    def test_container_member_hint(self) -> None:
        shape = describe(Basket)
        member = shape.member("items")  # type: ignore[attr-defined]
        assert classify(member.hint) is ShapeKind.CONTAINER

    def test_class_without_writable_members_is_opaque(self) -> None:
        shape = describe(Token)
        assert isinstance(shape, PrimitiveShape)
        assert shape.python_type is Token

    def test_describe_is_cached(self) -> None:
        assert describe(Point) is describe(Point)


class TestIsCollectionValue:
    def test_collections(self) -> None:
        assert is_collection_value([1, 2])
        assert is_collection_value((1, 2))
        assert is_collection_value({1})
        assert is_collection_value(queue.Queue())

    def test_non_collections(self) -> None:
        assert not is_collection_value("abc")
        assert not is_collection_value(b"abc")
        assert not is_collection_value({"a": 1})
        assert not is_collection_value(Account(id=1))
        assert not is_collection_value(Point(1, 2))
        assert not is_collection_value(42)
