"""Unit tests for collection reconstruction."""

from __future__ import annotations

import collections
import collections.abc as cabc
import queue
from typing import Any, NamedTuple

import pytest

from graph_mapper.core.exceptions import UnsupportedShapeError
from graph_mapper.mapping.containers import rebuild
from graph_mapper.mapping.shapes import describe


class Pair(NamedTuple):
    left: int
    right: str


class Bag:
    """Iterable with a default constructor and add()."""

    def __init__(self) -> None:
        self.items: list[Any] = []

    def __iter__(self):
        return iter(self.items)

    def add(self, item: Any) -> None:
        self.items.append(item)


class Batch:
    """Iterable built from a whole sequence."""

    def __init__(self, items: list[Any]) -> None:
        self.items = list(items)

    def __iter__(self):
        return iter(self.items)


class Stream:
    """Iterable with no usable construction strategy."""

    def __init__(self, source: Any, chunk_size: int) -> None:
        self.source = source
        self.chunk_size = chunk_size

    def __iter__(self):
        return iter(())


class TestSequences:
    def test_list_keeps_order_and_none(self) -> None:
        assert rebuild([1, None, 2], describe(list[int])) == [1, None, 2]

    def test_deque(self) -> None:
        result = rebuild([1, 2], describe(collections.deque))
        assert isinstance(result, collections.deque)
        assert list(result) == [1, 2]

    def test_abstract_sequence_becomes_list(self) -> None:
        result = rebuild([1, 2], describe(cabc.Sequence[int]))
        assert result == [1, 2]
        assert type(result) is list

    def test_iterable_becomes_list(self) -> None:
        assert rebuild(iter([3, 4]), describe(cabc.Iterable[int])) == [3, 4]


class TestArrays:
    def test_tuple(self) -> None:
        assert rebuild([1, 2, 3], describe(tuple[int, ...])) == (1, 2, 3)

    def test_named_tuple(self) -> None:
        result = rebuild([1, "a"], describe(Pair))
        assert result == Pair(1, "a")
        assert isinstance(result, Pair)


class TestSets:
    def test_set_deduplicates(self) -> None:
        result = rebuild([1, 1, 2], describe(set[int]))
        assert result == {1, 2}
        assert len(result) == 2

    def test_frozenset(self) -> None:
        result = rebuild([1, 2], describe(frozenset[int]))
        assert result == frozenset({1, 2})
        assert isinstance(result, frozenset)

    def test_unhashable_elements(self) -> None:
        with pytest.raises(UnsupportedShapeError):
            rebuild([[1]], describe(set))


class TestQueues:
    def test_lifo_queue_yields_input_order(self) -> None:
        result = rebuild([1, 2, 3], describe(queue.LifoQueue))
        assert [result.get_nowait() for _ in range(3)] == [1, 2, 3]

    def test_fifo_queue_yields_input_order(self) -> None:
        result = rebuild([1, 2, 3], describe(queue.Queue))
        assert [result.get_nowait() for _ in range(3)] == [1, 2, 3]

    def test_simple_queue(self) -> None:
        result = rebuild(["a", "b"], describe(queue.SimpleQueue))
        assert [result.get_nowait(), result.get_nowait()] == ["a", "b"]


class TestMappings:
    def test_dict_from_pairs(self) -> None:
        assert rebuild([("a", 1), ("b", 2)], describe(dict[str, int])) == {"a": 1, "b": 2}

    def test_ordered_dict(self) -> None:
        result = rebuild([("b", 2), ("a", 1)], describe(collections.OrderedDict))
        assert isinstance(result, collections.OrderedDict)
        assert list(result) == ["b", "a"]

    def test_defaultdict_has_no_factory(self) -> None:
        result = rebuild([("a", 1)], describe(collections.defaultdict))
        assert result.default_factory is None
        assert result["a"] == 1

    def test_abstract_mapping_becomes_dict(self) -> None:
        result = rebuild([("a", 1)], describe(cabc.Mapping[str, int]))
        assert type(result) is dict


class TestFallbackChain:
    def test_default_constructor_with_add(self) -> None:
        result = rebuild([1, 2], describe(Bag))
        assert isinstance(result, Bag)
        assert result.items == [1, 2]

    def test_sequence_constructor(self) -> None:
        result = rebuild([1, 2], describe(Batch))
        assert isinstance(result, Batch)
        assert result.items == [1, 2]

    def test_no_strategy(self) -> None:
        with pytest.raises(UnsupportedShapeError, match="Stream"):
            rebuild([1], describe(Stream))

    def test_non_collection_shape(self) -> None:
        with pytest.raises(UnsupportedShapeError):
            rebuild([1], describe(int))
