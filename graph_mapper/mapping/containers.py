"""Collection reconstruction.

rebuild() turns an ordered sequence of already-mapped elements into the
concrete container a ContainerShape asks for. Input order is preserved in
removal order and None entries stay in place.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any

from graph_mapper.core.enums import ContainerKind
from graph_mapper.core.exceptions import UnsupportedShapeError
from graph_mapper.mapping.shapes import ContainerShape, Shape

# tried in order on a default-constructed instance
_ADD_METHODS = ("append", "add", "put", "push")

# concrete stand-ins for abstract targets, in preference order
_ABSTRACT_STAND_INS: tuple[type, ...] = (list, set, dict)


def _name(shape: Shape) -> str:
    return getattr(shape.hint, "__name__", repr(shape.hint))


def _concrete(cls: type | None, stand_in: type) -> type:
    if cls is None or inspect.isabstract(cls):
        return stand_in
    return cls


def rebuild(elements: Iterable[Any], shape: Shape) -> Any:
    """Build the container described by ``shape`` holding ``elements`` in order.

    For mapping shapes ``elements`` are ``(key, value)`` pairs.

    Raises:
        UnsupportedShapeError: If ``shape`` is not a container shape or no
            construction strategy works for it.
    """
    if not isinstance(shape, ContainerShape):
        raise UnsupportedShapeError(_name(shape), "not a collection shape")

    items = list(elements)
    kind = shape.container_kind
    cls = shape.python_type

    if kind is ContainerKind.ARRAY:
        return _build_array(items, cls)
    if kind is ContainerKind.SEQUENCE:
        return _build_appended(items, _concrete(cls, list))
    if kind is ContainerKind.SET:
        return _build_set(items, _concrete(cls, set), shape)
    if kind is ContainerKind.LIFO:
        stack = _concrete(cls, list)()
        # last in, first out: push backwards so get() yields input order
        for item in reversed(items):
            stack.put(item)
        return stack
    if kind is ContainerKind.FIFO:
        fifo = _concrete(cls, list)()
        for item in items:
            fifo.put(item)
        return fifo
    if kind is ContainerKind.MAPPING:
        return _build_mapping(items, _concrete(cls, dict))
    return _build_other(items, cls, shape)


def _build_array(items: list[Any], cls: type | None) -> Any:
    if cls is None or cls is tuple:
        return tuple(items)
    if hasattr(cls, "_make"):
        return cls._make(items)
    return cls(items)


def _build_appended(items: list[Any], cls: type) -> Any:
    result = cls()
    for item in items:
        result.append(item)
    return result


def _build_set(items: list[Any], cls: type, shape: ContainerShape) -> Any:
    try:
        if issubclass(cls, frozenset):
            return cls(items)
        result = cls()
        for item in items:
            result.add(item)
        return result
    except TypeError as e:
        raise UnsupportedShapeError(_name(shape), f"elements are not hashable ({e})") from e


def _build_mapping(pairs: list[Any], cls: type) -> Any:
    if not hasattr(cls, "__setitem__"):
        return cls(dict(pairs))
    result = cls()
    for key, value in pairs:
        result[key] = value
    return result


def _build_other(items: list[Any], cls: type | None, shape: ContainerShape) -> Any:
    """Fallback chain for containers with no dedicated strategy.

    1. A constructor accepting the whole sequence.
    2. A default constructor plus an add-like method.
    3. Abstract target: the first of list/set/dict that satisfies it.
    4. A target that a plain list satisfies: list.
    """
    if cls is None:
        return items

    try:
        return cls(items)
    except (TypeError, ValueError):
        pass

    try:
        instance = cls()
    except (TypeError, ValueError):
        instance = None
    if instance is not None:
        for method_name in _ADD_METHODS:
            add = getattr(instance, method_name, None)
            if callable(add):
                for item in items:
                    add(item)
                return instance

    if inspect.isabstract(cls):
        for stand_in in _ABSTRACT_STAND_INS:
            if issubclass(stand_in, cls):
                if stand_in is set:
                    return _build_set(items, set, shape)
                if stand_in is dict:
                    return _build_mapping(items, dict)
                return list(items)

    if issubclass(list, cls):
        return list(items)

    raise UnsupportedShapeError(
        _name(shape),
        "no constructor accepting a sequence, no default constructor with "
        f"one of {', '.join(_ADD_METHODS)}, and not an abstract collection",
    )
