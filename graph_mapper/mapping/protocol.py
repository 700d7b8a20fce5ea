"""Object mapper protocol.

Anything that maps object graphs implements this interface. Mapper is the
built-in implementation; code that only needs mapping should depend on the
protocol.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ObjectMapper(Protocol):
    """Base object mapper protocol."""

    def map(self, source: Any, destination_type: Any) -> Any:
        """Map a source into a freshly allocated destination of the given type."""
        ...

    def map_into(self, source: Any, destination: T) -> T:
        """Fill an existing destination from a source and return it."""
        ...

    def map_many(self, sources: Iterable[Any] | None, destination_type: Any) -> list[Any]:
        """Map every element of a sequence independently."""
        ...

    def clone(self, value: T) -> T:
        """Deep copy through the mapping pipeline."""
        ...
