"""graph_mapper exception hierarchy.

Only usage and configuration errors leave a mapping call. Value-level
conversion failures become default values unless strict conversion is on.
"""

from __future__ import annotations


class GraphMapperError(Exception):
    """Base exception for all graph_mapper errors."""


# --- Usage ---


class MappingUsageError(GraphMapperError):
    """Base for errors caused by asking for an impossible mapping."""


class CollectionToScalarError(MappingUsageError):
    """Raised when a collection source is mapped to a non-collection shape."""

    def __init__(self, destination: str) -> None:
        self.destination = destination
        super().__init__(
            f"Cannot map a collection to non-collection type {destination}. "
            f"Map to list[{destination}] instead, or map the items individually."
        )


class ScalarToCollectionError(MappingUsageError):
    """Raised when a single object is mapped to a collection shape.

    Mappings count as single objects unless the destination is itself a
    mapping type.
    """

    def __init__(self, destination: str, *, from_mapping: bool = False) -> None:
        self.destination = destination
        self.from_mapping = from_mapping
        if from_mapping:
            message = (
                f"Cannot map a mapping to non-mapping collection type {destination}. "
                f"Mappings are read by key as one object; map to a dict type, "
                f"or pass .items() or .values() as the source."
            )
        else:
            message = (
                f"Cannot map a single object to collection type {destination}. "
                f"The source must be a collection."
            )
        super().__init__(message)


class UnsupportedShapeError(MappingUsageError):
    """Raised when no construction strategy exists for a destination container."""

    def __init__(self, destination: str, detail: str) -> None:
        self.destination = destination
        super().__init__(f"Collection type {destination} is not supported: {detail}")


# --- Configuration ---


class ProfileConfigurationError(GraphMapperError):
    """Raised when a profile is built incorrectly."""


class UnknownMemberError(ProfileConfigurationError):
    """Raised when a profile rule names a member the destination does not have."""

    def __init__(self, destination: str, member: str, detail: str = "no such member") -> None:
        self.destination = destination
        self.member = member
        super().__init__(f"{destination}.{member}: {detail}")


# --- Conversion ---


class ConversionError(GraphMapperError):
    """Raised by the scalar converter in strict mode instead of defaulting."""

    def __init__(self, value: object, target: str, detail: str = "") -> None:
        self.value = value
        self.target = target
        message = f"Cannot convert {type(value).__name__} value {value!r} to {target}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
