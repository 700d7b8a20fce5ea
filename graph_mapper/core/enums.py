"""Shape and container enumerations."""

from __future__ import annotations

from enum import Enum


class ShapeKind(Enum):
    """How the engine treats values of a given type."""

    ANY = "any"
    PRIMITIVE = "primitive"
    TEXT = "text"
    TEMPORAL = "temporal"
    ENUMERATION = "enumeration"
    CONTAINER = "container"
    COMPOSITE = "composite"


class ContainerKind(Enum):
    """Reconstruction strategy for a container shape."""

    ARRAY = "array"
    SEQUENCE = "sequence"
    SET = "set"
    LIFO = "lifo"
    FIFO = "fifo"
    MAPPING = "mapping"
    OTHER = "other"
