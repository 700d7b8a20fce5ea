"""graph_mapper - best-effort object graph mapping for Python objects."""

from __future__ import annotations

from graph_mapper.core.context import TraversalContext
from graph_mapper.core.enums import ContainerKind, ShapeKind
from graph_mapper.core.exceptions import (
    CollectionToScalarError,
    ConversionError,
    GraphMapperError,
    MappingUsageError,
    ProfileConfigurationError,
    ScalarToCollectionError,
    UnknownMemberError,
    UnsupportedShapeError,
)
from graph_mapper.core.logging import configure_logging, get_logger
from graph_mapper.core.mapper import (
    Mapper,
    configure_default,
    deep_clone,
    get_default_mapper,
    map_to,
)
from graph_mapper.core.metrics import MappingMetrics, MemorySample, MetricsSnapshot
from graph_mapper.core.settings import MappingSettings
from graph_mapper.mapping.converter import ScalarConverter
from graph_mapper.mapping.profile import ProfileBuilder, ProfileModule, ProfileStore
from graph_mapper.mapping.protocol import ObjectMapper
from graph_mapper.mapping.shapes import classify, describe
from graph_mapper.mapping.types import (
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    # Mapper
    "Mapper",
    "ObjectMapper",
    "get_default_mapper",
    "configure_default",
    "map_to",
    "deep_clone",
    # Configuration
    "MappingSettings",
    "TraversalContext",
    # Profiles
    "ProfileBuilder",
    "ProfileStore",
    "ProfileModule",
    # Shapes and conversion
    "describe",
    "classify",
    "ScalarConverter",
    "ShapeKind",
    "ContainerKind",
    # Sized numerics
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    # Metrics
    "MappingMetrics",
    "MetricsSnapshot",
    "MemorySample",
    # Logging
    "configure_logging",
    "get_logger",
    # Exceptions
    "GraphMapperError",
    "MappingUsageError",
    "CollectionToScalarError",
    "ScalarToCollectionError",
    "UnsupportedShapeError",
    "ProfileConfigurationError",
    "UnknownMemberError",
    "ConversionError",
]
