"""Mapping layer - shapes, conversion, collections, profiles and traversal."""

from __future__ import annotations

from graph_mapper.mapping.containers import rebuild
from graph_mapper.mapping.converter import ScalarConverter, default_value, parse_duration
from graph_mapper.mapping.engine import TraversalEngine
from graph_mapper.mapping.profile import (
    ConditionalRule,
    MappingProfile,
    MemberRule,
    ProfileBuilder,
    ProfileModule,
    ProfileStore,
)
from graph_mapper.mapping.protocol import ObjectMapper
from graph_mapper.mapping.shapes import (
    AnyShape,
    CompositeShape,
    ContainerShape,
    EnumShape,
    MemberDescriptor,
    PrimitiveShape,
    Shape,
    TemporalShape,
    TextShape,
    classify,
    describe,
    is_collection_value,
)

__all__ = [
    "TraversalEngine",
    "ObjectMapper",
    "ScalarConverter",
    "default_value",
    "parse_duration",
    "rebuild",
    "MappingProfile",
    "MemberRule",
    "ConditionalRule",
    "ProfileBuilder",
    "ProfileStore",
    "ProfileModule",
    "Shape",
    "AnyShape",
    "PrimitiveShape",
    "TextShape",
    "TemporalShape",
    "EnumShape",
    "ContainerShape",
    "CompositeShape",
    "MemberDescriptor",
    "describe",
    "classify",
    "is_collection_value",
]
