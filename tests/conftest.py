"""Shared test fixtures."""

from __future__ import annotations

import pytest

from graph_mapper.core.context import TraversalContext
from graph_mapper.core.mapper import Mapper
from graph_mapper.core.settings import MappingSettings
from graph_mapper.mapping.converter import ScalarConverter
from graph_mapper.mapping.engine import TraversalEngine
from graph_mapper.mapping.profile import ProfileStore


@pytest.fixture
def settings() -> MappingSettings:
    """Default mapping settings."""
    return MappingSettings()


@pytest.fixture
def mapper(settings: MappingSettings) -> Mapper:
    """Fresh mapper with its own profile store and metrics."""
    return Mapper(settings=settings)


@pytest.fixture
def converter() -> ScalarConverter:
    """Lenient scalar converter."""
    return ScalarConverter()


@pytest.fixture
def context() -> TraversalContext:
    return TraversalContext()


@pytest.fixture
def make_engine():
    """Build a TraversalEngine with setting overrides.

    Usage:
        engine = make_engine(max_depth=2)
    """

    def _make(profiles: ProfileStore | None = None, **overrides: object) -> TraversalEngine:
        return TraversalEngine(
            MappingSettings().with_overrides(**overrides),
            profiles if profiles is not None else ProfileStore(),
        )

    return _make
