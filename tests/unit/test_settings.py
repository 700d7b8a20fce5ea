"""Unit tests for MappingSettings and TraversalContext."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from graph_mapper.core.context import TraversalContext
from graph_mapper.core.settings import MappingSettings


class TestMappingSettings:
    def test_defaults(self) -> None:
        settings = MappingSettings()
        assert settings.detect_cycles is True
        assert settings.collect_metrics is True
        assert settings.max_depth == 10
        assert settings.propagate_nulls is True
        assert settings.strict_conversion is False

    def test_frozen(self) -> None:
        settings = MappingSettings()
        with pytest.raises(ValidationError):
            settings.max_depth = 3  # type: ignore[misc]

    def test_max_depth_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            MappingSettings(max_depth=0)

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MappingSettings(max_recursion=3)  # type: ignore[call-arg]

    def test_with_overrides_returns_copy(self) -> None:
        base = MappingSettings()
        changed = base.with_overrides(max_depth=3, propagate_nulls=False)
        assert changed.max_depth == 3
        assert changed.propagate_nulls is False
        assert base.max_depth == 10

    def test_with_overrides_validates(self) -> None:
        with pytest.raises(ValidationError):
            MappingSettings().with_overrides(max_depth=-1)

    def test_performance_preset(self) -> None:
        settings = MappingSettings.performance()
        assert settings.detect_cycles is False
        assert settings.collect_metrics is False
        assert settings.max_depth == 5
        assert settings.propagate_nulls is False

    def test_safety_preset(self) -> None:
        settings = MappingSettings.safety()
        assert settings.detect_cycles is True
        assert settings.max_depth == 20

    def test_debugging_preset(self) -> None:
        assert MappingSettings.debugging() == MappingSettings()


class TestTraversalContext:
    def test_enter_tracks_source(self) -> None:
        context = TraversalContext()
        source = object()
        with context.enter(source, max_depth=2, track=True) as entered:
            assert entered
            assert context.is_visiting(source)
            assert context.depth == 1
        assert not context.is_visiting(source)
        assert context.depth == 0

    def test_enter_without_tracking(self) -> None:
        context = TraversalContext()
        source = object()
        with context.enter(source, max_depth=2, track=False) as entered:
            assert entered
            assert not context.is_visiting(source)

    def test_enter_beyond_depth(self) -> None:
        context = TraversalContext()
        outer, inner = object(), object()
        with context.enter(outer, max_depth=1, track=True):
            with context.enter(inner, max_depth=1, track=True) as entered:
                assert not entered
                assert not context.is_visiting(inner)
                assert context.depth == 1
        assert context.depth == 0
        assert context.visiting == set()

    def test_state_restored_on_error(self) -> None:
        context = TraversalContext()
        source = object()
        with pytest.raises(RuntimeError):
            with context.enter(source, max_depth=5, track=True):
                raise RuntimeError("boom")
        assert context.depth == 0
        assert context.visiting == set()

    def test_open_container_guard(self) -> None:
        context = TraversalContext()
        items: list[int] = []
        with context.open_container(items) as opened:
            assert opened
            with context.open_container(items) as reopened:
                assert not reopened
        assert context.open_containers == set()

    def test_cancel(self) -> None:
        context = TraversalContext()
        context.cancel("shutdown")
        assert context.cancelled
        assert context.cancellation_reason == "shutdown"
