"""Global mapping settings.

MappingSettings is a frozen Pydantic model. A Mapper holds one instance and
swaps it for a validated copy on reconfiguration, so every traversal reads a
single consistent snapshot.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MappingSettings(BaseModel):
    """Engine-wide mapping policy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    detect_cycles: bool = True
    collect_metrics: bool = True
    max_depth: int = Field(default=10, ge=1)
    propagate_nulls: bool = True
    strict_conversion: bool = False

    def with_overrides(self, **overrides: Any) -> MappingSettings:
        """Return a validated copy with the given fields replaced."""
        return MappingSettings.model_validate({**self.model_dump(), **overrides})

    @classmethod
    def performance(cls) -> MappingSettings:
        """Minimal bookkeeping, shallow depth, nulls become defaults."""
        return cls(detect_cycles=False, collect_metrics=False, max_depth=5, propagate_nulls=False)

    @classmethod
    def safety(cls) -> MappingSettings:
        """All guards on with a generous depth limit."""
        return cls(detect_cycles=True, collect_metrics=True, max_depth=20, propagate_nulls=True)

    @classmethod
    def debugging(cls) -> MappingSettings:
        """Defaults, spelled out; pair with DEBUG logging to see skipped members."""
        return cls(detect_cycles=True, collect_metrics=True, max_depth=10, propagate_nulls=True)
