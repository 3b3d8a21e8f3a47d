"""Central configuration for the animation engine."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Union


# How much the time moves on forward()/back() without an explicit step. During
# play() it doubles as the frame interval.
DEFAULT_TIMESTEP_MS = 100.0

# Author rules are written in seconds.
DEFAULT_TIME_UNIT_MS = 1000.0


@dataclass
class AnimationConfig:
    """Engine configuration assembled from keyword overrides and defaults."""

    # Timing
    timestep: float = DEFAULT_TIMESTEP_MS
    time_unit_ms: float = DEFAULT_TIME_UNIT_MS

    # Capture computed styles of every animated property on define()
    snapshot_initial_styles: bool = False

    def __post_init__(self) -> None:
        if self.timestep <= 0:
            raise ValueError(f"timestep must be positive (got {self.timestep!r})")
        if self.time_unit_ms <= 0:
            raise ValueError(
                f"time_unit_ms must be positive (got {self.time_unit_ms!r})"
            )
        self.timestep = float(self.timestep)
        self.time_unit_ms = float(self.time_unit_ms)

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]]) -> "AnimationConfig":
        """Merge a partial mapping of overrides with the defaults."""
        known = {f.name for f in fields(cls)}
        unknown = set(overrides or {}) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**dict(overrides or {}))


def resolve_config(
    config: Union[AnimationConfig, Mapping[str, Any], None],
) -> AnimationConfig:
    """Accept a config object, a mapping of overrides, or nothing."""
    if isinstance(config, AnimationConfig):
        return config
    return AnimationConfig.from_overrides(config)
