"""Per-game configuration with environment overrides."""

import os
from dataclasses import dataclass

from .constants import (
    COMMAND_GRACE_SECONDS,
    MAP_HEIGHT,
    MAP_WIDTH,
    RNG_SEED_DEFAULT,
    STARTING_UNITS,
    TILE_CAPACITY,
    TURN_TIME_SECONDS,
    UNIT_COEFFICIENT,
)

ENV_PREFIX = "WARFRONT_"


@dataclass(frozen=True)
class GameConfig:
    """Tunable values for one game.

    Defaults come from ``constants``; ``from_env`` lets a deployment
    override them through ``WARFRONT_*`` variables.
    """

    tile_capacity: int = TILE_CAPACITY
    unit_coefficient: int = UNIT_COEFFICIENT
    starting_units: int = STARTING_UNITS
    turn_time: float = TURN_TIME_SECONDS
    command_grace: float = COMMAND_GRACE_SECONDS
    map_width: int = MAP_WIDTH
    map_height: int = MAP_HEIGHT
    seed: int = RNG_SEED_DEFAULT

    def __post_init__(self):
        """Validate configuration values."""
        if self.tile_capacity <= 0:
            raise ValueError(f"Invalid tile_capacity: {self.tile_capacity} (must be > 0)")
        if self.unit_coefficient <= 0:
            raise ValueError(
                f"Invalid unit_coefficient: {self.unit_coefficient} (must be > 0)"
            )
        if not (0 < self.starting_units <= self.tile_capacity):
            raise ValueError(
                f"Invalid starting_units: {self.starting_units} "
                f"(must be 1-{self.tile_capacity})"
            )
        if self.turn_time <= 0:
            raise ValueError(f"Invalid turn_time: {self.turn_time} (must be > 0)")
        if self.command_grace < 0:
            raise ValueError(f"Invalid command_grace: {self.command_grace} (must be >= 0)")
        if self.map_width <= 0 or self.map_height <= 0:
            raise ValueError(
                f"Invalid map size: {self.map_width}x{self.map_height} (must be positive)"
            )

    @property
    def spawn_threshold(self) -> float:
        """Minimum garrison for a finished building to spawn a unit."""
        return self.tile_capacity / self.unit_coefficient

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "GameConfig":
        """Build a config from ``WARFRONT_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests)
            **overrides: Explicit values that win over the environment

        Returns:
            New GameConfig
        """
        environ = os.environ if environ is None else environ
        casts = {
            "tile_capacity": int,
            "unit_coefficient": int,
            "starting_units": int,
            "turn_time": float,
            "command_grace": float,
            "map_width": int,
            "map_height": int,
            "seed": int,
        }
        values = {}
        for name, cast in casts.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                try:
                    values[name] = cast(raw)
                except ValueError as e:
                    raise ValueError(f"Invalid {ENV_PREFIX}{name.upper()}: {raw!r}") from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
