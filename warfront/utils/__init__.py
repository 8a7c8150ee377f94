"""Utility functions and constants for Warfront."""

from .config import GameConfig
from .constants import (
    COMMAND_GRACE_SECONDS,
    MAP_HEIGHT,
    MAP_WIDTH,
    RNG_SEED_DEFAULT,
    STARTING_UNITS,
    TILE_CAPACITY,
    TURN_TIME_SECONDS,
    UNIT_COEFFICIENT,
    WATER_LEVEL,
)
from .rng import GameRNG
from .split import even_split

__all__ = [
    "COMMAND_GRACE_SECONDS",
    "MAP_HEIGHT",
    "MAP_WIDTH",
    "RNG_SEED_DEFAULT",
    "STARTING_UNITS",
    "TILE_CAPACITY",
    "TURN_TIME_SECONDS",
    "UNIT_COEFFICIENT",
    "WATER_LEVEL",
    "GameConfig",
    "GameRNG",
    "even_split",
]
