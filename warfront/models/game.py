"""Game state container."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..utils import GameConfig, GameRNG
from .command import Command
from .player import Player
from .region import Region


@dataclass
class Game:
    """Main game state container.

    Holds the region list, connected players, the per-turn staging area and
    the unit id counter. Region ids are indices into ``regions``.
    """

    id: str
    config: GameConfig = field(default_factory=GameConfig)
    regions: List[Region] = field(default_factory=list)
    players: Dict[str, Player] = field(default_factory=dict)
    turn: int = 0  # Number of resolved turns
    next_unit_id: int = 1  # Next id UnitLedger hands out
    waiting_on: Set[str] = field(default_factory=set)  # Players yet to submit this turn
    moves: Dict[int, Command] = field(default_factory=dict)  # Origin id -> movement command
    plans: Dict[int, Set[str]] = field(default_factory=dict)  # Site id -> planning players
    command_errors: Dict[str, List[str]] = field(
        default_factory=dict
    )  # Player id -> reasons commands were dropped this turn
    attacked_last_turn: Set[int] = field(default_factory=set)
    last_report: Optional[Any] = None  # TurnReport from the last resolution
    rng: Optional[GameRNG] = None

    def __post_init__(self):
        """Initialize RNG and validate region ids."""
        if self.rng is None:
            self.rng = GameRNG(self.config.seed)
        if self.turn < 0:
            raise ValueError(f"Invalid turn: {self.turn} (must be >= 0)")
        for index, region in enumerate(self.regions):
            if region.id != index:
                raise ValueError(f"Region at index {index} has id {region.id}")

    def owned_regions(self, player_id: str) -> List[Region]:
        return [region for region in self.regions if region.player == player_id]

    def total_units(self) -> int:
        return sum(len(region.units) for region in self.regions)
