"""Turn-scoped scratch state used while resolving a turn.

None of this is stored on the Game: a fresh TurnScratch is built at the
start of each resolution and dropped afterwards.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

STAND = "stand"
MOVE = "move"
ATTACK = "attack"
BUILD = "build"


@dataclass
class Group:
    """A share of one region's units sent toward a single destination."""

    player: str
    origin: int
    destination: int
    units: List[int]
    build: bool = False  # Destination is a construction site planned by player
    disposition: str = STAND
    landing: Optional[int] = None  # Where the survivors end the turn

    @property
    def size(self) -> int:
        return len(self.units)


@dataclass
class RegionScratch:
    """Per-region accumulators for one resolution pass."""

    owner_before: Optional[str]
    groups: List[Group] = field(default_factory=list)
    attacked_by: List[int] = field(default_factory=list)  # Attacking unit ids
    inbound: List[Group] = field(default_factory=list)
    build_progress: float = 0.0
    builders: List[str] = field(default_factory=list)

    @property
    def attacked(self) -> bool:
        return bool(self.attacked_by)


class TurnScratch(Dict[int, RegionScratch]):
    """Region id -> RegionScratch for every region on the map."""

    @classmethod
    def for_regions(cls, regions) -> "TurnScratch":
        scratch = cls()
        for region in regions:
            scratch[region.id] = RegionScratch(owner_before=region.player)
        return scratch

    def attacked_regions(self) -> set:
        return {region_id for region_id, s in self.items() if s.attacked}
