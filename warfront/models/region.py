"""Region data model."""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional

from ..utils.constants import WATER_LEVEL


@dataclass
class Region:
    """A node of the map graph: the unit of ownership, combat and construction.

    Geometry (``position``, ``polygon``) and ``connected`` are supplied by the
    map generator and never changed by the engine. ``units`` and ``player``
    move together: a region is owned exactly when it holds units.
    """

    id: int  # Stable index into Game.regions
    terrain: float  # Below WATER_LEVEL is impassable
    connected: FrozenSet[int] = frozenset()  # Neighbor region ids
    position: Any = None  # Opaque to the engine
    polygon: Any = None  # Opaque to the engine
    units: List[int] = field(default_factory=list)  # Unit ids, oldest first
    player: Optional[str] = None  # Owner, None iff no units
    building: float = 0.0  # Construction progress in [0, 1]

    def __post_init__(self):
        """Validate region data after initialization."""
        if self.id < 0:
            raise ValueError(f"Invalid id: {self.id} (must be >= 0)")
        self.connected = frozenset(self.connected)
        if self.id in self.connected:
            raise ValueError(f"Region {self.id} cannot be connected to itself")
        if not (0.0 <= self.building <= 1.0):
            raise ValueError(f"Invalid building: {self.building} (must be 0-1)")
        if bool(self.units) != (self.player is not None):
            raise ValueError(
                f"Region {self.id}: player must be set exactly when units are present "
                f"(units={len(self.units)}, player={self.player})"
            )

    @property
    def passable(self) -> bool:
        """Whether units may enter this region."""
        return self.terrain >= WATER_LEVEL

    @property
    def occupied(self) -> bool:
        return bool(self.units)

    def clear(self) -> None:
        """Remove all units; the region becomes ownerless."""
        self.units = []
        self.player = None
