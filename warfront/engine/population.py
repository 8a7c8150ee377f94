"""Phase 7: Overpopulation culling."""

import math
from dataclasses import dataclass
from typing import List

from ..models.game import Game
from .graph import RegionGraph


@dataclass
class CullEvent:
    """Units lost to overcrowding in one region."""

    region: int
    player: str
    removed: int


def cull_overpopulation(game: Game, graph: RegionGraph) -> List[CullEvent]:
    """Execute Phase 7: Overpopulation Culling.

    A region above ``tile_capacity`` loses
    ``ceil((units - tile_capacity) / unit_coefficient)`` units, oldest first.
    Culling never empties a region.

    Args:
        game: Current game state
        graph: Region lookup for the game

    Returns:
        List of cull events
    """
    events = []
    capacity = game.config.tile_capacity

    for region in graph.occupied():
        excess = len(region.units) - capacity
        if excess <= 0:
            continue
        removed = math.ceil(excess / game.config.unit_coefficient)
        del region.units[:removed]
        events.append(CullEvent(region=region.id, player=region.player, removed=removed))

    return events
