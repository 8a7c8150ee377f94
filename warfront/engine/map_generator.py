"""Seeded grid map generation.

Produces the region list the engine expects from a map generator: ids as
list indices, opaque geometry, terrain and symmetric adjacency. Regions are
unit squares on a ``map_width`` x ``map_height`` grid connected to their
four orthogonal neighbors; terrain is drawn uniformly so that roughly a
fifth of the map is water.
"""

from typing import List

from ..models import Game, Region
from ..utils import GameConfig, GameRNG

TERRAIN_RANGE = (-0.25, 1.0)


def generate_regions(config: GameConfig, rng: GameRNG) -> List[Region]:
    """Generate the region list for a grid map.

    Args:
        config: Map dimensions
        rng: Seeded RNG used for terrain

    Returns:
        Regions in id order
    """
    width, height = config.map_width, config.map_height
    regions = []

    for y in range(height):
        for x in range(width):
            region_id = y * width + x
            connected = set()
            if x > 0:
                connected.add(region_id - 1)
            if x < width - 1:
                connected.add(region_id + 1)
            if y > 0:
                connected.add(region_id - width)
            if y < height - 1:
                connected.add(region_id + width)

            regions.append(
                Region(
                    id=region_id,
                    terrain=round(rng.uniform(*TERRAIN_RANGE), 4),
                    connected=frozenset(connected),
                    position=(x + 0.5, y + 0.5),
                    polygon=[(x, y), (x + 1, y), (x + 1, y + 1), (x, y + 1)],
                )
            )

    return regions


def generate_map(game_id: str, config: GameConfig | None = None) -> Game:
    """Create an empty game on a freshly generated map.

    Args:
        game_id: Identifier for the new game
        config: Game configuration (defaults to GameConfig())

    Returns:
        Game with regions populated and no players
    """
    config = config or GameConfig()
    rng = GameRNG(config.seed)
    regions = generate_regions(config, rng)
    return Game(id=game_id, config=config, regions=regions, rng=rng)
