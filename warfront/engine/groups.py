"""Phase 1: Group formation.

Each occupied region's units are split into one group per staged target,
as evenly as possible with the larger groups first. A region without a
staged command stands fast: one group targeting itself.
"""

from ..models.game import Game
from ..models.scratch import Group, TurnScratch
from ..utils.split import even_split
from .graph import RegionGraph


def form_groups(game: Game, graph: RegionGraph, scratch: TurnScratch) -> int:
    """Execute Phase 1: Group Formation.

    Units are handed out in list order, so the first target gets the
    oldest units. Commands left over from a previous owner of the origin
    (e.g. after a player was removed) are ignored.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch to fill with groups

    Returns:
        Number of groups formed
    """
    formed = 0
    for region in graph.occupied():
        command = game.moves.get(region.id)
        if command is not None and command.player == region.player:
            targets = command.targets
        else:
            targets = (region.id,)

        offset = 0
        for target, size in zip(targets, even_split(len(region.units), len(targets))):
            planners = game.plans.get(target, ())
            scratch[region.id].groups.append(
                Group(
                    player=region.player,
                    origin=region.id,
                    destination=target,
                    units=region.units[offset : offset + size],
                    build=target != region.id and region.player in planners,
                )
            )
            offset += size
            formed += 1

    return formed
