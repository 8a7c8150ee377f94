"""Construction progress and unit spawning.

Construction runs after Receive so a site that was attacked or changed
hands this turn can be left untouched. Spawning then adds one unit to
every finished, well-garrisoned region.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..models.game import Game
from ..models.scratch import TurnScratch
from .graph import RegionGraph
from .ledger import UnitLedger


@dataclass
class ConstructionEvent:
    """Progress made on one construction site.

    Attributes:
        region: Site region id
        builders: Players who contributed, in contribution order
        progress_before: Building value before this turn
        progress_after: Building value after this turn
        completed: Whether the site reached 1 this turn
        interrupted: Whether progress was discarded (site attacked or captured)
    """

    region: int
    builders: List[str]
    progress_before: float
    progress_after: float
    completed: bool
    interrupted: bool = False


@dataclass
class SpawnEvent:
    """A unit created at a finished building."""

    region: int
    player: Optional[str]
    unit: int


def commit_construction(
    game: Game, graph: RegionGraph, scratch: TurnScratch, captured: set
) -> List[ConstructionEvent]:
    """Apply the construction progress accumulated during Interaction.

    Progress is clamped to 1. A site that was attacked this turn, or that
    was captured during Receive, gains nothing.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch with build progress
        captured: Region ids whose owner changed this turn

    Returns:
        List of construction events
    """
    events = []
    for region_id in sorted(scratch):
        region_scratch = scratch[region_id]
        if region_scratch.build_progress <= 0:
            continue

        region = graph.get(region_id)
        before = region.building
        interrupted = region_scratch.attacked or region_id in captured
        if not interrupted:
            region.building = min(1.0, before + region_scratch.build_progress)

        events.append(
            ConstructionEvent(
                region=region_id,
                builders=list(region_scratch.builders),
                progress_before=before,
                progress_after=region.building,
                completed=before < 1.0 <= region.building,
                interrupted=interrupted,
            )
        )

    return events


def spawn_units(game: Game, graph: RegionGraph, ledger: UnitLedger) -> List[SpawnEvent]:
    """Execute Phase 6: Spawning.

    Every fully built region garrisoned by at least
    ``tile_capacity / unit_coefficient`` units gains one unit for its owner.

    Args:
        game: Current game state
        graph: Region lookup for the game
        ledger: Unit id issuer

    Returns:
        List of spawn events
    """
    events = []
    threshold = game.config.spawn_threshold

    for region in graph.occupied():
        if region.building >= 1 and len(region.units) >= threshold:
            (unit,) = ledger.spawn(region, region.player, 1)
            events.append(SpawnEvent(region=region.id, player=region.player, unit=unit))

    return events
