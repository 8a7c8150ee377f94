"""Phases 4-5: Movement and receive.

This module handles:
1. Sending every group's survivors to where it ends the turn
2. Emptying the origin regions
3. Merging arrivals per player and settling contested regions
"""

import logging
from dataclasses import dataclass
from typing import List

from ..models.game import Game
from ..models.scratch import TurnScratch
from .combat import ArrivalContest, merge_arrivals, resolve_contest
from .graph import RegionGraph

logger = logging.getLogger(__name__)


@dataclass
class ReceiveResult:
    """Results from Phase 5.

    Attributes:
        contests: Contested arrivals and how they were settled
        captured: Regions that ended the phase with a different owner
    """

    contests: List[ArrivalContest]
    captured: set


def move_groups(game: Game, graph: RegionGraph, scratch: TurnScratch) -> int:
    """Execute Phase 4: Movement.

    Groups that attacked or built land back at their origin; the rest land
    at their destination. Each region is emptied once its groups have been
    queued, and refilled in Phase 5.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch holding the groups

    Returns:
        Number of units sent to another region
    """
    relocated = 0
    for region_id in sorted(scratch):
        region_scratch = scratch[region_id]
        if not region_scratch.groups:
            continue

        for group in region_scratch.groups:
            if not group.units:
                continue
            scratch[group.landing].inbound.append(group)
            if group.landing != group.origin:
                relocated += group.size

        region_scratch.groups = []
        graph.get(region_id).clear()

    return relocated


def receive_groups(game: Game, graph: RegionGraph, scratch: TurnScratch) -> ReceiveResult:
    """Execute Phase 5: Receive.

    Arriving groups of the same player are concatenated in arrival order.
    When several players arrive, the largest army takes the region and
    loses as many units as the next-largest army; its oldest units die
    first. Regions receiving nothing stay empty and ownerless.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch with inbound groups

    Returns:
        ReceiveResult with contest events and captured region ids
    """
    contests = []
    captured = set()

    for region_id in sorted(scratch):
        region_scratch = scratch[region_id]
        region = graph.get(region_id)

        if region_scratch.inbound:
            arrivals = merge_arrivals(region_scratch.inbound)
            if len(arrivals) == 1:
                (player, units), = arrivals.items()
            else:
                player, units, contest = resolve_contest(region_id, arrivals)
                contests.append(contest)
                logger.debug(
                    f"Region {region_id} contested by {contest.contenders}: "
                    f"{player} holds with {len(units)}"
                )

            if units:
                region.units = units
                region.player = player
            region_scratch.inbound = []

        if region.player is not None and region.player != region_scratch.owner_before:
            captured.add(region_id)

    return ReceiveResult(contests=contests, captured=captured)
