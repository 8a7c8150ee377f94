"""Phases 2-3: Interaction and fatality calculation.

This module handles:
1. Deciding each group's disposition (attack, construct, move or stand)
2. Damage to attacked regions, spread evenly over the defending groups
3. Contests between different players arriving at the same region
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..models.game import Game
from ..models.scratch import ATTACK, BUILD, MOVE, STAND, Group, TurnScratch
from ..utils.split import even_split
from .graph import RegionGraph

logger = logging.getLogger(__name__)


@dataclass
class AttackEvent:
    """A group attacking an enemy-held region.

    Attributes:
        origin: Region the attackers stay in
        target: Region being attacked
        player: Attacking player
        units: Number of attacking units
    """

    origin: int
    target: int
    player: str
    units: int


@dataclass
class FatalityEvent:
    """Damage dealt to one attacked region.

    Attributes:
        region: Attacked region id
        attackers: Total attacking units from all sides
        damage: Units the defenders lose (before clamping to what they have)
        defenders: Defending units before damage
        survivors: Defending units left
        player_before: Defending player
        player_after: Defending player, or None if wiped out
    """

    region: int
    attackers: int
    damage: int
    defenders: int
    survivors: int
    player_before: Optional[str]
    player_after: Optional[str]

    @property
    def killed(self) -> int:
        return self.defenders - self.survivors


@dataclass
class ArrivalContest:
    """Different players' groups arriving at the same region.

    Attributes:
        region: Contested region id
        victor: Player with the largest arriving force
        victor_units: Size of that force before losses
        losses: Units the victor loses (size of the runner-up force)
        contenders: Player -> arriving units, in arrival order
    """

    region: int
    victor: str
    victor_units: int
    losses: int
    contenders: dict

    @property
    def casualties(self) -> int:
        """All units that die in the contest, victor and losers alike."""
        losers = sum(n for p, n in self.contenders.items() if p != self.victor)
        return losers + min(self.losses, self.victor_units)


def interact(game: Game, graph: RegionGraph, scratch: TurnScratch) -> List[AttackEvent]:
    """Execute Phase 2: Interaction.

    Every group gets exactly one disposition, by priority:
    1. Destination held by an enemy: attack. Its units join the
       destination's attackers and the group stays at its origin.
    2. Build group: construct. Progress ``size / tile_capacity`` is
       accumulated for the destination; the group stays at its origin.
    3. Otherwise: move to the destination (standing fast when it is the
       origin itself).

    Only scratch state is written, so every group sees the regions as they
    were at the start of the turn.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch holding the groups

    Returns:
        List of attack events
    """
    events = []
    capacity = game.config.tile_capacity

    for region_id in sorted(scratch):
        for group in scratch[region_id].groups:
            destination = graph.get(group.destination)

            if destination.units and destination.player != group.player:
                group.disposition = ATTACK
                group.landing = group.origin
                scratch[destination.id].attacked_by.extend(group.units)
                events.append(
                    AttackEvent(
                        origin=group.origin,
                        target=destination.id,
                        player=group.player,
                        units=group.size,
                    )
                )
            elif group.build:
                group.disposition = BUILD
                group.landing = group.origin
                target = scratch[destination.id]
                target.build_progress += group.size / capacity
                if group.player not in target.builders:
                    target.builders.append(group.player)
            else:
                group.disposition = STAND if group.destination == group.origin else MOVE
                group.landing = group.destination

    return events


def apply_fatalities(game: Game, graph: RegionGraph, scratch: TurnScratch) -> List[FatalityEvent]:
    """Execute Phase 3: Fatality Calculation.

    For each attacked region, ``damage = ceil(attackers / unit_coefficient)``
    is split evenly over the region's own groups, first groups taking the
    remainder. Each group loses its share from the front of its unit list.
    Survivors are left in the groups; the region itself is rebuilt during
    Receive.

    Args:
        game: Current game state
        graph: Region lookup for the game
        scratch: Turn scratch with attackers accumulated

    Returns:
        List of fatality events
    """
    events = []
    coefficient = game.config.unit_coefficient

    for region_id in sorted(scratch):
        region_scratch = scratch[region_id]
        if not region_scratch.attacked:
            continue

        region = graph.get(region_id)
        groups = region_scratch.groups
        attackers = len(region_scratch.attacked_by)
        damage = math.ceil(attackers / coefficient)
        defenders = sum(group.size for group in groups)

        if groups:
            for group, share in zip(groups, even_split(damage, len(groups))):
                del group.units[: min(share, group.size)]

        survivors = sum(group.size for group in groups)
        events.append(
            FatalityEvent(
                region=region_id,
                attackers=attackers,
                damage=damage,
                defenders=defenders,
                survivors=survivors,
                player_before=region.player,
                player_after=region.player if survivors else None,
            )
        )
        logger.debug(
            f"Region {region_id} attacked by {attackers}: damage {damage}, "
            f"{survivors} defenders survive"
        )

    return events


def resolve_contest(region_id: int, arrivals: dict) -> tuple[str, list[int], ArrivalContest]:
    """Settle a region reached by more than one player.

    Largest army wins and loses as many units as the second-largest army.
    On a tie for largest, the force that arrived first wins.

    Args:
        region_id: Contested region
        arrivals: Player -> merged unit ids, in arrival order (len >= 2)

    Returns:
        Tuple of (victor, victor's surviving units, contest event)
    """
    ordered = list(arrivals.items())
    victor, victor_units = max(ordered, key=lambda item: len(item[1]))
    runner_up = max(len(units) for player, units in ordered if player != victor)

    event = ArrivalContest(
        region=region_id,
        victor=victor,
        victor_units=len(victor_units),
        losses=runner_up,
        contenders={player: len(units) for player, units in ordered},
    )
    return victor, victor_units[runner_up:], event


def merge_arrivals(groups: List[Group]) -> dict:
    """Concatenate arriving groups per player, keeping arrival order."""
    merged: dict = {}
    for group in groups:
        merged.setdefault(group.player, []).extend(group.units)
    return merged
