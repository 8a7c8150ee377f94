"""Turn resolution pipeline.

This module runs the resolution phases in a fixed order:
1. Group Formation
2. Interaction (attack / construct / move)
3. Fatality Calculation
4. Movement
5. Receive
   Construction (progress committed for sites not attacked or captured)
6. Spawning
7. Overpopulation Culling

Phases 1-3 only write turn scratch, so each region's computation sees the
regions as they were when the turn closed. Regions are rewritten from
Phase 4 on. Staged commands are cleared and the turn counter incremented
once Phase 7 has run.

Architecture:
Each phase is an independent method; ``resolve`` composes them. Nothing in
here depends on dict or set iteration order: regions are visited in id
order and groups in target submission order.
"""

import logging
from dataclasses import dataclass, field

from ..models.game import Game
from ..models.scratch import TurnScratch
from .combat import AttackEvent, ArrivalContest, FatalityEvent, apply_fatalities, interact
from .construction import ConstructionEvent, SpawnEvent, commit_construction, spawn_units
from .graph import RegionGraph
from .groups import form_groups
from .ledger import UnitLedger
from .movement import ReceiveResult, move_groups, receive_groups
from .population import CullEvent, cull_overpopulation

logger = logging.getLogger(__name__)


@dataclass
class TurnReport:
    """Everything that happened while resolving one turn.

    ``units_before - fatalities - contest_losses - culled + spawned`` always
    equals ``units_after``.
    """

    turn: int  # Turn number that was resolved
    units_before: int = 0
    units_after: int = 0
    attacks: list[AttackEvent] = field(default_factory=list)
    fatalities: list[FatalityEvent] = field(default_factory=list)
    contests: list[ArrivalContest] = field(default_factory=list)
    construction: list[ConstructionEvent] = field(default_factory=list)
    spawns: list[SpawnEvent] = field(default_factory=list)
    culls: list[CullEvent] = field(default_factory=list)
    attacked_regions: set = field(default_factory=set)
    captured_regions: set = field(default_factory=set)

    @property
    def killed(self) -> int:
        return sum(event.killed for event in self.fatalities)

    @property
    def contest_losses(self) -> int:
        return sum(event.casualties for event in self.contests)

    @property
    def culled(self) -> int:
        return sum(event.removed for event in self.culls)

    @property
    def spawned(self) -> int:
        return len(self.spawns)

    def to_dict(self) -> dict:
        """Serialize for broadcast."""
        return {
            "turn": self.turn,
            "attacks": [
                {"origin": e.origin, "target": e.target, "player": e.player, "units": e.units}
                for e in self.attacks
            ],
            "fatalities": [
                {
                    "region": e.region,
                    "attackers": e.attackers,
                    "damage": e.damage,
                    "defenders": e.defenders,
                    "survivors": e.survivors,
                    "playerBefore": e.player_before,
                    "playerAfter": e.player_after,
                }
                for e in self.fatalities
            ],
            "contests": [
                {
                    "region": e.region,
                    "victor": e.victor,
                    "victorUnits": e.victor_units,
                    "losses": e.losses,
                    "contenders": e.contenders,
                }
                for e in self.contests
            ],
            "construction": [
                {
                    "region": e.region,
                    "builders": e.builders,
                    "progressBefore": e.progress_before,
                    "progressAfter": e.progress_after,
                    "completed": e.completed,
                    "interrupted": e.interrupted,
                }
                for e in self.construction
            ],
            "spawns": [{"region": e.region, "player": e.player, "unit": e.unit} for e in self.spawns],
            "culls": [
                {"region": e.region, "player": e.player, "removed": e.removed} for e in self.culls
            ],
        }


class ResolutionPipeline:
    """Advances a game by one turn.

    Each phase is an independent method that can be tested separately.
    ``resolve`` composes them in the correct execution order.
    """

    # =========================================================================
    # INDEPENDENT PHASE METHODS
    # =========================================================================

    def execute_phase_groups(self, game: Game, graph: RegionGraph, scratch: TurnScratch) -> int:
        """Execute Phase 1: split occupied regions into groups."""
        return form_groups(game, graph, scratch)

    def execute_phase_interaction(
        self, game: Game, graph: RegionGraph, scratch: TurnScratch
    ) -> list[AttackEvent]:
        """Execute Phase 2: decide attack / construct / move for every group."""
        return interact(game, graph, scratch)

    def execute_phase_fatalities(
        self, game: Game, graph: RegionGraph, scratch: TurnScratch
    ) -> list[FatalityEvent]:
        """Execute Phase 3: apply damage to attacked regions' groups."""
        return apply_fatalities(game, graph, scratch)

    def execute_phase_movement(self, game: Game, graph: RegionGraph, scratch: TurnScratch) -> int:
        """Execute Phase 4: queue survivors at their landing regions."""
        return move_groups(game, graph, scratch)

    def execute_phase_receive(
        self, game: Game, graph: RegionGraph, scratch: TurnScratch
    ) -> ReceiveResult:
        """Execute Phase 5: merge arrivals and settle contests."""
        return receive_groups(game, graph, scratch)

    def execute_phase_construction(
        self, game: Game, graph: RegionGraph, scratch: TurnScratch, captured: set
    ) -> list[ConstructionEvent]:
        """Commit construction progress for undisturbed sites."""
        return commit_construction(game, graph, scratch, captured)

    def execute_phase_spawning(self, game: Game, graph: RegionGraph) -> list[SpawnEvent]:
        """Execute Phase 6: spawn units at finished buildings."""
        return spawn_units(game, graph, UnitLedger(game))

    def execute_phase_culling(self, game: Game, graph: RegionGraph) -> list[CullEvent]:
        """Execute Phase 7: trim overpopulated regions."""
        return cull_overpopulation(game, graph)

    # =========================================================================
    # ORCHESTRATION
    # =========================================================================

    def resolve(self, game: Game) -> TurnReport:
        """Resolve one complete turn.

        Consumes ``game.moves`` and ``game.plans``, rewrites region state,
        clears staging and increments ``game.turn``. The report is also
        stored on ``game.last_report``.

        Args:
            game: Current game state with staged commands

        Returns:
            TurnReport for the resolved turn
        """
        graph = RegionGraph(game.regions)
        scratch = TurnScratch.for_regions(game.regions)
        report = TurnReport(turn=game.turn, units_before=game.total_units())

        self.execute_phase_groups(game, graph, scratch)
        report.attacks = self.execute_phase_interaction(game, graph, scratch)
        report.fatalities = self.execute_phase_fatalities(game, graph, scratch)
        report.attacked_regions = scratch.attacked_regions()

        self.execute_phase_movement(game, graph, scratch)
        received = self.execute_phase_receive(game, graph, scratch)
        report.contests = received.contests
        report.captured_regions = received.captured

        report.construction = self.execute_phase_construction(
            game, graph, scratch, received.captured
        )
        report.spawns = self.execute_phase_spawning(game, graph)
        report.culls = self.execute_phase_culling(game, graph)

        report.units_after = game.total_units()

        # Staged commands are consumed
        game.moves.clear()
        game.plans.clear()
        game.attacked_last_turn = set(report.attacked_regions)
        game.last_report = report
        game.turn += 1

        logger.info(
            f"Resolved turn {report.turn}: {len(report.attacks)} attacks, "
            f"{report.killed} killed, {report.contest_losses} lost in contests, "
            f"{report.spawned} spawned, {report.culled} culled, "
            f"{report.units_after} units on map"
        )
        return report
