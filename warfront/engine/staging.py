"""Per-turn command staging and validation.

Players submit a batch of ``[origin, [targets...]]`` pairs once per turn.
Validation is hybrid, like order processing elsewhere in the engine:
- Strict: a second submission in the same turn rejects the whole batch
- Lenient: an invalid command (or target) is dropped, the rest is staged
- No crashes: validation errors are logged and recorded, never raised
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

from ..models.command import MOVE, PLAN, Command
from ..models.game import Game
from ..models.region import Region
from .errors import DuplicateSubmission, InvalidCommand, UnknownPlayer, UnknownRegion
from .graph import RegionGraph

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    """Outcome of one submission.

    Attributes:
        accepted: False only when the whole batch was refused
        reason: Why the batch was refused (None when accepted)
        commands: Commands staged from this batch
        errors: Reasons individual commands or targets were dropped
        withdrawn: Sites whose turn-start plan the player toggled off
    """

    accepted: bool
    reason: str | None = None
    commands: list[Command] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    withdrawn: list[int] = field(default_factory=list)


class CommandStaging:
    """Validates player commands against the current region state and stages them."""

    def __init__(self, game: Game, graph: RegionGraph | None = None):
        self.game = game
        self.graph = graph or RegionGraph(game.regions)

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    def submit(self, player_id: str, raw_commands) -> SubmitResult:
        """Stage one player's commands for the current turn.

        Plans are added to the ones seeded when the turn opened. A plan for a
        site the player already has planned toggles that plan off.

        Args:
            player_id: Submitting player
            raw_commands: Iterable of ``(origin_id, [target_id, ...])`` pairs

        Returns:
            SubmitResult describing what was staged

        Raises:
            UnknownPlayer: If player_id is not in the game
        """
        if player_id not in self.game.players:
            raise UnknownPlayer(player_id)

        try:
            self._check_waiting(player_id)
        except DuplicateSubmission as e:
            logger.warning(f"Player {player_id} submission rejected: {e}")
            return SubmitResult(accepted=False, reason=str(e))

        commands, errors = self._build_commands(player_id, raw_commands)

        staged = []
        withdrawn = []
        for command in commands:
            if command.kind == MOVE:
                self.game.moves[command.origin] = command
                staged.append(command)
            elif player_id in self.game.plans.get(command.origin, ()):
                self._drop_plan(command.origin, player_id)
                withdrawn.append(command.origin)
            else:
                self.game.plans.setdefault(command.origin, set()).add(player_id)
                staged.append(command)

        self.game.waiting_on.discard(player_id)
        if errors:
            for error in errors:
                logger.debug(f"Player {player_id} command dropped: {error}")
            self.game.command_errors[player_id] = errors

        logger.info(
            f"Turn {self.game.turn}: staged {len(staged)} commands from {player_id}, "
            f"withdrew {len(withdrawn)} plans, dropped {len(errors)}, "
            f"waiting on {len(self.game.waiting_on)}"
        )
        return SubmitResult(
            accepted=True, commands=staged, errors=errors, withdrawn=withdrawn
        )

    def _check_waiting(self, player_id: str) -> None:
        if player_id not in self.game.waiting_on:
            raise DuplicateSubmission(
                f"Player {player_id} already submitted for turn {self.game.turn}"
            )

    def _build_commands(self, player_id: str, raw_commands) -> tuple[list[Command], list[str]]:
        """Parse, partition and validate a whole batch.

        Ownership of every origin is read once up front so the plan/move
        split of a command never depends on other commands in the batch.
        """
        errors = []
        parsed = []
        for i, raw in enumerate(raw_commands or []):
            try:
                parsed.append(self._parse(raw))
            except InvalidCommand as e:
                errors.append(f"Command {i}: {e}")

        origin_counts = Counter(origin for origin, _ in parsed)
        owners = {}
        for origin in origin_counts:
            try:
                owners[origin] = self.graph.get(origin).player
            except UnknownRegion:
                pass

        commands = []
        for origin, targets in parsed:
            try:
                if origin_counts[origin] > 1:
                    raise InvalidCommand(f"region {origin} appears in more than one command")
                if origin not in owners:
                    raise InvalidCommand(f"origin region {origin} does not exist")

                region = self.graph.get(origin)
                owner = owners[origin]
                if owner == player_id:
                    command = self._validate_move(player_id, region, targets, errors)
                elif owner is None:
                    command = self._validate_plan(player_id, region, targets)
                else:
                    raise InvalidCommand(f"region {origin} is owned by another player")
                commands.append(command)
            except InvalidCommand as e:
                errors.append(f"Command {origin} -> {list(targets)}: {e}")

        return commands, errors

    def _parse(self, raw) -> tuple[int, list[int]]:
        """Unpack one ``[origin, [targets...]]`` pair."""
        try:
            origin, targets = raw
        except (TypeError, ValueError) as e:
            raise InvalidCommand(f"expected [origin, [targets...]], got {raw!r}") from e
        if not _is_region_id(origin):
            raise InvalidCommand(f"invalid origin {origin!r}")
        if isinstance(targets, (str, bytes)) or not hasattr(targets, "__iter__"):
            raise InvalidCommand(f"invalid targets {targets!r}")
        targets = list(targets)
        if not all(_is_region_id(t) for t in targets):
            raise InvalidCommand(f"invalid target ids {targets!r}")
        return origin, targets

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _filter_targets(self, region: Region, targets: list[int], errors: list[str]) -> list[int]:
        """Keep reachable, passable targets; collapse duplicates to first occurrence."""
        kept = []
        for target in targets:
            if target in kept:
                continue
            if not self.graph.is_adjacent_or_self(region.id, target):
                errors.append(f"Target {target} is not adjacent to region {region.id}")
                continue
            if not self.graph.get(target).passable:
                errors.append(f"Target {target} is impassable")
                continue
            kept.append(target)
        return kept

    def _validate_move(
        self, player_id: str, region: Region, targets: list[int], errors: list[str]
    ) -> Command:
        kept = self._filter_targets(region, targets, errors)
        if not kept:
            raise InvalidCommand("no valid targets")

        # More targets than units: drop the earliest ones
        if len(kept) > len(region.units):
            dropped = kept[: len(kept) - len(region.units)]
            errors.append(
                f"Region {region.id} has {len(region.units)} units, dropped targets {dropped}"
            )
            kept = kept[len(dropped) :]

        return Command(player=player_id, origin=region.id, targets=tuple(kept), kind=MOVE)

    def _validate_plan(self, player_id: str, region: Region, targets: list[int]) -> Command:
        """A plan names the site itself: ``[site, [site]]``."""
        if not region.passable:
            raise InvalidCommand(f"cannot build on impassable region {region.id}")
        if region.building >= 1:
            raise InvalidCommand(f"region {region.id} is already built")
        if not self._borders_player(region, player_id):
            raise InvalidCommand(f"region {region.id} does not border your territory")

        if not targets or any(target != region.id for target in targets):
            raise InvalidCommand(f"a plan for region {region.id} must target the region itself")
        return Command(player=player_id, origin=region.id, targets=(region.id,), kind=PLAN)

    def _borders_player(self, region: Region, player_id: str) -> bool:
        return any(self.graph.get(n).player == player_id for n in region.connected)

    # =========================================================================
    # TURN BOUNDARIES
    # =========================================================================

    def withdraw(self, player_id: str) -> None:
        """Remove everything staged by a player this turn."""
        for origin in [o for o, c in self.game.moves.items() if c.player == player_id]:
            del self.game.moves[origin]
        for site in list(self.game.plans):
            self._drop_plan(site, player_id)

    def _drop_plan(self, site: int, player_id: str) -> None:
        planners = self.game.plans[site]
        planners.discard(player_id)
        if not planners:
            del self.game.plans[site]

    def open_turn(self) -> None:
        """Reset staging for a new turn and wait on every player."""
        self.game.moves.clear()
        self.game.plans.clear()
        self.game.command_errors.clear()
        self.game.waiting_on = set(self.game.players)
        self.seed_default_plans()

    def seed_default_plans(self) -> None:
        """Keep unattended construction going.

        Each unfinished, empty site that was not attacked last turn is
        planned for every player owning a neighboring region.
        """
        for region in self.graph:
            if region.units or not (0 < region.building < 1):
                continue
            if region.id in self.game.attacked_last_turn:
                continue
            for neighbor_id in sorted(region.connected):
                owner = self.graph.get(neighbor_id).player
                if owner is not None and owner in self.game.players:
                    self.game.plans.setdefault(region.id, set()).add(owner)


def _is_region_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
