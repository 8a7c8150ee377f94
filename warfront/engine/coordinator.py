"""Turn state machine: readiness, command collection and resolution.

States:
    AWAITING_READY -> AWAITING_COMMANDS -> RESOLVING -> AWAITING_COMMANDS ...

Two things can close a turn: the last waiting player submitting, or the
turn timer running out (followed by a short grace period after
``requestCommands`` is sent). Both go through ``request_resolution``, which
checks and sets ``resolution_started`` under the game lock, so a turn is
resolved at most once.

All game mutation happens under one asyncio lock per game. Broadcasts are
sent after the lock is released; removals that arrive while a resolution
is being broadcast are queued and applied before the next turn opens.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional

from ..models.game import Game
from .errors import NoStartingRegion, UnknownPlayer
from .pipeline import ResolutionPipeline, TurnReport
from .staging import CommandStaging, SubmitResult

logger = logging.getLogger(__name__)

# notify(event_type, payload, recipients); recipients None means everyone
Notifier = Callable[[str, dict, Optional[Iterable[str]]], Awaitable[None]]


class TurnState(str, Enum):
    AWAITING_READY = "AWAITING_READY"
    AWAITING_COMMANDS = "AWAITING_COMMANDS"
    RESOLVING = "RESOLVING"


async def _no_notify(event_type: str, payload: dict, recipients=None) -> None:
    return None


class TurnCoordinator:
    """Owns the turn clock and decides when a turn resolves.

    Args:
        game: Game being driven
        staging: Command staging for the game
        remove_player: Callback that strips a player from the game
            (``SessionRegistry.remove``)
        notify: Async callback used to emit outbound events
        pipeline: Resolution pipeline (a fresh one by default)
    """

    def __init__(
        self,
        game: Game,
        staging: CommandStaging,
        remove_player: Callable[[str], None],
        notify: Notifier | None = None,
        pipeline: ResolutionPipeline | None = None,
    ):
        self.game = game
        self.staging = staging
        self.remove_player = remove_player
        self.notify = notify or _no_notify
        self.pipeline = pipeline or ResolutionPipeline()

        self.state = TurnState.AWAITING_READY
        self.awaiting_ready: set[str] = set()
        self.resolution_started = False
        self.pending_removals: list[str] = []
        self._lock = asyncio.Lock()
        self._timer_task: asyncio.Task | None = None

    # =========================================================================
    # PLAYER EVENTS
    # =========================================================================

    async def player_joined(
        self, connect: Callable[[], str], place: Callable[[str], int]
    ) -> str:
        """Add and place a new player under the game lock.

        Args:
            connect: Registers the player and returns their id
            place: Places the player's starting units

        Returns:
            The new player's id

        Raises:
            NoStartingRegion: If placement failed (the player is removed again)
        """
        async with self._lock:
            player_id = connect()
            try:
                place(player_id)
            except NoStartingRegion:
                self.remove_player(player_id)
                raise

            if self.state is TurnState.AWAITING_READY:
                self.awaiting_ready.add(player_id)
            elif self.state is TurnState.AWAITING_COMMANDS:
                self.game.waiting_on.add(player_id)
                if self._timer_task is None:
                    self._start_timer()
            # While resolving, the next turn opens with every player waiting
        return player_id

    async def player_ready(self, player_id: str) -> None:
        """Mark a player ready; the first turn opens once everyone is."""
        async with self._lock:
            if player_id not in self.game.players:
                raise UnknownPlayer(player_id)
            if self.state is not TurnState.AWAITING_READY:
                logger.debug(f"Ignoring ready from {player_id} in state {self.state.value}")
                return

            self.awaiting_ready.discard(player_id)
            if self.awaiting_ready:
                return
            self._open_turn()

        await self._announce_turn()

    async def submit(self, player_id: str, commands) -> SubmitResult:
        """Stage a player's commands; resolve if they were the last one waited on."""
        async with self._lock:
            if self.state is not TurnState.AWAITING_COMMANDS:
                logger.warning(
                    f"Player {player_id} submitted in state {self.state.value}, rejected"
                )
                return SubmitResult(
                    accepted=False, reason=f"Not accepting commands ({self.state.value})"
                )

            result = self.staging.submit(player_id, commands)
            complete = result.accepted and not self.game.waiting_on
            turn = self.game.turn

        if complete:
            await self.request_resolution("all players submitted", turn, all_submitted=True)
        return result

    async def player_left(self, player_id: str) -> None:
        """Remove a disconnected player.

        During resolution the removal is queued until the resolved state has
        been broadcast. If the player was the last one waited on, the turn
        resolves without them.
        """
        async with self._lock:
            if self.state is TurnState.RESOLVING:
                self.pending_removals.append(player_id)
                logger.info(f"Player {player_id} left during resolution, removal deferred")
                return

            self.remove_player(player_id)
            self.awaiting_ready.discard(player_id)
            turn = self.game.turn
            if self.state is TurnState.AWAITING_READY:
                if self.awaiting_ready or not self.game.players:
                    return
                self._open_turn()
                opened = True
                complete = False
            else:
                opened = False
                complete = bool(self.game.players) and not self.game.waiting_on
                if not self.game.players:
                    self._cancel_timer()

        if opened:
            await self._announce_turn()
        elif complete:
            await self.request_resolution("last waiting player left", turn, all_submitted=True)

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    async def request_resolution(
        self, reason: str, turn: int, all_submitted: bool = False
    ) -> TurnReport | None:
        """Resolve ``turn`` unless it has already started resolving.

        A failing pipeline is logged and the turn is reopened with fresh
        staging, so the game keeps running.

        Args:
            reason: Why resolution was requested (for logging)
            turn: Turn the requester believes is open
            all_submitted: Only resolve if nobody is waited on any more (a
                player may have joined since the request was made)

        Returns:
            The TurnReport, or None if the request was stale, a duplicate,
            or the resolution failed
        """
        async with self._lock:
            if (
                self.state is not TurnState.AWAITING_COMMANDS
                or self.resolution_started
                or turn != self.game.turn
                or (all_submitted and self.game.waiting_on)
            ):
                logger.debug(f"Ignoring resolution request for turn {turn} ({reason})")
                return None

            self.resolution_started = True
            self.state = TurnState.RESOLVING
            self._cancel_timer()

            logger.info(f"Resolving turn {turn}: {reason}")
            try:
                report = self.pipeline.resolve(self.game)
            except Exception:
                logger.error(f"Resolving turn {turn} failed, reopening it", exc_info=True)
                report = None

        try:
            if report is not None:
                await self.notify("state", {"report": report.to_dict()}, None)
        finally:
            async with self._lock:
                for player_id in self.pending_removals:
                    if player_id in self.game.players:
                        self.remove_player(player_id)
                self.pending_removals.clear()
                self._open_turn()

        await self._announce_turn()
        return report

    # =========================================================================
    # TURN CLOCK
    # =========================================================================

    def _open_turn(self) -> None:
        """Enter AWAITING_COMMANDS for a fresh turn (lock held)."""
        self.staging.open_turn()
        self.state = TurnState.AWAITING_COMMANDS
        self.resolution_started = False
        if self.game.players:
            self._start_timer()
        logger.info(
            f"Turn {self.game.turn} open, waiting on {len(self.game.waiting_on)} players"
        )

    async def _announce_turn(self) -> None:
        await self.notify("turnStarted", {"turnTime": int(self.game.config.turn_time * 1000)}, None)

    def _start_timer(self) -> None:
        self._cancel_timer()
        self._timer_task = asyncio.create_task(self._turn_timer(self.game.turn))

    def _cancel_timer(self) -> None:
        task = self._timer_task
        self._timer_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _turn_timer(self, turn: int) -> None:
        """Ask laggards for commands when time runs out, then resolve anyway."""
        config = self.game.config
        await asyncio.sleep(config.turn_time)

        async with self._lock:
            if turn != self.game.turn or self.resolution_started:
                return
            laggards = sorted(self.game.waiting_on)

        if laggards:
            logger.info(f"Turn {turn} timed out, requesting commands from {laggards}")
            await self.notify("requestCommands", {"turn": turn}, laggards)
            await asyncio.sleep(config.command_grace)

        await self.request_resolution("turn timer expired", turn)

    async def shutdown(self) -> None:
        """Stop the turn timer."""
        task = self._timer_task
        self._cancel_timer()
        if task is not None and task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)
