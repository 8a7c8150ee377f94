"""Game session management for multiplayer games."""

import logging
import uuid
from dataclasses import dataclass, field, replace

from fastapi import WebSocket
from pydantic import ValidationError

from ..engine.coordinator import TurnCoordinator
from ..engine.errors import WarfrontError
from ..engine.map_generator import generate_map
from ..engine.staging import CommandStaging
from ..models.game import Game
from ..utils.config import GameConfig
from ..utils.serialization import snapshot
from .registry import SessionRegistry
from .schemas.requests import ClientMessage

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Manages one game and the sockets of its players.

    Wires the game's staging, session registry and turn coordinator
    together and turns coordinator events into socket messages.
    """

    id: str
    game: Game
    connections: dict[str, WebSocket] = field(default_factory=dict)  # Player id -> socket
    staging: CommandStaging = field(init=False)
    registry: SessionRegistry = field(init=False)
    coordinator: TurnCoordinator = field(init=False)

    def __post_init__(self):
        self.staging = CommandStaging(self.game)
        self.registry = SessionRegistry(self.game, self.staging)
        self.coordinator = TurnCoordinator(
            self.game,
            self.staging,
            remove_player=self.registry.remove,
            notify=self.send_event,
        )

    @property
    def phase(self) -> str:
        return self.coordinator.state.value

    def get_state(self) -> dict:
        """Full state snapshot for broadcast."""
        return snapshot(self.game)

    def get_last_turn_events(self) -> dict | None:
        report = self.game.last_report
        return report.to_dict() if report is not None else None

    # =========================================================================
    # PLAYER LIFECYCLE
    # =========================================================================

    async def join(self, websocket: WebSocket) -> str:
        """Register a socket as a new player and place their starting units.

        Returns:
            The new player's id

        Raises:
            NoStartingRegion: If the map has no free region left
        """
        player_id = await self.coordinator.player_joined(
            self.registry.connect, self.registry.assign_starting_region
        )
        self.connections[player_id] = websocket

        await self.send_event("playerId", {"playerId": player_id}, [player_id])
        await self.send_event("state", {}, None)
        return player_id

    async def leave(self, player_id: str) -> None:
        """Handle a closed socket: the player's regions are cleared."""
        self.connections.pop(player_id, None)
        if player_id not in self.game.players:
            return
        self.registry.disconnect(player_id)
        await self.coordinator.player_left(player_id)
        await self.send_event("state", {}, None)

    async def handle_message(self, player_id: str, data) -> None:
        """Dispatch one inbound socket message.

        Malformed messages and protocol errors are reported back to the
        sending player only.
        """
        try:
            message = ClientMessage.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Game {self.id}: bad message from {player_id}: {e}")
            await self.send_event("error", {"error": "Invalid message"}, [player_id])
            return

        try:
            if message.type == "ping":
                await self.send_event("pong", {}, [player_id])
            elif message.type == "ready":
                await self.coordinator.player_ready(player_id)
            elif message.type == "commands":
                result = await self.coordinator.submit(player_id, message.commands)
                if result.accepted:
                    await self.send_event(
                        "accepted",
                        {
                            "staged": len(result.commands),
                            "withdrawn": result.withdrawn,
                            "errors": result.errors,
                        },
                        [player_id],
                    )
                else:
                    await self.send_event("rejected", {"reason": result.reason}, [player_id])
        except WarfrontError as e:
            logger.warning(f"Game {self.id}: request from {player_id} failed: {e!r}")
            await self.send_event("error", {"error": str(e)}, [player_id])

    # =========================================================================
    # OUTBOUND
    # =========================================================================

    async def send_event(self, event_type: str, payload: dict, recipients=None) -> None:
        """Send an event to some or all players.

        ``state`` events always carry a fresh snapshot.

        Args:
            event_type: Message type
            payload: Extra message fields
            recipients: Player ids, or None for everyone connected
        """
        message = {"type": event_type, **payload}
        if event_type == "state":
            message["state"] = self.get_state()

        targets = self.connections if recipients is None else recipients
        disconnected = []
        for player_id in list(targets):
            ws = self.connections.get(player_id)
            if ws is None:
                continue
            try:
                await ws.send_json(message)
            except Exception as e:
                logger.warning(f"Failed to send to {player_id}: {e}")
                disconnected.append(player_id)

        for player_id in disconnected:
            self.connections.pop(player_id, None)


class GameSessionManager:
    """Registry of all active game sessions.

    Owned by the application (``app.state.sessions``) and handed to every
    request handler; there is no module-level game list.
    """

    def __init__(self, base_config: GameConfig | None = None):
        self.base_config = base_config or GameConfig()
        self.sessions: dict[str, GameSession] = {}

    def create_session(self, seed: int | None = None, **overrides) -> GameSession:
        """Create a new game on a freshly generated map.

        Args:
            seed: Optional RNG seed (random when omitted)
            **overrides: GameConfig fields to override for this game

        Returns:
            Newly created GameSession
        """
        game_id = f"game-{uuid.uuid4().hex[:8]}"
        if seed is None:
            seed = uuid.uuid4().int % (2**32)

        overrides = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self.base_config, seed=seed, **overrides)
        session = GameSession(id=game_id, game=generate_map(game_id, config))
        self.sessions[game_id] = session

        logger.info(
            f"Created game {game_id}: {config.map_width}x{config.map_height}, seed={seed}"
        )
        return session

    def get(self, game_id: str) -> GameSession | None:
        return self.sessions.get(game_id)

    async def delete(self, game_id: str) -> bool:
        """Delete a game session and stop its turn clock.

        Returns:
            True if deleted, False if not found
        """
        session = self.sessions.pop(game_id, None)
        if session is None:
            return False
        await session.coordinator.shutdown()
        logger.info(f"Deleted game {game_id}")
        return True

    async def cleanup_all(self) -> None:
        """Clean up all sessions (called on shutdown)."""
        logger.info(f"Cleaning up {len(self.sessions)} game sessions")
        for session in self.sessions.values():
            await session.coordinator.shutdown()
        self.sessions.clear()
