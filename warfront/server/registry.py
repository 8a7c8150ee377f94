"""Player sessions and faction placement."""

import logging
import uuid

from ..engine.errors import NoStartingRegion, UnknownPlayer
from ..engine.ledger import UnitLedger
from ..engine.staging import CommandStaging
from ..models.game import Game
from ..models.player import Player

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps connected players to their faction state in one game."""

    def __init__(self, game: Game, staging: CommandStaging | None = None):
        self.game = game
        self.ledger = UnitLedger(game)
        self.staging = staging or CommandStaging(game)

    def connect(self, player_id: str | None = None) -> str:
        """Register a new player.

        Args:
            player_id: Transport-assigned id, or None to generate one

        Returns:
            The player's id
        """
        player_id = player_id or f"player-{uuid.uuid4().hex[:8]}"
        if player_id in self.game.players:
            raise ValueError(f"Player {player_id} is already connected")
        self.game.players[player_id] = Player(id=player_id)
        logger.info(f"Game {self.game.id}: player {player_id} connected")
        return player_id

    def disconnect(self, player_id: str) -> None:
        """Mark a player offline and stop waiting on them this turn."""
        player = self._get(player_id)
        player.online = False
        self.game.waiting_on.discard(player_id)
        logger.info(f"Game {self.game.id}: player {player_id} disconnected")

    def assign_starting_region(self, player_id: str) -> int:
        """Place a player's starting units in a random empty, passable region.

        The player is also added to the current turn's ``waiting_on``.

        Returns:
            The starting region id

        Raises:
            UnknownPlayer: If the player is not connected
            NoStartingRegion: If no empty passable region is left
        """
        player = self._get(player_id)
        candidates = [r for r in self.game.regions if not r.units and r.passable]
        if not candidates:
            raise NoStartingRegion(f"No free region for player {player_id}")

        region = self.game.rng.choice(candidates)
        self.ledger.spawn(region, player_id, self.game.config.starting_units)
        player.starting_region = region.id
        self.game.waiting_on.add(player_id)
        logger.info(f"Game {self.game.id}: player {player_id} starts in region {region.id}")
        return region.id

    def remove(self, player_id: str) -> None:
        """Strip a player from the game.

        Their regions are emptied (units are not transferred) and anything
        they staged this turn is withdrawn.
        """
        self._get(player_id)
        del self.game.players[player_id]
        self.game.waiting_on.discard(player_id)
        self.game.command_errors.pop(player_id, None)

        for region in self.game.owned_regions(player_id):
            region.clear()
        self.staging.withdraw(player_id)

        logger.info(f"Game {self.game.id}: player {player_id} removed")

    def _get(self, player_id: str) -> Player:
        player = self.game.players.get(player_id)
        if player is None:
            raise UnknownPlayer(player_id)
        return player
