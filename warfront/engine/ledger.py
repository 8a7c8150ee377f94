"""Unit id issuing and placement."""

import logging

from ..models.game import Game
from ..models.region import Region

logger = logging.getLogger(__name__)


class UnitLedger:
    """Issues strictly increasing unit ids for one game.

    The counter lives on the Game so it survives the ledger being rebuilt
    and is never reused. There is no removal primitive: deaths truncate
    ``region.units`` directly.
    """

    def __init__(self, game: Game):
        self.game = game

    def next_id(self) -> int:
        unit_id = self.game.next_unit_id
        self.game.next_unit_id += 1
        return unit_id

    def spawn(self, region: Region, player: str, n: int) -> list[int]:
        """Create ``n`` fresh units in ``region`` owned by ``player``.

        Args:
            region: Region receiving the units
            player: New owner of the region
            n: Number of units to create

        Returns:
            The new unit ids

        Raises:
            ValueError: If n is not positive or the region belongs to someone else
        """
        if n <= 0:
            raise ValueError(f"Invalid unit count: {n} (must be > 0)")
        if region.player not in (None, player):
            raise ValueError(
                f"Cannot spawn for {player} in region {region.id} owned by {region.player}"
            )

        new_units = [self.next_id() for _ in range(n)]
        region.units.extend(new_units)
        region.player = player
        logger.debug(f"Spawned {n} units for {player} in region {region.id}")
        return new_units
