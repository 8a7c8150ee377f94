"""Command data model for staged player orders."""

from dataclasses import dataclass
from typing import Tuple

MOVE = "move"
PLAN = "plan"


@dataclass(frozen=True)
class Command:
    """One staged order for the current turn.

    ``kind`` is decided at staging time from who owns the origin: an owned
    origin gives a movement/attack command, an unowned one a construction
    plan. Targets keep submission order, which fixes group split order.
    """

    player: str  # Submitting player
    origin: int  # Origin region id
    targets: Tuple[int, ...]  # Destination region ids, duplicates removed
    kind: str = MOVE  # MOVE or PLAN

    def __post_init__(self):
        """Validate command data after initialization."""
        if self.kind not in (MOVE, PLAN):
            raise ValueError(f"Invalid kind: {self.kind} (must be '{MOVE}' or '{PLAN}')")
        if not self.targets:
            raise ValueError(f"Command from {self.origin} has no targets")
        if len(set(self.targets)) != len(self.targets):
            raise ValueError(f"Duplicate targets in command from {self.origin}")
