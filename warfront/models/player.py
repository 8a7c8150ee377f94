"""Player data model."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Player:
    """A connected faction, independent of any one turn."""

    id: str
    online: bool = True
    starting_region: Optional[int] = None

    def __post_init__(self):
        """Validate player data after initialization."""
        if not self.id:
            raise ValueError("Player id cannot be empty")
