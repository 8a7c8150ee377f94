"""Game engine components."""

from .coordinator import TurnCoordinator, TurnState
from .errors import (
    DuplicateSubmission,
    InvalidCommand,
    NoStartingRegion,
    UnknownPlayer,
    UnknownRegion,
    WarfrontError,
)
from .graph import RegionGraph
from .ledger import UnitLedger
from .map_generator import generate_map
from .pipeline import ResolutionPipeline, TurnReport
from .staging import CommandStaging, SubmitResult

__all__ = [
    "CommandStaging",
    "DuplicateSubmission",
    "InvalidCommand",
    "NoStartingRegion",
    "RegionGraph",
    "ResolutionPipeline",
    "SubmitResult",
    "TurnCoordinator",
    "TurnReport",
    "TurnState",
    "UnitLedger",
    "UnknownPlayer",
    "UnknownRegion",
    "WarfrontError",
    "generate_map",
]
