"""Network-facing session layer."""

from .registry import SessionRegistry
from .session import GameSession, GameSessionManager

__all__ = [
    "GameSession",
    "GameSessionManager",
    "SessionRegistry",
]
