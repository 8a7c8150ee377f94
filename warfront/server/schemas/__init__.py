"""Request and response schemas."""

from .requests import ClientMessage, CreateGameRequest
from .responses import CreateGameResponse, GameStateResponse, HealthResponse

__all__ = [
    "ClientMessage",
    "CreateGameRequest",
    "CreateGameResponse",
    "GameStateResponse",
    "HealthResponse",
]
