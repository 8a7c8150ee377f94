"""Pydantic request schemas for API endpoints and socket messages."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class CreateGameRequest(BaseModel):
    """Request to create a new game."""

    seed: int | None = Field(default=None, description="Optional RNG seed for determinism")
    mapWidth: int | None = Field(default=None, gt=0)  # noqa: N815
    mapHeight: int | None = Field(default=None, gt=0)  # noqa: N815
    turnTime: float | None = Field(  # noqa: N815
        default=None, gt=0, description="Seconds before a turn resolves without everyone"
    )


class ClientMessage(BaseModel):
    """Message received over a player's WebSocket.

    Commands are only checked for shape here; each one is validated
    individually when staged, so one bad command doesn't sink the batch.
    """

    type: Literal["ready", "commands", "ping"]
    commands: list[Any] = Field(
        default_factory=list, description="List of [originId, [targetId, ...]] pairs"
    )
