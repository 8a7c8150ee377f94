"""Pydantic response schemas for API endpoints."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Server status for the API root."""

    service: str
    status: str
    activeGames: int  # noqa: N815


class GameStateResponse(BaseModel):
    """Snapshot of one game plus the report of its last resolved turn."""

    gameId: str  # noqa: N815
    turn: int = Field(description="Number of resolved turns")
    phase: str = Field(description="AWAITING_READY, AWAITING_COMMANDS or RESOLVING")
    state: dict
    events: dict | None = Field(default=None, description="Last TurnReport, if any")


class CreateGameResponse(BaseModel):
    """Response after creating a new game."""

    gameId: str  # noqa: N815
    seed: int
    state: dict
