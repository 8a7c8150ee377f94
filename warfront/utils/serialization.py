"""Game state snapshots as JSON.

``snapshot`` builds the outbound state message (regions and players). The
save/load helpers write the same structure to disk for replay and
debugging; they are not a persistence layer.
"""

import json
from pathlib import Path
from typing import Any

from ..models.game import Game
from ..models.player import Player
from ..models.region import Region
from .config import GameConfig


def snapshot(game: Game) -> dict[str, Any]:
    """Convert the game to the broadcast state snapshot.

    Args:
        game: Game to serialize

    Returns:
        JSON-compatible dictionary
    """
    return {
        "gameId": game.id,
        "turn": game.turn,
        "nextUnitId": game.next_unit_id,
        "regions": [_serialize_region(r) for r in game.regions],
        "players": [_serialize_player(p) for p in game.players.values()],
    }


def save_snapshot(game: Game, filepath: str) -> Path:
    """Save a game snapshot (plus its config) to a JSON file.

    Args:
        game: Game to save
        filepath: Destination path

    Returns:
        Path written
    """
    path = Path(filepath)
    data = snapshot(game)
    data["config"] = {
        "tile_capacity": game.config.tile_capacity,
        "unit_coefficient": game.config.unit_coefficient,
        "starting_units": game.config.starting_units,
        "turn_time": game.config.turn_time,
        "command_grace": game.config.command_grace,
        "map_width": game.config.map_width,
        "map_height": game.config.map_height,
        "seed": game.config.seed,
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_snapshot(filepath: str) -> Game:
    """Rebuild a game from a saved snapshot.

    Args:
        filepath: Path to a file written by save_snapshot

    Returns:
        Reconstructed Game (no staged commands)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the snapshot is malformed
    """
    with open(filepath) as f:
        data = json.load(f)
    return game_from_snapshot(data)


def game_from_snapshot(data: dict[str, Any]) -> Game:
    """Reconstruct a Game from a snapshot dictionary."""
    try:
        config = GameConfig(**data.get("config", {}))
        regions = [_deserialize_region(r) for r in data["regions"]]
        players = {p["id"]: _deserialize_player(p) for p in data["players"]}
        return Game(
            id=data["gameId"],
            config=config,
            regions=regions,
            players=players,
            turn=data["turn"],
            next_unit_id=data["nextUnitId"],
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed snapshot: {e}") from e


def _serialize_region(region: Region) -> dict[str, Any]:
    return {
        "id": region.id,
        "position": _plain(region.position),
        "polygon": _plain(region.polygon),
        "terrain": region.terrain,
        "units": list(region.units),
        "player": region.player,
        "building": region.building,
        "connected": sorted(region.connected),
    }


def _deserialize_region(data: dict[str, Any]) -> Region:
    return Region(
        id=data["id"],
        terrain=data["terrain"],
        connected=frozenset(data.get("connected", [])),
        position=data.get("position"),
        polygon=data.get("polygon"),
        units=list(data.get("units", [])),
        player=data.get("player"),
        building=data.get("building", 0.0),
    )


def _serialize_player(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "online": player.online,
        "startingRegion": player.starting_region,
    }


def _deserialize_player(data: dict[str, Any]) -> Player:
    return Player(
        id=data["id"],
        online=data.get("online", True),
        starting_region=data.get("startingRegion"),
    )


def _plain(value):
    """Tuples to lists so snapshots compare equal after a JSON round trip."""
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
