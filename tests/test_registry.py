"""Tests for SessionRegistry player lifecycle."""

import pytest

from warfront.engine import CommandStaging, NoStartingRegion, UnknownPlayer
from warfront.models import Game, Region
from warfront.server import SessionRegistry
from warfront.utils import GameConfig


def create_registry(terrain=(0.5, 0.5, -0.5)):
    regions = []
    for i, height in enumerate(terrain):
        connected = {n for n in (i - 1, i + 1) if 0 <= n < len(terrain)}
        regions.append(Region(id=i, terrain=height, connected=connected))
    game = Game(id="test", config=GameConfig(starting_units=5), regions=regions)
    return SessionRegistry(game, CommandStaging(game))


class TestConnect:
    def test_connect_generates_id(self):
        """Connecting without an id generates one."""
        registry = create_registry()
        player_id = registry.connect()

        assert player_id.startswith("player-")
        assert registry.game.players[player_id].online

    def test_connect_with_id(self):
        """Connecting with an id keeps it."""
        registry = create_registry()
        assert registry.connect("p1") == "p1"

    def test_connect_twice_rejected(self):
        """The same id cannot connect twice."""
        registry = create_registry()
        registry.connect("p1")
        with pytest.raises(ValueError, match="already connected"):
            registry.connect("p1")

    def test_disconnect(self):
        """Disconnecting marks the player offline and stops waiting on them."""
        registry = create_registry()
        registry.connect("p1")
        registry.game.waiting_on = {"p1"}

        registry.disconnect("p1")

        assert not registry.game.players["p1"].online
        assert registry.game.waiting_on == set()

    def test_disconnect_unknown(self):
        """Disconnecting an unknown player raises."""
        with pytest.raises(UnknownPlayer):
            create_registry().disconnect("ghost")


class TestPlacement:
    def test_starting_units_placed(self):
        """Placement spawns the starting units in a free region."""
        registry = create_registry()
        registry.connect("p1")

        region_id = registry.assign_starting_region("p1")

        region = registry.game.regions[region_id]
        assert region_id in (0, 1)
        assert region.player == "p1"
        assert region.units == [1, 2, 3, 4, 5]
        assert registry.game.players["p1"].starting_region == region_id
        assert "p1" in registry.game.waiting_on

    def test_placement_avoids_occupied_and_water(self):
        """Players never start on water or in an occupied region."""
        registry = create_registry()
        registry.connect("p1")
        registry.connect("p2")

        first = registry.assign_starting_region("p1")
        second = registry.assign_starting_region("p2")

        assert {first, second} == {0, 1}

    def test_map_full(self):
        """Placement fails when no free region is left."""
        registry = create_registry(terrain=(0.5, -0.5))
        registry.connect("p1")
        registry.connect("p2")
        registry.assign_starting_region("p1")

        with pytest.raises(NoStartingRegion):
            registry.assign_starting_region("p2")

    def test_placement_is_seeded(self):
        """Placement follows the game seed."""
        placements = []
        for _ in range(2):
            registry = create_registry(terrain=(0.5,) * 8)
            registry.connect("p1")
            placements.append(registry.assign_starting_region("p1"))
        assert placements[0] == placements[1]


class TestRemove:
    def test_remove_clears_regions_and_staging(self):
        """Removing a player empties their regions and staging."""
        registry = create_registry()
        game = registry.game
        registry.connect("p1")
        region_id = registry.assign_starting_region("p1")
        other = 1 - region_id
        registry.staging.submit("p1", [[region_id, [other]], [other, [other]]])

        registry.remove("p1")

        assert "p1" not in game.players
        assert game.regions[region_id].units == []
        assert game.regions[region_id].player is None
        assert game.moves == {}
        assert game.plans == {}
        assert "p1" not in game.command_errors

    def test_unit_ids_not_reused_after_remove(self):
        """Unit ids keep counting after a removal."""
        registry = create_registry()
        registry.connect("p1")
        registry.assign_starting_region("p1")
        registry.remove("p1")

        registry.connect("p2")
        region_id = registry.assign_starting_region("p2")

        assert registry.game.regions[region_id].units == [6, 7, 8, 9, 10]

    def test_remove_unknown(self):
        """Removing an unknown player raises."""
        with pytest.raises(UnknownPlayer):
            create_registry().remove("ghost")
