"""Tests for UnitLedger."""

import pytest

from warfront.engine import UnitLedger
from warfront.models import Game, Region


def create_game():
    regions = [
        Region(id=0, terrain=0.5, connected={1}),
        Region(id=1, terrain=0.5, connected={0}),
    ]
    return Game(id="test", regions=regions)


def test_next_id_is_strictly_increasing():
    """Unit ids only go up."""
    ledger = UnitLedger(create_game())
    ids = [ledger.next_id() for _ in range(5)]
    assert ids == [1, 2, 3, 4, 5]


def test_counter_survives_new_ledger():
    """A new ledger continues from the game's counter."""
    game = create_game()
    UnitLedger(game).next_id()
    assert UnitLedger(game).next_id() == 2


def test_spawn_sets_owner_and_appends():
    """Spawned units are appended and set the owner."""
    game = create_game()
    ledger = UnitLedger(game)
    region = game.regions[0]

    first = ledger.spawn(region, "p1", 3)
    second = ledger.spawn(region, "p1", 2)

    assert region.player == "p1"
    assert region.units == first + second
    assert len(set(region.units)) == 5


def test_spawn_into_enemy_region_rejected():
    """Spawning into another player's region raises."""
    game = create_game()
    ledger = UnitLedger(game)
    ledger.spawn(game.regions[0], "p1", 1)
    with pytest.raises(ValueError, match="owned by p1"):
        ledger.spawn(game.regions[0], "p2", 1)


def test_spawn_requires_positive_count():
    """Spawning zero units raises."""
    game = create_game()
    with pytest.raises(ValueError, match="Invalid unit count"):
        UnitLedger(game).spawn(game.regions[0], "p1", 0)
