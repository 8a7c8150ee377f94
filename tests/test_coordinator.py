"""Tests for the turn state machine."""

import asyncio

import pytest

from warfront.engine import CommandStaging, TurnCoordinator, TurnState, UnknownPlayer
from warfront.models import Game, Region
from warfront.server import SessionRegistry
from warfront.utils import GameConfig


class Recorder:
    """Notifier that keeps every outbound event."""

    def __init__(self):
        self.events = []

    async def __call__(self, event_type, payload, recipients=None):
        self.events.append((event_type, payload, recipients))

    def types(self):
        return [event[0] for event in self.events]


def create_coordinator(turn_time=30.0, command_grace=0.01, notify=None):
    config = GameConfig(turn_time=turn_time, command_grace=command_grace, starting_units=4)
    regions = []
    for i in range(4):
        connected = {n for n in (i - 1, i + 1) if 0 <= n < 4}
        regions.append(Region(id=i, terrain=0.5, connected=connected))
    game = Game(id="test", config=config, regions=regions)

    staging = CommandStaging(game)
    registry = SessionRegistry(game, staging)
    recorder = notify or Recorder()
    coordinator = TurnCoordinator(game, staging, registry.remove, notify=recorder)
    return coordinator, registry, recorder


async def join(coordinator, registry, player_id):
    return await coordinator.player_joined(
        lambda: registry.connect(player_id), registry.assign_starting_region
    )


async def start_game(coordinator, registry, *player_ids):
    for player_id in player_ids:
        await join(coordinator, registry, player_id)
    for player_id in player_ids:
        await coordinator.player_ready(player_id)


class TestReadiness:
    def test_players_wait_for_ready(self):
        """The first turn opens once every player is ready."""

        async def scenario():
            coordinator, registry, recorder = create_coordinator()
            await join(coordinator, registry, "p1")
            await join(coordinator, registry, "p2")

            assert coordinator.state is TurnState.AWAITING_READY
            assert coordinator.awaiting_ready == {"p1", "p2"}

            await coordinator.player_ready("p1")
            assert coordinator.state is TurnState.AWAITING_READY
            assert recorder.events == []

            await coordinator.player_ready("p2")
            assert coordinator.state is TurnState.AWAITING_COMMANDS
            assert recorder.events == [("turnStarted", {"turnTime": 30000}, None)]
            assert coordinator.game.waiting_on == {"p1", "p2"}

            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_ready_from_unknown_player(self):
        """Ready from an unknown player raises."""

        async def scenario():
            coordinator, _, _ = create_coordinator()
            with pytest.raises(UnknownPlayer):
                await coordinator.player_ready("ghost")

        asyncio.run(scenario())

    def test_submit_before_game_starts_rejected(self):
        """Commands before the first turn are rejected."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await join(coordinator, registry, "p1")

            result = await coordinator.submit("p1", [])

            assert not result.accepted
            assert "AWAITING_READY" in result.reason

        asyncio.run(scenario())

    def test_leaving_unblocks_readiness(self):
        """The last unready player leaving opens the turn."""

        async def scenario():
            coordinator, registry, recorder = create_coordinator()
            await join(coordinator, registry, "p1")
            await join(coordinator, registry, "p2")
            await coordinator.player_ready("p1")

            await coordinator.player_left("p2")

            assert coordinator.state is TurnState.AWAITING_COMMANDS
            assert recorder.types() == ["turnStarted"]
            assert coordinator.game.waiting_on == {"p1"}
            await coordinator.shutdown()

        asyncio.run(scenario())


class TestResolution:
    def test_resolves_when_everyone_submitted(self):
        """The last submission resolves the turn once."""

        async def scenario():
            coordinator, registry, recorder = create_coordinator()
            await start_game(coordinator, registry, "p1", "p2")
            game = coordinator.game

            first = await coordinator.submit("p1", [])
            assert first.accepted
            assert game.turn == 0

            await coordinator.submit("p2", [])

            assert game.turn == 1
            assert recorder.types() == ["turnStarted", "state", "turnStarted"]
            assert recorder.events[1][1]["report"]["turn"] == 0
            assert coordinator.state is TurnState.AWAITING_COMMANDS
            assert game.waiting_on == {"p1", "p2"}
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_duplicate_submission_does_not_resolve(self):
        """A second submission by the same player changes nothing."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1", "p2")

            await coordinator.submit("p1", [])
            second = await coordinator.submit("p1", [])

            assert not second.accepted
            assert coordinator.game.turn == 0
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_concurrent_requests_resolve_once(self):
        """Simultaneous resolution requests resolve the turn once."""

        async def scenario():
            coordinator, registry, recorder = create_coordinator()
            await start_game(coordinator, registry, "p1", "p2")

            results = await asyncio.gather(
                coordinator.request_resolution("first", 0),
                coordinator.request_resolution("second", 0),
            )

            assert sum(result is not None for result in results) == 1
            assert coordinator.game.turn == 1
            assert recorder.types().count("state") == 1
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_stale_request_ignored(self):
        """A request for another turn is ignored."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1")

            assert await coordinator.request_resolution("old timer", 5) is None
            assert coordinator.game.turn == 0
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_timer_requests_commands_then_resolves(self):
        """Timeout asks laggards for commands, then resolves."""

        async def scenario():
            coordinator, registry, recorder = create_coordinator(
                turn_time=0.02, command_grace=0.01
            )
            await start_game(coordinator, registry, "p1", "p2")
            await coordinator.submit("p1", [])

            await asyncio.sleep(0.2)
            await coordinator.shutdown()

            assert coordinator.game.turn >= 1
            request = recorder.events[recorder.types().index("requestCommands")]
            assert request == ("requestCommands", {"turn": 0}, ["p2"])
            assert recorder.types().index("state") > recorder.types().index("requestCommands")

        asyncio.run(scenario())

    def test_join_queued_behind_last_submission(self):
        """A player who joins while the last submission is in flight is waited on."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1")

            await coordinator._lock.acquire()
            submitting = asyncio.create_task(coordinator.submit("p1", []))
            joining = asyncio.create_task(join(coordinator, registry, "p2"))
            await asyncio.sleep(0)
            coordinator._lock.release()
            await asyncio.gather(submitting, joining)

            assert coordinator.game.turn == 0
            assert coordinator.game.waiting_on == {"p2"}
            assert coordinator.state is TurnState.AWAITING_COMMANDS

            await coordinator.submit("p2", [])
            assert coordinator.game.turn == 1
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_failed_resolution_reopens_turn(self):
        """A pipeline error is logged and the same turn opens again."""

        class FailingPipeline:
            def resolve(self, game):
                raise RuntimeError("boom")

        async def scenario():
            coordinator, registry, recorder = create_coordinator()
            coordinator.pipeline = FailingPipeline()
            await start_game(coordinator, registry, "p1")

            result = await coordinator.submit("p1", [])

            assert result.accepted
            assert coordinator.game.turn == 0
            assert coordinator.state is TurnState.AWAITING_COMMANDS
            assert not coordinator.resolution_started
            assert coordinator.game.waiting_on == {"p1"}
            assert recorder.types() == ["turnStarted", "turnStarted"]
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_join_mid_game_is_waited_on(self):
        """A player joining mid-turn must submit before it resolves."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1", "p2")

            await join(coordinator, registry, "p3")
            await coordinator.submit("p1", [])
            await coordinator.submit("p2", [])
            assert coordinator.game.turn == 0

            await coordinator.submit("p3", [])
            assert coordinator.game.turn == 1
            await coordinator.shutdown()

        asyncio.run(scenario())


class TestPlayerLeaving:
    def test_last_waiting_player_leaving_resolves(self):
        """The last waited-on player leaving resolves the turn."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1", "p2")
            game = coordinator.game
            await coordinator.submit("p1", [])

            await coordinator.player_left("p2")

            assert game.turn == 1
            assert "p2" not in game.players
            assert game.owned_regions("p2") == []
            await coordinator.shutdown()

        asyncio.run(scenario())

    def test_removal_during_resolution_is_deferred(self):
        """A player leaving mid-resolution is removed afterwards."""

        seen = {}

        class LeavingRecorder(Recorder):
            async def __call__(self, event_type, payload, recipients=None):
                await super().__call__(event_type, payload, recipients)
                if event_type == "state" and "players" not in seen:
                    await coordinator.player_left("p2")
                    seen["players"] = set(coordinator.game.players)

        async def scenario():
            nonlocal coordinator
            coordinator, registry, _ = create_coordinator(notify=LeavingRecorder())
            await start_game(coordinator, registry, "p1", "p2")

            await coordinator.submit("p1", [])
            await coordinator.submit("p2", [])

            assert seen["players"] == {"p1", "p2"}
            assert "p2" not in coordinator.game.players
            assert coordinator.pending_removals == []
            assert coordinator.game.waiting_on == {"p1"}
            await coordinator.shutdown()

        coordinator = None
        asyncio.run(scenario())

    def test_everyone_leaving_stops_timer(self):
        """The turn timer stops when no players remain."""

        async def scenario():
            coordinator, registry, _ = create_coordinator()
            await start_game(coordinator, registry, "p1")

            await coordinator.player_left("p1")

            assert coordinator.game.players == {}
            assert coordinator._timer_task is None
            assert coordinator.game.turn == 0

        asyncio.run(scenario())
