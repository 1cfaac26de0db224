"""Tests for the location channel and controller follow loop."""

import asyncio

import pytest

from geocoin import GridCoordinate, LocationSource, LocationWatcher, ScriptedLocationSource


def walk(board, cells):
    return [board.cell_center(GridCoordinate(i=i, j=j)) for i, j in cells]


@pytest.mark.asyncio
async def test_follow_applies_every_position_in_order(make_game, board):
    game = make_game(radius=1)
    game.start()
    positions = walk(board, [(1, 0), (2, 0), (2, 1)])
    watcher = LocationWatcher(ScriptedLocationSource(positions))

    assert watcher.start() is True
    applied = await game.follow(watcher)

    assert applied == 3
    assert game.player_cell == GridCoordinate(i=2, j=1)
    assert game.state.movement_history[-3:] == positions
    assert watcher.is_active is False


@pytest.mark.asyncio
async def test_only_one_watch_registration(make_game, board):
    watcher = LocationWatcher(ScriptedLocationSource(walk(board, [(0, 1)]), delay=10.0))

    assert watcher.start() is True
    assert watcher.start() is False
    assert watcher.registrations == 1

    await watcher.stop()
    assert watcher.is_active is False
    assert await watcher.stop() is False


@pytest.mark.asyncio
async def test_stop_wakes_consumer_and_discards_pending(make_game, board):
    game = make_game(radius=1)
    game.start()
    history_before = list(game.state.movement_history)
    watcher = LocationWatcher(ScriptedLocationSource(walk(board, [(5, 5)]), delay=10.0))

    watcher.start()
    follower = asyncio.create_task(game.follow(watcher))
    await asyncio.sleep(0)
    await watcher.stop()

    assert await follower == 0
    assert game.state.movement_history == history_before


@pytest.mark.asyncio
async def test_toggle_flips_tracking(board):
    watcher = LocationWatcher(ScriptedLocationSource(walk(board, [(0, 1)]), delay=10.0))

    assert await watcher.toggle() is True
    assert watcher.is_active
    assert await watcher.toggle() is False
    assert await watcher.next_position() is None


@pytest.mark.asyncio
async def test_bounded_queue_applies_backpressure(board):
    positions = walk(board, [(i, 0) for i in range(10)])
    watcher = LocationWatcher(ScriptedLocationSource(positions), maxsize=2)

    watcher.start()
    for _ in range(20):
        await asyncio.sleep(0)
    # The pump cannot run ahead of the consumer by more than the queue size
    assert watcher._queue.qsize() <= 2

    received = []
    while (position := await watcher.next_position()) is not None:
        received.append(position)
    assert received == positions


def test_watcher_rejects_empty_queue(board):
    with pytest.raises(ValueError):
        LocationWatcher(ScriptedLocationSource([]), maxsize=0)


class FailingSource(LocationSource):
    """Delivers the given positions, then loses its fix."""

    def __init__(self, positions):
        self.positions = positions

    async def watch(self):
        for position in self.positions:
            await asyncio.sleep(0)
            yield position
        raise OSError("position unavailable")


@pytest.mark.asyncio
async def test_sensor_failure_ends_the_watch(make_game, board, capsys):
    game = make_game(radius=1)
    game.start()
    watcher = LocationWatcher(FailingSource(walk(board, [(1, 0)])))

    watcher.start()
    applied = await asyncio.wait_for(game.follow(watcher), timeout=1.0)

    assert applied == 1
    assert game.player_cell == GridCoordinate(i=1, j=0)
    assert watcher.is_active is False
    assert "[!] Location sensor failed: position unavailable" in capsys.readouterr().out

    # The watch can be registered again afterwards
    assert watcher.start() is True
    await watcher.stop()
