"""Shared fixtures for Geocoin tests."""

import pytest

from geocoin import Board, GameController, InMemoryStorage, LatLng, PersistenceAdapter

ORIGIN = LatLng(lat=36.98949379578401, lng=-122.06277128548504)
TILE = 1e-4


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    """Keep log lines free of ANSI codes and verbose chatter."""
    monkeypatch.setenv("GEOCOIN_NO_COLOR", "1")
    monkeypatch.delenv("GEOCOIN_VERBOSE", raising=False)


@pytest.fixture
def board() -> Board:
    return Board(origin=ORIGIN, tile_degrees=TILE)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def make_game(board, storage):
    """Build controllers sharing one board and one storage backend."""

    def _make(**overrides) -> GameController:
        options = dict(
            board=board,
            persistence=PersistenceAdapter(storage),
            radius=3,
            spawn_probability=1.0,
            max_coins=5,
            step=1,
        )
        options.update(overrides)
        return GameController(**options)

    return _make
