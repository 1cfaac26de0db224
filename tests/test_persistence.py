"""Tests for storage backends and the persistence adapter."""

import json
from typing import List

from geocoin import (
    CacheRecord,
    Coin,
    GridCoordinate,
    InMemoryStorage,
    JsonFileStorage,
    LatLng,
    PersistedSnapshot,
    PersistenceAdapter,
    PersistenceUnavailable,
    StorageStrategy,
    WindowBounds,
)
from geocoin.persistence import (
    KEY_CACHE_STORE,
    KEY_PLAYER_HISTORY,
    KEY_PLAYER_LOCATION,
    KEY_WINDOW_MIN_J,
)


def make_snapshot() -> PersistedSnapshot:
    start = LatLng(lat=36.98949379578401, lng=-122.06277128548504)
    return PersistedSnapshot(
        player_location=start.offset(2e-4, -1e-4),
        view_anchor=start,
        movement_history=[start, start.offset(1e-4, 0.0), start.offset(2e-4, -1e-4)],
        window_bounds=WindowBounds(min_i=2, max_i=2, min_j=-1, max_j=-1),
        inventory=[Coin(i=3, j=-2, serial=1)],
        caches=[
            CacheRecord(coordinate=GridCoordinate(i=3, j=-2), coins=[Coin(i=3, j=-2, serial=2)]),
        ],
    )


def make_defaults() -> PersistedSnapshot:
    origin = LatLng(lat=0.0, lng=0.0)
    return PersistedSnapshot(player_location=origin, view_anchor=origin, movement_history=[origin])


class BrokenStorage(StorageStrategy):
    """Storage whose medium is gone."""

    def _fail(self, operation: str):
        raise PersistenceUnavailable(operation=operation, key=None, underlying=OSError("disk gone"))

    def get_item(self, key):
        self._fail("read")

    def set_item(self, key, value):
        self._fail("write")

    def set_items(self, items):
        self._fail("write")

    def remove_item(self, key):
        self._fail("remove")

    def clear(self):
        self._fail("clear")

    def keys(self):
        self._fail("read")


def test_snapshot_round_trip_in_memory():
    adapter = PersistenceAdapter(InMemoryStorage())
    snapshot = make_snapshot()

    assert adapter.save(snapshot) is True
    loaded = adapter.load_snapshot(make_defaults())

    assert loaded == snapshot
    assert loaded.player_location == snapshot.player_location
    assert loaded.movement_history == snapshot.movement_history
    assert loaded.window_bounds == snapshot.window_bounds


def test_fields_are_independent_keys():
    storage = InMemoryStorage()
    PersistenceAdapter(storage).save(make_snapshot())

    assert json.loads(storage.items[KEY_WINDOW_MIN_J]) == -1
    assert len(json.loads(storage.items[KEY_PLAYER_HISTORY])) == 3

    adapter = PersistenceAdapter(storage)
    assert adapter.load(KEY_PLAYER_LOCATION, None, LatLng) == make_snapshot().player_location


def test_load_without_save_returns_defaults():
    adapter = PersistenceAdapter(InMemoryStorage())
    defaults = make_defaults()

    assert adapter.load_snapshot(defaults) == defaults
    assert adapter.load("missing", 42) == 42
    assert adapter.has_saved_state() is False


def test_invalid_values_fall_back_to_default():
    storage = InMemoryStorage(
        {
            KEY_PLAYER_LOCATION: "{not json",
            KEY_PLAYER_HISTORY: json.dumps([{"lat": "north"}]),
            KEY_WINDOW_MIN_J: "",
        }
    )
    adapter = PersistenceAdapter(storage)
    defaults = make_defaults()

    assert adapter.load(KEY_PLAYER_LOCATION, defaults.player_location, LatLng) == defaults.player_location
    assert adapter.load(KEY_PLAYER_HISTORY, [], List[LatLng]) == []
    assert adapter.load(KEY_WINDOW_MIN_J, 0, int) == 0


def test_reset_clears_everything():
    storage = InMemoryStorage()
    adapter = PersistenceAdapter(storage)
    adapter.save(make_snapshot())
    assert adapter.has_saved_state() is True

    assert adapter.reset() is True
    assert storage.keys() == []
    assert adapter.load_snapshot(make_defaults()) == make_defaults()


def test_unavailable_storage_degrades_to_defaults(capsys):
    adapter = PersistenceAdapter(BrokenStorage())

    assert adapter.save(make_snapshot()) is False
    assert adapter.load_snapshot(make_defaults()) == make_defaults()
    assert adapter.reset() is False
    assert adapter.has_saved_state() is False
    assert "[!]" in capsys.readouterr().out


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "saves" / "game.json"
    PersistenceAdapter(JsonFileStorage(path)).save(make_snapshot())

    assert path.exists()
    assert not path.with_name("game.json.tmp").exists()

    # A fresh backend reads what the previous one wrote
    reloaded = PersistenceAdapter(JsonFileStorage(path)).load_snapshot(make_defaults())
    assert reloaded == make_snapshot()


def test_json_file_storage_clear(tmp_path):
    path = tmp_path / "game.json"
    storage = JsonFileStorage(path)
    storage.set_item("a", "1")
    storage.set_item("b", "2")
    storage.remove_item("a")
    assert JsonFileStorage(path).keys() == ["b"]

    storage.clear()
    assert not path.exists()
    assert storage.keys() == []


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "game.json"
    path.write_text("{{{", "utf-8")
    adapter = PersistenceAdapter(JsonFileStorage(path))

    assert adapter.load_snapshot(make_defaults()) == make_defaults()


def test_json_file_storage_retries_transient_errors(tmp_path, monkeypatch):
    storage = JsonFileStorage(tmp_path / "game.json", retries=3)
    original = JsonFileStorage._write_file
    calls = {"count": 0}

    def flaky(self, data):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OSError("temporarily locked")
        return original(self, data)

    monkeypatch.setattr(JsonFileStorage, "_write_file", flaky)
    storage.set_item("key", "\"value\"")

    assert calls["count"] == 2
    assert JsonFileStorage(tmp_path / "game.json").get_item("key") == "\"value\""


def test_json_file_storage_gives_up_after_retries(tmp_path, monkeypatch):
    storage = JsonFileStorage(tmp_path / "game.json", retries=2)
    calls = {"count": 0}

    def always_fails(self, data):
        calls["count"] += 1
        raise OSError("read-only file system")

    monkeypatch.setattr(JsonFileStorage, "_write_file", always_fails)
    adapter = PersistenceAdapter(storage)

    assert adapter.save(make_snapshot()) is False
    assert calls["count"] == 2
    # Nothing was half-applied to the in-memory view either
    assert storage.keys() == []


def test_coin_keys_fall_back_together():
    storage = InMemoryStorage()
    adapter = PersistenceAdapter(storage)
    adapter.save(make_snapshot())
    storage.items[KEY_CACHE_STORE] = json.dumps([{"coordinate": "nowhere"}])

    loaded = adapter.load_snapshot(make_defaults())

    assert loaded.inventory == []
    assert loaded.caches == []
    assert loaded.player_location == make_snapshot().player_location


def test_save_replaces_unreadable_file(tmp_path, capsys):
    path = tmp_path / "game.json"
    path.write_text("{{{", "utf-8")
    adapter = PersistenceAdapter(JsonFileStorage(path))

    assert adapter.save(make_snapshot()) is True
    assert "[!] Overwriting unreadable save file" in capsys.readouterr().out
    reloaded = PersistenceAdapter(JsonFileStorage(path)).load_snapshot(make_defaults())
    assert reloaded == make_snapshot()
