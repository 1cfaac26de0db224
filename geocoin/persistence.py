"""
Storage backends and the persistence adapter for player state.

This module provides the abstract StorageStrategy interface (a string-keyed
store of JSON strings, modelled on browser local storage), two concrete
backends, and the PersistenceAdapter that maps a PersistedSnapshot onto
independent keys.

Two included backends:
1. InMemoryStorage - Dict-based storage, data lost on exit (testing, demos)
2. JsonFileStorage - One human-readable JSON file on disk (real sessions)

Key responsibilities:
- Write every snapshot field under its own key after each move or transfer
- Read any single key back with a typed default (never assume it exists)
- Clear everything on explicit reset
- Absorb storage failures: the game keeps running on in-memory state

Usage pattern:
    adapter = PersistenceAdapter(JsonFileStorage("geocoin_save.json"))
    snapshot = adapter.load_snapshot(defaults)
    ...
    adapter.save(controller.snapshot())
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from .errors import PersistenceUnavailable
from .logging_utils import log_deterministic, log_error
from .schemas import CacheRecord, Coin, LatLng, PersistedSnapshot, WindowBounds

# Storage keys. Each is loaded independently with its own default.
KEY_PLAYER_LOCATION = "playerLocation"
KEY_PLAYER_VIEW = "playerView"
KEY_PLAYER_HISTORY = "playerHistory"
KEY_WINDOW_MIN_I = "windowMinI"
KEY_WINDOW_MAX_I = "windowMaxI"
KEY_WINDOW_MIN_J = "windowMinJ"
KEY_WINDOW_MAX_J = "windowMaxJ"
KEY_PLAYER_COINS = "playerCoins"
KEY_CACHE_STORE = "cacheStore"

PERSISTED_KEYS = (
    KEY_PLAYER_LOCATION,
    KEY_PLAYER_VIEW,
    KEY_PLAYER_HISTORY,
    KEY_WINDOW_MIN_I,
    KEY_WINDOW_MAX_I,
    KEY_WINDOW_MIN_J,
    KEY_WINDOW_MAX_J,
    KEY_PLAYER_COINS,
    KEY_CACHE_STORE,
)


class StorageStrategy(ABC):
    """Abstract string-keyed store.

    Values are JSON text. Implementations raise PersistenceUnavailable when the
    underlying medium cannot be read or written; they never return partial data.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or None when absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def set_items(self, items: Dict[str, str]) -> None:
        """Store several keys in one write."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``; no-op when absent."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key in one step."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return the stored keys."""


class InMemoryStorage(StorageStrategy):
    """In-memory storage using a Python dict (no files).

    Perfect for unit tests and throwaway sessions. Data is lost on exit.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def set_items(self, items: Dict[str, str]) -> None:
        self.items.update(items)

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def clear(self) -> None:
        self.items.clear()

    def keys(self) -> List[str]:
        return list(self.items)


class JsonFileStorage(StorageStrategy):
    """File-based storage holding every key in a single JSON object.

    File format:
    ```
    {
      "playerLocation": "{\\"lat\\": 36.98, \\"lng\\": -122.06}",
      "playerHistory": "[...]",
      ...
    }
    ```

    Writes go to a sibling temporary file followed by ``os.replace`` so a crash
    never leaves a half-written save. Transient OSErrors are retried with
    tenacity before surfacing as PersistenceUnavailable.
    """

    def __init__(self, path: Path | str, *, retries: int = 3):
        self.path = Path(path)
        self.retries = retries
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        if not self.path.exists():
            self._data = {}
            return self._data
        try:
            text = self.path.read_text("utf-8")
            payload = json.loads(text) if text.strip() else {}
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceUnavailable(operation="read", key=None, underlying=exc) from exc
        if not isinstance(payload, dict):
            raise PersistenceUnavailable(
                operation="read",
                key=None,
                underlying=ValueError(f"{self.path} does not hold a JSON object"),
            )
        self._data = {str(key): str(value) for key, value in payload.items()}
        return self._data

    def _write_file(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True), "utf-8")
        os.replace(tmp_path, self.path)

    def _flush(self, data: Dict[str, str], key: Optional[str]) -> None:
        try:
            for attempt in Retrying(
                retry=retry_if_exception_type(OSError),
                stop=stop_after_attempt(self.retries),
                reraise=True,
            ):
                with attempt:
                    self._write_file(data)
        except OSError as exc:
            raise PersistenceUnavailable(operation="write", key=key, underlying=exc) from exc

    def _load_for_write(self) -> Dict[str, str]:
        try:
            return dict(self._load())
        except PersistenceUnavailable as exc:
            # A save file that cannot be parsed is replaced by the next write
            log_error(f"Overwriting unreadable save file {self.path}: {exc}")
            return {}

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load_for_write()
        data[key] = value
        self._flush(data, key=key)
        self._data = data

    def set_items(self, items: Dict[str, str]) -> None:
        data = self._load_for_write()
        data.update(items)
        self._flush(data, key=None)
        self._data = data

    def remove_item(self, key: str) -> None:
        data = dict(self._load())
        if data.pop(key, None) is None:
            return
        self._flush(data, key=key)
        self._data = data

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceUnavailable(operation="clear", key=None, underlying=exc) from exc
        self._data = {}

    def keys(self) -> List[str]:
        return list(self._load())


class PersistenceAdapter:
    """Maps PersistedSnapshot fields onto independent storage keys.

    Every failure is absorbed here: ``save`` and ``reset`` report False and
    ``load`` hands back the caller's default, so the session continues on
    in-memory state.
    """

    def __init__(self, storage: Optional[StorageStrategy] = None):
        self.storage = storage or InMemoryStorage()

    def save(self, snapshot: PersistedSnapshot) -> bool:
        """Write every snapshot field under its own key."""
        bounds = snapshot.window_bounds
        values: Dict[str, Any] = {
            KEY_PLAYER_LOCATION: snapshot.player_location.model_dump(mode="json"),
            KEY_PLAYER_VIEW: snapshot.view_anchor.model_dump(mode="json"),
            KEY_PLAYER_HISTORY: [p.model_dump(mode="json") for p in snapshot.movement_history],
            KEY_WINDOW_MIN_I: bounds.min_i,
            KEY_WINDOW_MAX_I: bounds.max_i,
            KEY_WINDOW_MIN_J: bounds.min_j,
            KEY_WINDOW_MAX_J: bounds.max_j,
            KEY_PLAYER_COINS: [c.model_dump(mode="json") for c in snapshot.inventory],
            KEY_CACHE_STORE: [r.model_dump(mode="json") for r in snapshot.caches],
        }
        try:
            self.storage.set_items({key: json.dumps(value) for key, value in values.items()})
        except PersistenceUnavailable as exc:
            log_error(f"Progress not saved: {exc}")
            return False
        log_deterministic(
            f"Saved snapshot ({len(snapshot.movement_history)} step(s), "
            f"{len(snapshot.caches)} cache(s))"
        )
        return True

    def load(self, key: str, default: Any, model: Any = None) -> Any:
        """Return the stored value for ``key`` or ``default``.

        Args:
            key: Storage key
            default: Returned when the key is absent, empty, unreadable or invalid
            model: Optional type (e.g. ``LatLng`` or ``List[Coin]``) the value is
                validated against with a pydantic TypeAdapter
        """
        try:
            raw = self.storage.get_item(key)
        except PersistenceUnavailable as exc:
            log_error(f"Using default for '{key}': {exc}")
            return default
        if raw is None or raw == "":
            return default
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            log_error(f"Using default for '{key}': stored value is not JSON ({exc})")
            return default
        if model is None:
            return value
        try:
            return TypeAdapter(model).validate_python(value)
        except ValidationError as exc:
            log_error(f"Using default for '{key}': {exc.error_count()} validation error(s)")
            return default

    def load_snapshot(self, defaults: PersistedSnapshot) -> PersistedSnapshot:
        """Assemble a snapshot key by key, falling back to ``defaults`` per field."""
        bounds = defaults.window_bounds
        inventory, caches = self._load_coin_owners(defaults)
        return PersistedSnapshot(
            player_location=self.load(KEY_PLAYER_LOCATION, defaults.player_location, LatLng),
            view_anchor=self.load(KEY_PLAYER_VIEW, defaults.view_anchor, LatLng),
            movement_history=self.load(
                KEY_PLAYER_HISTORY, list(defaults.movement_history), List[LatLng]
            ),
            window_bounds=WindowBounds(
                min_i=self.load(KEY_WINDOW_MIN_I, bounds.min_i, int),
                max_i=self.load(KEY_WINDOW_MAX_I, bounds.max_i, int),
                min_j=self.load(KEY_WINDOW_MIN_J, bounds.min_j, int),
                max_j=self.load(KEY_WINDOW_MAX_J, bounds.max_j, int),
            ),
            inventory=inventory,
            caches=caches,
        )

    def _load_coin_owners(
        self, defaults: PersistedSnapshot
    ) -> Tuple[List[Coin], List[CacheRecord]]:
        """Load inventory and caches together; both fall back if either is unusable.

        Every coin lives in exactly one of the two, so restoring one half
        next to a default for the other would duplicate or lose coins.
        """
        inventory = self.load(KEY_PLAYER_COINS, None, List[Coin])
        caches = self.load(KEY_CACHE_STORE, None, List[CacheRecord])
        if inventory is None or caches is None:
            if inventory is not None or caches is not None:
                log_error("Saved coins and caches are out of step; starting both fresh")
            return list(defaults.inventory), list(defaults.caches)
        return inventory, caches

    def has_saved_state(self) -> bool:
        try:
            stored = set(self.storage.keys())
        except PersistenceUnavailable:
            return False
        return any(key in stored for key in PERSISTED_KEYS)

    def reset(self) -> bool:
        """Remove every persisted key in a single storage operation."""
        try:
            self.storage.clear()
        except PersistenceUnavailable as exc:
            log_error(f"Saved progress could not be cleared: {exc}")
            return False
        log_deterministic("Cleared saved progress")
        return True
