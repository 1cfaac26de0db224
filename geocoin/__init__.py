"""
Geocoin - location-grounded coin collecting on a deterministic grid.

A player walks a grid laid over real-world coordinates. Some cells hold caches
of uniquely numbered coins; the player moves coins between caches and an
inventory. Cache placement and contents derive from a pure function of the
cell, so the world regenerates identically across sessions.

No rendering, no sensors, no global config required.
All collaborators injected by the caller.
"""

__version__ = "0.1.0"

# Main controller
from .game import GameController, GameState

# Core state engine
from .board import Board
from .caches import CacheStore
from .inventory import PlayerInventory
from .luck import cell_key, initial_coin_count, luck, spawns_cache
from .transfers import transfer_to_cache, transfer_to_inventory
from .visibility import DIRECTIONS, VisibilityWindow, cells_to_consider, spawn_candidates

# Persistence
from .persistence import (
    InMemoryStorage,
    JsonFileStorage,
    PersistenceAdapter,
    StorageStrategy,
)

# Collaborator interfaces
from .location import LocationSource, LocationWatcher, ScriptedLocationSource
from .render import AsciiMapRenderer, GameObserver

# Errors
from .errors import (
    CacheNotFound,
    CoinNotAvailable,
    GeocoinError,
    InventoryEmpty,
    PersistenceUnavailable,
)

# Schemas
from .schemas import (
    CacheRecord,
    CellBounds,
    Coin,
    GridCoordinate,
    LatLng,
    PersistedSnapshot,
    TransferResult,
    WindowBounds,
)

__all__ = [
    # Main class
    "GameController",
    "GameState",
    # Core
    "Board",
    "CacheStore",
    "PlayerInventory",
    "VisibilityWindow",
    "DIRECTIONS",
    "cells_to_consider",
    "spawn_candidates",
    "luck",
    "cell_key",
    "spawns_cache",
    "initial_coin_count",
    "transfer_to_inventory",
    "transfer_to_cache",
    # Persistence
    "StorageStrategy",
    "InMemoryStorage",
    "JsonFileStorage",
    "PersistenceAdapter",
    # Collaborators
    "LocationSource",
    "ScriptedLocationSource",
    "LocationWatcher",
    "GameObserver",
    "AsciiMapRenderer",
    # Errors
    "GeocoinError",
    "CacheNotFound",
    "CoinNotAvailable",
    "InventoryEmpty",
    "PersistenceUnavailable",
    # Schemas
    "LatLng",
    "GridCoordinate",
    "CellBounds",
    "Coin",
    "CacheRecord",
    "WindowBounds",
    "PersistedSnapshot",
    "TransferResult",
]
