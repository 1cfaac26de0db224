"""
Game controller: the single owner of all mutable game state.

Every state transition (moves, geolocation updates, transfers, reset) runs
synchronously inside one controller method:
1. Mutate state through the cache store, inventory and visibility window
2. Materialize caches newly covered by the window
3. Notify observers (rendering collaborators)
4. Persist a snapshot via the injected adapter

Fully decoupled - board, persistence and observers are injected; anything not
provided falls back to Config defaults and in-memory storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from .board import Board
from .caches import CacheStore
from .config import Config
from .inventory import PlayerInventory
from .location import LocationWatcher
from .logging_utils import log_deterministic, log_info, log_player, log_success
from .persistence import PersistenceAdapter
from .render import GameObserver
from .schemas import (
    CacheRecord,
    Coin,
    GridCoordinate,
    LatLng,
    PersistedSnapshot,
    TransferResult,
    WindowBounds,
)
from .transfers import transfer_to_cache, transfer_to_inventory
from .visibility import DIRECTIONS, VisibilityWindow


@dataclass
class GameState:
    """Everything that changes while the game runs."""

    player_location: LatLng
    view_anchor: LatLng
    window: VisibilityWindow
    caches: CacheStore
    inventory: PlayerInventory
    movement_history: List[LatLng] = field(default_factory=list)


class GameController:
    """
    Routes player actions into the state engine and reports results.

    No file I/O of its own, no global state: persistence is whatever adapter
    was injected, rendering is whatever observers were registered.
    """

    def __init__(
        self,
        *,
        board: Optional[Board] = None,
        persistence: Optional[PersistenceAdapter] = None,
        observers: Optional[List[GameObserver]] = None,
        radius: Optional[int] = None,
        spawn_probability: Optional[float] = None,
        max_coins: Optional[int] = None,
        step: Optional[int] = None,
    ):
        """Initialize controller with injected collaborators.

        Args:
            board: Grid projection (defaults to Config origin and tile size)
            persistence: Adapter used to save/load state (defaults to in-memory)
            observers: Rendering collaborators notified of state changes
            radius: Neighborhood size around the window (Config.NEIGHBORHOOD_SIZE)
            spawn_probability: Chance a cell holds a cache (Config.SPAWN_PROBABILITY)
            max_coins: Upper bound (exclusive) on initial coins (Config.MAX_COINS)
            step: Cells the window slides per player step (Config.MAP_UPDATE_DISTANCE)
        """
        self.board = board or Board(
            origin=LatLng(lat=Config.ORIGIN_LAT, lng=Config.ORIGIN_LNG),
            tile_degrees=Config.TILE_DEGREES,
        )
        self.persistence = persistence or PersistenceAdapter()
        self.observers: List[GameObserver] = list(observers or [])
        self.radius = Config.NEIGHBORHOOD_SIZE if radius is None else radius
        self.spawn_probability = (
            Config.SPAWN_PROBABILITY if spawn_probability is None else spawn_probability
        )
        self.max_coins = Config.MAX_COINS if max_coins is None else max_coins
        self.step = Config.MAP_UPDATE_DISTANCE if step is None else step

        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ValueError(f"spawn_probability must be within [0, 1], got {self.spawn_probability}")
        if self.radius < 0:
            raise ValueError(f"radius cannot be negative, got {self.radius}")
        if self.step <= 0:
            raise ValueError(f"step must be positive, got {self.step}")

        self.state = self._default_state()
        # Cells already reported to observers via on_cache_materialized
        self._announced: Set[GridCoordinate] = set()

    # ------------------------------------------------------------------
    # State construction
    # ------------------------------------------------------------------

    def _default_state(self) -> GameState:
        origin = self.board.origin
        return GameState(
            player_location=origin,
            view_anchor=origin,
            window=VisibilityWindow(
                anchor_cell=self.board.cell_for_point(origin), radius=self.radius
            ),
            caches=CacheStore(self.max_coins),
            inventory=PlayerInventory(),
            movement_history=[origin],
        )

    def _default_snapshot(self) -> PersistedSnapshot:
        origin = self.board.origin
        return PersistedSnapshot(
            player_location=origin,
            view_anchor=origin,
            movement_history=[origin],
            window_bounds=WindowBounds(),
        )

    def _apply_snapshot(self, snapshot: PersistedSnapshot) -> None:
        state = self._default_state()
        state.player_location = snapshot.player_location
        state.view_anchor = snapshot.view_anchor
        state.movement_history = list(snapshot.movement_history) or [snapshot.player_location]
        state.window = VisibilityWindow(
            anchor_cell=self.board.cell_for_point(snapshot.view_anchor),
            radius=self.radius,
            bounds=snapshot.window_bounds,
        )
        state.caches.restore(snapshot.caches)
        # Only keep held coins that are not also sitting in a restored cache
        for coin in snapshot.inventory:
            if coin in state.inventory or self._coin_in_caches(state.caches, coin):
                continue
            state.inventory.push(coin)
        self.state = state

    @staticmethod
    def _coin_in_caches(caches: CacheStore, coin: Coin) -> bool:
        for coordinate in caches:
            record = caches.find(coordinate)
            if record is not None and record.holds(coin):
                return True
        return False

    def snapshot(self) -> PersistedSnapshot:
        """Copy of the current state in persistable form."""
        state = self.state
        return PersistedSnapshot(
            player_location=state.player_location,
            view_anchor=state.view_anchor,
            movement_history=list(state.movement_history),
            window_bounds=state.window.bounds,
            inventory=state.inventory.coins,
            caches=state.caches.records(),
        )

    def save(self) -> bool:
        return self.persistence.save(self.snapshot())

    # ------------------------------------------------------------------
    # Observer fan-out
    # ------------------------------------------------------------------

    def add_observer(self, observer: GameObserver) -> None:
        self.observers.append(observer)

    def _announce(self, coordinate: GridCoordinate, record: CacheRecord) -> None:
        self._announced.add(coordinate)
        bounds = self.board.cell_bounds(coordinate)
        for observer in self.observers:
            observer.on_cache_materialized(coordinate, record.model_copy(deep=True), bounds)

    def _notify_cache(self, coordinate: GridCoordinate) -> None:
        record = self.state.caches.find(coordinate)
        if record is None:
            return
        for observer in self.observers:
            observer.on_cache_updated(coordinate, record.model_copy(deep=True))

    def _notify_player(self) -> None:
        history = list(self.state.movement_history)
        for observer in self.observers:
            observer.on_player_moved(self.state.player_location, history)

    def _notify_inventory(self) -> None:
        coins = self.state.inventory.coins
        for observer in self.observers:
            observer.on_inventory_changed(coins)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> List[GridCoordinate]:
        """Rehydrate from persistence and draw the initial board.

        Safe to call repeatedly: persisted caches are adopted as-is and cells
        that were never materialized regenerate identically from ``luck``.

        Returns:
            Cells materialized for the first time during this call
        """
        resumed = self.persistence.has_saved_state()
        snapshot = self.persistence.load_snapshot(self._default_snapshot())
        self._apply_snapshot(snapshot)
        self._announced = set()

        restored = self.state.caches.records()
        for record in restored:
            self._announce(record.coordinate, record)
        if resumed:
            log_success(
                f"Resumed saved progress: {len(restored)} cache(s), "
                f"{len(self.state.inventory)} coin(s) held"
            )
        else:
            log_info("Starting a new game")

        self._notify_player()
        self._notify_inventory()
        created = self._spawn_visible()
        self.save()
        return created

    def _spawn_visible(self) -> List[GridCoordinate]:
        """Materialize and announce every spawning cell in the window."""
        created: List[GridCoordinate] = []
        for cell in self.state.window.spawn_cells(self.spawn_probability):
            if cell not in self.state.caches:
                created.append(cell)
            record = self.state.caches.materialize_if_absent(cell)
            if cell not in self._announced:
                self._announce(cell, record)
        if created:
            log_deterministic(f"Window {self.state.window.bounds} spawned {len(created)} new cache(s)")
        return created

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move(self, direction: str) -> List[GridCoordinate]:
        """Step the player one cell north, south, east or west.

        Raises:
            ValueError: Unknown direction
        """
        try:
            di, dj = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(
                f"Unknown direction '{direction}'; expected one of {sorted(DIRECTIONS)}"
            ) from None

        tile = self.board.tile_degrees
        self.state.player_location = self.state.player_location.offset(di * tile, dj * tile)
        self.state.window.shift(di, dj, self.step)
        log_player(f"Moved {direction} to {self.board.cell_for_point(self.state.player_location).label}")
        return self._after_move()

    def move_to(self, position: LatLng) -> List[GridCoordinate]:
        """Apply a reported device position.

        The window slides by the cell displacement between the previous and
        the new position, exactly as if the player had stepped there.
        """
        old_cell = self.board.cell_for_point(self.state.player_location)
        new_cell = self.board.cell_for_point(position)
        self.state.player_location = position
        self.state.window.shift(new_cell.i - old_cell.i, new_cell.j - old_cell.j, self.step)
        log_player(f"Location update to {new_cell.label}")
        return self._after_move()

    def _after_move(self) -> List[GridCoordinate]:
        self.state.movement_history.append(self.state.player_location)
        self._notify_player()
        created = self._spawn_visible()
        self.save()
        return created

    async def follow(self, watcher: LocationWatcher) -> int:
        """Apply positions delivered by ``watcher`` until it stops.

        Returns:
            Number of position updates applied
        """
        applied = 0
        while True:
            position = await watcher.next_position()
            if position is None:
                break
            self.move_to(position)
            applied += 1
        return applied

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def request_pick(self, coordinate: GridCoordinate, coin: Optional[Coin] = None) -> TransferResult:
        """Move a coin from the cache at ``coordinate`` into the inventory."""
        result = transfer_to_inventory(self.state.caches, self.state.inventory, coordinate, coin)
        if result.ok:
            self._after_transfer(coordinate)
        return result

    def request_drop(self, coordinate: GridCoordinate, coin: Optional[Coin] = None) -> TransferResult:
        """Move a held coin (top of the stack by default) into the cache at ``coordinate``."""
        result = transfer_to_cache(self.state.caches, self.state.inventory, coordinate, coin)
        if result.ok:
            self._after_transfer(coordinate)
        return result

    def _after_transfer(self, coordinate: GridCoordinate) -> None:
        self._notify_cache(coordinate)
        self._notify_inventory()
        self.save()

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Discard all progress and start over at the origin.

        Args:
            confirm: Optional callable asked before anything is discarded;
                returning False leaves the game untouched.

        Returns:
            True if the game was reset
        """
        if confirm is not None and not confirm():
            log_info("Reset cancelled")
            return False

        self.persistence.reset()
        self.state = self._default_state()
        self._announced = set()
        for observer in self.observers:
            observer.on_reset()

        self._notify_player()
        self._notify_inventory()
        self._spawn_visible()
        self.save()
        log_success("Game reset")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def player_cell(self) -> GridCoordinate:
        return self.board.cell_for_point(self.state.player_location)

    def cache_at(self, coordinate: GridCoordinate) -> Optional[CacheRecord]:
        """Copy of the cache at ``coordinate``, or None if not materialized."""
        record = self.state.caches.find(coordinate)
        return record.model_copy(deep=True) if record is not None else None

    def visible_caches(self) -> List[CacheRecord]:
        """Copies of every cache shown so far, in announcement order."""
        return [
            record
            for record in self.state.caches.records()
            if record.coordinate in self._announced
        ]
