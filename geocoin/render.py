"""Rendering collaborators.

The core never draws anything itself. It reports state changes to
GameObserver instances; AsciiMapRenderer is the text-mode observer used by the
terminal demo and by tests that want a human-readable view of the board.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .board import Board
from .schemas import CacheRecord, CellBounds, Coin, GridCoordinate, LatLng

_DEFAULT_SYMBOLS: Dict[str, str] = {
    "player": "@",
    "trail": "·",
    "empty_cache": "o",
    "many_coins": "+",
    "blank": " ",
}


class GameObserver:
    """Receives state changes from GameController. Override what you need."""

    def on_cache_materialized(
        self, coordinate: GridCoordinate, record: CacheRecord, bounds: CellBounds
    ) -> None:
        pass

    def on_cache_updated(self, coordinate: GridCoordinate, record: CacheRecord) -> None:
        pass

    def on_player_moved(self, position: LatLng, history: Sequence[LatLng]) -> None:
        pass

    def on_inventory_changed(self, coins: Sequence[Coin]) -> None:
        pass

    def on_reset(self) -> None:
        pass


def format_coin_list(coins: Sequence[Coin], *, limit: int = 8) -> str:
    """Comma-separated coin labels, truncated after ``limit`` entries."""
    labels = [coin.label for coin in coins]
    if len(labels) > limit:
        hidden = len(labels) - limit
        labels = labels[:limit] + [f"(+{hidden} more)"]
    return ", ".join(labels)


def format_inventory(coins: Sequence[Coin]) -> str:
    if not coins:
        return "Inventory: empty"
    # Show the top of the stack (next coin to drop) first
    return f"Inventory ({len(coins)}): {format_coin_list(list(reversed(coins)))}"


def format_cache(record: CacheRecord) -> str:
    """Popup text for a cache."""
    header = f"Cache {record.coordinate.label}: {record.coin_count} coin(s)"
    if not record.coins:
        return header
    return f"{header} [{format_coin_list(list(reversed(record.coins)))}]"


class AsciiMapRenderer(GameObserver):
    """Keeps a drawable copy of everything the controller has announced.

    Caches stay on the map once drawn, which gives the explored footprint.
    ``render`` draws a square window of cells around the player, north up.
    """

    def __init__(self, board: Board, *, symbols: Optional[Dict[str, str]] = None):
        self.board = board
        self.symbols = {**_DEFAULT_SYMBOLS, **(symbols or {})}
        self.caches: Dict[GridCoordinate, int] = {}
        self.bounds: Dict[GridCoordinate, CellBounds] = {}
        self.player: Optional[LatLng] = None
        self.trail: List[LatLng] = []
        self.inventory: List[Coin] = []

    def on_cache_materialized(
        self, coordinate: GridCoordinate, record: CacheRecord, bounds: CellBounds
    ) -> None:
        self.caches[coordinate] = record.coin_count
        self.bounds[coordinate] = bounds

    def on_cache_updated(self, coordinate: GridCoordinate, record: CacheRecord) -> None:
        self.caches[coordinate] = record.coin_count

    def on_player_moved(self, position: LatLng, history: Sequence[LatLng]) -> None:
        self.player = position
        self.trail = list(history)

    def on_inventory_changed(self, coins: Sequence[Coin]) -> None:
        self.inventory = list(coins)

    def on_reset(self) -> None:
        self.caches.clear()
        self.bounds.clear()
        self.player = None
        self.trail = []
        self.inventory = []

    def _cache_symbol(self, count: int) -> str:
        if count == 0:
            return self.symbols["empty_cache"]
        if count > 9:
            return self.symbols["many_coins"]
        return str(count)

    def render(self, *, radius: int = 8) -> str:
        """Render the cells within ``radius`` of the player as text rows."""
        if self.player is None:
            return ""
        radius = max(int(radius), 0)
        center = self.board.cell_for_point(self.player)
        trail_cells = {self.board.cell_for_point(point) for point in self.trail}

        lines: List[str] = []
        # North at the top: highest i first
        for i in range(center.i + radius, center.i - radius - 1, -1):
            row: List[str] = []
            for j in range(center.j - radius, center.j + radius + 1):
                cell = GridCoordinate(i=i, j=j)
                if cell == center:
                    row.append(self.symbols["player"])
                elif cell in self.caches:
                    row.append(self._cache_symbol(self.caches[cell]))
                elif cell in trail_cells:
                    row.append(self.symbols["trail"])
                else:
                    row.append(self.symbols["blank"])
            lines.append("".join(row).rstrip())
        return "\n".join(lines)
