"""
Cache store: lazily materialized coin caches keyed by grid cell.

A cache comes into existence the first time its cell is visited. Its initial
content is derived once from the determinism function and never re-rolled:
asking for the same cell again returns the live record, including any coins
the player has taken out or dropped in since.

Key responsibilities:
- Materialize caches deterministically (count and serials from ``luck``)
- Look up caches by exact cell identity (dict key, never geometric search)
- Move single coins between a cache and the player inventory

Conservation: coins enter the world only through materialization and after
that move only through ``pick`` and ``drop``. Each move removes the coin from
one owner before handing it to the other, so a coin is never held twice and
never lost.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .errors import CacheNotFound, CoinNotAvailable, InventoryEmpty
from .inventory import PlayerInventory
from .logging_utils import log_deterministic
from .luck import initial_coin_count
from .schemas import CacheRecord, Coin, GridCoordinate


class CacheStore:
    """Mapping from ``GridCoordinate`` to ``CacheRecord``.

    Storage structure:
    - records: Dict[GridCoordinate, CacheRecord] - one record per materialized cell

    Performance characteristics:
    - Lookup/materialize: O(1) dict access
    - Pick/drop: O(coins in the cache), caches hold a handful of coins
    """

    def __init__(self, max_coins: int):
        if max_coins <= 0:
            raise ValueError(f"max_coins must be positive, got {max_coins}")
        self.max_coins = max_coins
        self._records: Dict[GridCoordinate, CacheRecord] = {}

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[GridCoordinate]:
        return iter(list(self._records))

    def materialize_if_absent(self, coordinate: GridCoordinate) -> CacheRecord:
        """Return the cache at ``coordinate``, creating it on first visit.

        New caches hold ``floor(luck("i,j,initialValue") * max_coins)`` coins
        with serials ``1..count``, all homed at ``coordinate``. Existing caches
        are returned untouched.
        """
        record = self._records.get(coordinate)
        if record is not None:
            return record

        count = initial_coin_count(coordinate.i, coordinate.j, self.max_coins)
        coins = [
            Coin(i=coordinate.i, j=coordinate.j, serial=serial)
            for serial in range(1, count + 1)
        ]
        record = CacheRecord(coordinate=coordinate, coins=coins)
        self._records[coordinate] = record
        log_deterministic(f"Materialized cache {coordinate.label} with {count} coin(s)")
        return record

    def get(self, coordinate: GridCoordinate) -> CacheRecord:
        """Return the cache at ``coordinate`` or raise ``CacheNotFound``."""
        record = self._records.get(coordinate)
        if record is None:
            raise CacheNotFound(coordinate)
        return record

    def find(self, coordinate: GridCoordinate) -> Optional[CacheRecord]:
        return self._records.get(coordinate)

    def records(self) -> List[CacheRecord]:
        """Deep copies of every materialized cache, in materialization order."""
        return [record.model_copy(deep=True) for record in self._records.values()]

    def pick(self, coordinate: GridCoordinate, coin: Optional[Coin] = None) -> Coin:
        """Remove a coin from the cache and return it for the inventory.

        Args:
            coordinate: Cell of the cache being viewed
            coin: Specific coin to take; defaults to the most recently added

        Raises:
            CacheNotFound: No cache is materialized at ``coordinate``
            CoinNotAvailable: Cache is empty or does not hold ``coin``
        """
        record = self.get(coordinate)
        if record.coin_count == 0:
            raise CoinNotAvailable(where=f"cache {coordinate.label}", coordinate=coordinate)
        if coin is None:
            return record.coins.pop()
        if not record.holds(coin):
            raise CoinNotAvailable(
                where=f"cache {coordinate.label}", coin=coin, coordinate=coordinate
            )
        record.coins.remove(coin)
        return coin

    def drop(
        self,
        coordinate: GridCoordinate,
        coin: Optional[Coin],
        inventory: PlayerInventory,
    ) -> Coin:
        """Move a held coin from ``inventory`` into the cache at ``coordinate``.

        The coin keeps its home cell; it simply now lives here.

        Args:
            coordinate: Cell of the cache being viewed
            coin: Specific coin to drop; defaults to the top of the inventory
            inventory: The player's inventory

        Raises:
            InventoryEmpty: Player holds no coins
            CoinNotAvailable: Player does not hold ``coin``
            CacheNotFound: No cache is materialized at ``coordinate``
        """
        # Validate everything before mutating either side
        if len(inventory) == 0:
            raise InventoryEmpty()
        target = coin if coin is not None else inventory.peek()
        if target not in inventory:
            raise CoinNotAvailable(where="inventory", coin=target)
        record = self.get(coordinate)

        inventory.remove(target)
        record.coins.append(target)
        return target

    def restore(self, records: Iterable[CacheRecord]) -> int:
        """Adopt previously persisted caches, skipping cells already present.

        Returns:
            Number of records adopted
        """
        adopted = 0
        for record in records:
            if record.coordinate in self._records:
                continue
            self._records[record.coordinate] = record.model_copy(deep=True)
            adopted += 1
        return adopted

    def clear(self) -> None:
        self._records.clear()
