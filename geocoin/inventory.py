"""Player inventory: the coins the player is carrying."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from .errors import CoinNotAvailable, InventoryEmpty
from .schemas import Coin


class PlayerInventory:
    """Ordered stack of held coins.

    Pickup order is preserved. The most recently picked coin sits on top and is
    the one dropped when the player does not name a coin.
    """

    def __init__(self, coins: Optional[Iterable[Coin]] = None):
        self._coins: List[Coin] = []
        for coin in coins or []:
            self.push(coin)

    def __len__(self) -> int:
        return len(self._coins)

    def __iter__(self) -> Iterator[Coin]:
        return iter(list(self._coins))

    def __contains__(self, coin: object) -> bool:
        return coin in self._coins

    @property
    def coins(self) -> List[Coin]:
        """Copy of the held coins, oldest first."""
        return list(self._coins)

    def push(self, coin: Coin) -> None:
        if coin in self._coins:
            raise ValueError(f"Coin {coin.label} is already in the inventory")
        self._coins.append(coin)

    def peek(self) -> Coin:
        if not self._coins:
            raise InventoryEmpty()
        return self._coins[-1]

    def pop(self) -> Coin:
        if not self._coins:
            raise InventoryEmpty()
        return self._coins.pop()

    def remove(self, coin: Coin) -> Coin:
        """Take a specific coin out of the inventory."""
        if not self._coins:
            raise InventoryEmpty()
        if coin not in self._coins:
            raise CoinNotAvailable(where="inventory", coin=coin)
        self._coins.remove(coin)
        return coin

    def clear(self) -> None:
        self._coins.clear()
