"""Error taxonomy for Geocoin.

None of these are fatal to a running session. The cache store and storage
backends raise them; the transfer protocol and the persistence adapter absorb
them and surface only the absence of an expected change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .schemas import Coin, GridCoordinate


class GeocoinError(Exception):
    """Base class for recoverable game errors."""


class CacheNotFound(GeocoinError):
    """Raised when an operation references a coordinate with no materialized cache."""

    def __init__(self, coordinate: "GridCoordinate") -> None:
        self.coordinate = coordinate
        super().__init__(f"No cache materialized at cell {coordinate.label}")


class CoinNotAvailable(GeocoinError):
    """Raised when a requested coin is not where the transfer expects it."""

    def __init__(
        self,
        *,
        where: str,
        coin: Optional["Coin"] = None,
        coordinate: Optional["GridCoordinate"] = None,
    ) -> None:
        self.where = where
        self.coin = coin
        self.coordinate = coordinate
        if coin is None:
            message = f"No coins available in {where}"
        else:
            message = f"Coin {coin.label} is not available in {where}"
        super().__init__(message)


class InventoryEmpty(GeocoinError):
    """Raised when a drop is requested while the player holds no coins."""

    def __init__(self) -> None:
        super().__init__("Player inventory is empty")


class PersistenceUnavailable(GeocoinError):
    """Raised when the storage backend cannot be read or written."""

    def __init__(self, *, operation: str, key: Optional[str], underlying: Exception) -> None:
        self.operation = operation
        self.key = key
        self.underlying = underlying
        target = f" '{key}'" if key else ""
        super().__init__(f"Storage {operation}{target} failed: {underlying}")
