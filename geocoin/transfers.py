"""Coin transfer protocol between caches and the player inventory.

Each coin moves through ``InCache(c) -> InInventory -> InCache(c')``. These
functions are the only code paths that perform those transitions. They never
raise for recoverable game errors: failures come back as a ``TransferResult``
with ``ok=False`` so UI collaborators can simply do nothing.
"""

from __future__ import annotations

from typing import Optional

from .caches import CacheStore
from .errors import GeocoinError
from .inventory import PlayerInventory
from .logging_utils import log_error, log_player
from .schemas import Coin, GridCoordinate, TransferResult


def _failed(action: str, coordinate: GridCoordinate, exc: GeocoinError) -> TransferResult:
    log_error(f"{action} at {coordinate.label} ignored: {exc}")
    return TransferResult(
        action=action,
        coordinate=coordinate,
        ok=False,
        error=type(exc).__name__,
        message=str(exc),
    )


def transfer_to_inventory(
    store: CacheStore,
    inventory: PlayerInventory,
    coordinate: GridCoordinate,
    coin: Optional[Coin] = None,
) -> TransferResult:
    """Pick a coin out of the cache at ``coordinate`` into the inventory."""
    try:
        picked = store.pick(coordinate, coin)
    except GeocoinError as exc:
        return _failed("pick", coordinate, exc)

    inventory.push(picked)
    log_player(f"Picked {picked.label} from {coordinate.label}")
    return TransferResult(action="pick", coordinate=coordinate, ok=True, coin=picked)


def transfer_to_cache(
    store: CacheStore,
    inventory: PlayerInventory,
    coordinate: GridCoordinate,
    coin: Optional[Coin] = None,
) -> TransferResult:
    """Drop a held coin (the most recent one by default) into the cache at ``coordinate``."""
    try:
        dropped = store.drop(coordinate, coin, inventory)
    except GeocoinError as exc:
        return _failed("drop", coordinate, exc)

    log_player(f"Dropped {dropped.label} into {coordinate.label}")
    return TransferResult(action="drop", coordinate=coordinate, ok=True, coin=dropped)
