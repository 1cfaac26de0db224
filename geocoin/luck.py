"""Deterministic pseudo-random values keyed by strings.

Every spawning decision is a pure function of the cell coordinates, so the
same cells hold the same caches in every session and after every reload.
"""

from __future__ import annotations

import random
import zlib

INITIAL_VALUE_SALT = "initialValue"


def cell_key(i: int, j: int, *salt: str) -> str:
    """Build the lookup key for a cell, e.g. ``"3,-2"`` or ``"3,-2,initialValue"``."""
    return ",".join([str(i), str(j), *salt])


def luck(key: str) -> float:
    """Return a reproducible float in ``[0, 1)`` for ``key``.

    Uses CRC32 of the UTF-8 key to seed a private generator. Python's built-in
    ``hash()`` is salted per process and would break reproducibility.
    """
    seed = zlib.crc32(key.encode("utf-8")) & 0xFFFFFFFF
    return random.Random(seed).random()


def spawns_cache(i: int, j: int, probability: float) -> bool:
    """True when cell ``(i, j)`` holds a cache at the given spawn probability."""
    return luck(cell_key(i, j)) < probability


def initial_coin_count(i: int, j: int, max_coins: int) -> int:
    """Number of coins a freshly materialized cache at ``(i, j)`` starts with."""
    return int(luck(cell_key(i, j, INITIAL_VALUE_SALT)) * max_coins)
