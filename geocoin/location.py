"""Device location as a bounded channel of position events.

A LocationSource produces positions on its own schedule. LocationWatcher pumps
them into a bounded asyncio.Queue that the game controller drains one event at
a time, so every position update is applied as a single synchronous state
transition in the same control flow as keyboard moves.
"""

from __future__ import annotations

import asyncio
import contextlib
from abc import ABC, abstractmethod
from typing import AsyncIterator, Iterable, List, Optional

from .logging_utils import log_error, log_info
from .schemas import LatLng


class LocationSource(ABC):
    """Abstract device location sensor."""

    @abstractmethod
    def watch(self) -> AsyncIterator[LatLng]:
        """Yield positions until the sensor stops or the watch is cancelled."""


class ScriptedLocationSource(LocationSource):
    """Replays a fixed list of positions, optionally pausing between them."""

    def __init__(self, positions: Iterable[LatLng], *, delay: float = 0.0):
        self.positions: List[LatLng] = list(positions)
        self.delay = delay

    async def watch(self) -> AsyncIterator[LatLng]:
        for position in self.positions:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                # Give the consumer a turn between deliveries
                await asyncio.sleep(0)
            yield position


class LocationWatcher:
    """Owns at most one active watch on a LocationSource.

    ``start`` registers the watch (a second call while active is a no-op),
    ``stop`` cancels it, discards positions that were queued but not yet
    applied, and wakes a consumer blocked in ``next_position``.
    """

    def __init__(self, source: LocationSource, *, maxsize: int = 16):
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.source = source
        self._queue: asyncio.Queue[Optional[LatLng]] = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None
        self.registrations = 0

    @property
    def is_active(self) -> bool:
        return self._task is not None

    def start(self) -> bool:
        """Begin delivering positions. Returns False if a watch is already active.

        Must be called from inside a running event loop.
        """
        if self._task is not None:
            return False
        self._drain()
        self._task = asyncio.get_running_loop().create_task(self._pump())
        self.registrations += 1
        log_info("Location tracking on")
        return True

    async def stop(self) -> bool:
        """Cancel the active watch. Returns False if none was active."""
        task = self._task
        if task is None:
            return False
        self._task = None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._drain()
        # Sentinel for a consumer currently awaiting next_position()
        self._queue.put_nowait(None)
        log_info("Location tracking off")
        return True

    async def toggle(self) -> bool:
        """Flip tracking on or off. Returns the new active state."""
        if self.is_active:
            await self.stop()
            return False
        self.start()
        return True

    async def next_position(self) -> Optional[LatLng]:
        """Next delivered position, or None once the watch has ended."""
        if self._task is None and self._queue.empty():
            return None
        return await self._queue.get()

    async def _pump(self) -> None:
        try:
            async for position in self.source.watch():
                await self._queue.put(position)
        except Exception as exc:
            log_error(f"Location sensor failed: {exc}")
        finally:
            # Sensor ran dry or failed; after stop() the task is no longer ours
            if self._task is asyncio.current_task():
                self._task = None
                await self._queue.put(None)

    def _drain(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
