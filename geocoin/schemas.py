"""
Pydantic schemas for the Geocoin state engine.

All data structures shared between the core, the persistence layer and the
rendering collaborators are defined here.

Design Philosophy:
- Identities (cells, coins) are frozen models so they can key dicts and sets
- Containers (caches, snapshots) stay mutable and are copied at boundaries
- Everything round-trips through JSON via ``model_dump(mode="json")``
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Coordinates
# ============================================================================


class LatLng(BaseModel):
    """A real-world coordinate in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude in degrees")
    lng: float = Field(..., description="Longitude in degrees")

    def offset(self, dlat: float, dlng: float) -> "LatLng":
        return LatLng(lat=self.lat + dlat, lng=self.lng + dlng)


class GridCoordinate(BaseModel):
    """Integer cell index on the global grid.

    ``i`` counts cells of latitude and ``j`` cells of longitude from the
    board origin. Equality and hashing are exact integer comparisons, never
    geometric containment, so a cell can only ever be keyed one way.
    """

    model_config = ConfigDict(frozen=True)

    i: int
    j: int

    @property
    def label(self) -> str:
        return f"{self.i}:{self.j}"

    def offset(self, di: int, dj: int) -> "GridCoordinate":
        return GridCoordinate(i=self.i + di, j=self.j + dj)


class CellBounds(BaseModel):
    """Real-world rectangle covered by one cell (for rendering collaborators)."""

    model_config = ConfigDict(frozen=True)

    south_west: LatLng
    north_east: LatLng


# ============================================================================
# Coins and caches
# ============================================================================


class Coin(BaseModel):
    """A uniquely identified coin.

    A coin is named by the cell it spawned in plus a serial number that is
    unique within that cell. The home cell never changes, even after the coin
    is dropped into a different cache.
    """

    model_config = ConfigDict(frozen=True)

    i: int = Field(..., description="Home cell latitude index")
    j: int = Field(..., description="Home cell longitude index")
    serial: int = Field(..., ge=1, description="Serial number within the home cell")

    @property
    def home(self) -> GridCoordinate:
        return GridCoordinate(i=self.i, j=self.j)

    @property
    def label(self) -> str:
        return f"{self.i}:{self.j}#{self.serial}"


class CacheRecord(BaseModel):
    """Coins currently held by the cache at ``coordinate``.

    ``coins`` keeps insertion order; the last entry is offered first when the
    player picks without naming a coin. ``coin_count`` is always derived from
    the list so the two can never disagree.
    """

    coordinate: GridCoordinate
    coins: List[Coin] = Field(default_factory=list)

    @property
    def coin_count(self) -> int:
        return len(self.coins)

    def holds(self, coin: Coin) -> bool:
        return coin in self.coins


# ============================================================================
# Visibility and persistence
# ============================================================================


class WindowBounds(BaseModel):
    """Cell offsets (relative to the view anchor's cell) of the visibility window."""

    model_config = ConfigDict(frozen=True)

    min_i: int = 0
    max_i: int = 0
    min_j: int = 0
    max_j: int = 0

    def shifted(self, di: int, dj: int) -> "WindowBounds":
        """Slide both edges of each axis by the given cell deltas."""
        return WindowBounds(
            min_i=self.min_i + di,
            max_i=self.max_i + di,
            min_j=self.min_j + dj,
            max_j=self.max_j + dj,
        )


class PersistedSnapshot(BaseModel):
    """Everything written to storage after a move or transfer.

    Each field is stored under its own key by ``PersistenceAdapter`` so any of
    them can be loaded independently with a typed default.
    """

    player_location: LatLng
    view_anchor: LatLng
    movement_history: List[LatLng] = Field(default_factory=list)
    window_bounds: WindowBounds = Field(default_factory=WindowBounds)
    inventory: List[Coin] = Field(default_factory=list)
    caches: List[CacheRecord] = Field(default_factory=list)


class TransferResult(BaseModel):
    """Outcome of a pick or drop request, returned to the UI collaborator."""

    action: Literal["pick", "drop"]
    coordinate: GridCoordinate
    ok: bool
    coin: Optional[Coin] = None
    error: Optional[str] = Field(None, description="Error class name when ok is False")
    message: Optional[str] = None
