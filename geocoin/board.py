"""Projection between real-world coordinates and grid cells.

The board divides the plane into square cells of ``tile_degrees`` on a side,
counted from ``origin``. The mapping is linear in both directions and exact for
cell corners, so a rendered cache can always be traced back to its cell.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .schemas import CellBounds, GridCoordinate, LatLng

# Tolerance for treating a projected offset as landing exactly on a cell edge
_EDGE_EPSILON = 1e-6


@dataclass
class Board:
    """Linear grid overlay anchored at ``origin``."""

    origin: LatLng
    tile_degrees: float
    # Flyweight pool: one GridCoordinate instance per cell ever asked for
    known_cells: Dict[Tuple[int, int], GridCoordinate] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.tile_degrees <= 0:
            raise ValueError(f"tile_degrees must be positive, got {self.tile_degrees}")

    def cell(self, i: int, j: int) -> GridCoordinate:
        """Return the canonical coordinate object for ``(i, j)``."""
        key = (i, j)
        if key not in self.known_cells:
            self.known_cells[key] = GridCoordinate(i=i, j=j)
        return self.known_cells[key]

    def _index(self, offset: float) -> int:
        # Offsets that sit on a cell edge (up to float noise) belong to the cell
        # starting at that edge; everything else floors.
        steps = offset / self.tile_degrees
        nearest = round(steps)
        if abs(steps - nearest) < _EDGE_EPSILON:
            return int(nearest)
        return math.floor(steps)

    def cell_for_point(self, point: LatLng) -> GridCoordinate:
        """Return the cell containing ``point``."""
        return self.cell(
            self._index(point.lat - self.origin.lat),
            self._index(point.lng - self.origin.lng),
        )

    def point_for_cell(self, coordinate: GridCoordinate) -> LatLng:
        """Return the south-west corner of ``coordinate``."""
        return LatLng(
            lat=self.origin.lat + coordinate.i * self.tile_degrees,
            lng=self.origin.lng + coordinate.j * self.tile_degrees,
        )

    def cell_bounds(self, coordinate: GridCoordinate) -> CellBounds:
        """Real-world rectangle covered by ``coordinate``."""
        south_west = self.point_for_cell(coordinate)
        north_east = self.point_for_cell(coordinate.offset(1, 1))
        return CellBounds(south_west=south_west, north_east=north_east)

    def cell_center(self, coordinate: GridCoordinate) -> LatLng:
        bounds = self.cell_bounds(coordinate)
        return LatLng(
            lat=(bounds.south_west.lat + bounds.north_east.lat) / 2,
            lng=(bounds.south_west.lng + bounds.north_east.lng) / 2,
        )
