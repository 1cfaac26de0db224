"""Sliding visibility window over the grid.

The window is a rectangle of cell offsets relative to the view anchor's cell.
Each player step slides it along the axis of movement; the cells it covers
(plus ``radius`` on every side) are the candidates for cache spawning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .luck import spawns_cache
from .schemas import GridCoordinate, WindowBounds

# (di, dj) per compass step: i grows northward, j grows eastward
DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "north": (1, 0),
    "south": (-1, 0),
    "east": (0, 1),
    "west": (0, -1),
}


def cells_to_consider(
    anchor_cell: GridCoordinate,
    radius: int,
    window: WindowBounds,
) -> List[GridCoordinate]:
    """Enumerate candidate cells in row-major order.

    Rows run over ``[min_i - radius, max_i + radius)`` and columns over
    ``[min_j - radius, max_j + radius)``, both offset from ``anchor_cell``.
    """
    radius = max(int(radius), 0)
    cells: List[GridCoordinate] = []
    for di in range(window.min_i - radius, window.max_i + radius):
        for dj in range(window.min_j - radius, window.max_j + radius):
            cells.append(anchor_cell.offset(di, dj))
    return cells


def spawn_candidates(
    anchor_cell: GridCoordinate,
    radius: int,
    window: WindowBounds,
    probability: float,
) -> List[GridCoordinate]:
    """Candidate cells that hold a cache, in enumeration order."""
    return [
        cell
        for cell in cells_to_consider(anchor_cell, radius, window)
        if spawns_cache(cell.i, cell.j, probability)
    ]


@dataclass
class VisibilityWindow:
    """Visibility state: anchor cell, neighborhood radius and current bounds."""

    anchor_cell: GridCoordinate
    radius: int
    bounds: WindowBounds = field(default_factory=WindowBounds)

    def shift(self, di: int, dj: int, step: int = 1) -> WindowBounds:
        """Slide the window by ``step`` cells per unit of ``(di, dj)``.

        Both edges of an axis move together, so opposite moves cancel exactly.
        """
        self.bounds = self.bounds.shifted(di * step, dj * step)
        return self.bounds

    def move(self, direction: str, step: int = 1) -> WindowBounds:
        try:
            di, dj = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(
                f"Unknown direction '{direction}'; expected one of {sorted(DIRECTIONS)}"
            ) from None
        return self.shift(di, dj, step)

    def cells(self) -> List[GridCoordinate]:
        return cells_to_consider(self.anchor_cell, self.radius, self.bounds)

    def spawn_cells(self, probability: float) -> List[GridCoordinate]:
        return spawn_candidates(self.anchor_cell, self.radius, self.bounds, probability)

    def contains(self, coordinate: GridCoordinate) -> bool:
        """True when ``coordinate`` is among the current candidate cells."""
        di = coordinate.i - self.anchor_cell.i
        dj = coordinate.j - self.anchor_cell.j
        return (
            self.bounds.min_i - self.radius <= di < self.bounds.max_i + self.radius
            and self.bounds.min_j - self.radius <= dj < self.bounds.max_j + self.radius
        )
