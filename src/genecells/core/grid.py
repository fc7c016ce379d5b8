"""
Spatial grid for the genecells world.

A fixed width x height array of tiles, each carrying a food flag, a
pheromone level, and at most one occupant. Occupants are stored as integer
cell handles (indices into the world's cell arena), never as references.

Coordinate system: x grows east (columns), y grows south (rows). Lookups
are total: out-of-range coordinates clamp to the nearest edge tile on each
axis independently, so the grid edge behaves as a mirror wall rather than
a torus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

EMPTY = -1

Position = tuple[int, int]


@dataclass(frozen=True)
class Tile:
    """Read-only view of one grid tile.

    Attributes:
        x: Column of the (clamped) tile.
        y: Row of the (clamped) tile.
        has_food: Whether food lies on the tile.
        pheromone: Current pheromone level.
        occupant: Handle of the occupying cell, or None.
    """

    x: int
    y: int
    has_food: bool
    pheromone: float
    occupant: int | None

    @property
    def coords(self) -> Position:
        return (self.x, self.y)

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize tile to dictionary."""
        return {
            "x": self.x,
            "y": self.y,
            "has_food": self.has_food,
            "pheromone": self.pheromone,
            "occupant": self.occupant,
        }


class SpatialGrid:
    """Tile state held in three parallel numpy arrays indexed ``[y, x]``.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        food: Boolean food flags.
        pheromone: Float pheromone levels.
        occupant: Cell handles, ``EMPTY`` where unoccupied.
    """

    # 3x3 neighbourhood offsets, self included.
    NEIGHBOURHOOD: list[Position] = [
        (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1)
    ]

    def __init__(self, width: int, height: int) -> None:
        """Initialize an empty grid.

        Args:
            width: Number of columns (> 0).
            height: Number of rows (> 0).

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width: int = width
        self.height: int = height
        self.food = np.zeros((height, width), dtype=bool)
        self.pheromone = np.zeros((height, width), dtype=np.float64)
        self.occupant = np.full((height, width), EMPTY, dtype=np.int64)

    def __len__(self) -> int:
        """Number of tiles in the grid."""
        return self.width * self.height

    # ---- Coordinate resolution ----

    def in_bounds(self, position: Position) -> bool:
        """Whether a coordinate lies inside the grid without clamping."""
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def clamp(self, position: Position) -> Position:
        """Clamp each axis independently into the grid."""
        x, y = position
        return (
            min(max(int(x), 0), self.width - 1),
            min(max(int(y), 0), self.height - 1),
        )

    def resolve(self, position: Position) -> Tile:
        """Return the tile at ``position``, clamping out-of-range coordinates.

        Both axes out of range resolve to the single corner tile.
        """
        x, y = self.clamp(position)
        occupant = int(self.occupant[y, x])
        return Tile(
            x=x,
            y=y,
            has_food=bool(self.food[y, x]),
            pheromone=float(self.pheromone[y, x]),
            occupant=None if occupant == EMPTY else occupant,
        )

    def occupant_at(self, position: Position) -> int | None:
        x, y = self.clamp(position)
        occupant = int(self.occupant[y, x])
        return None if occupant == EMPTY else occupant

    def has_food(self, position: Position) -> bool:
        x, y = self.clamp(position)
        return bool(self.food[y, x])

    def pheromone_at(self, position: Position) -> float:
        x, y = self.clamp(position)
        return float(self.pheromone[y, x])

    def neighbourhood(self, position: Position) -> list[Position]:
        """Clamped coordinates of the 3x3 block centred on ``position``.

        Always returns nine entries; at the edges clamped duplicates repeat
        the boundary tiles.
        """
        x, y = position
        return [self.clamp((x + dx, y + dy)) for dx, dy in self.NEIGHBOURHOOD]

    # ---- Occupancy ----

    def place(self, handle: int, position: Position) -> bool:
        """Place a cell on an in-range, empty tile.

        Returns:
            True if the cell was placed, False if the tile is out of range
            or already occupied.
        """
        if not self.in_bounds(position):
            return False
        x, y = position
        if self.occupant[y, x] != EMPTY:
            return False
        self.occupant[y, x] = handle
        return True

    def vacate(self, handle: int, position: Position) -> bool:
        """Clear ``position`` if ``handle`` occupies it."""
        if not self.in_bounds(position):
            return False
        x, y = position
        if self.occupant[y, x] != handle:
            return False
        self.occupant[y, x] = EMPTY
        return True

    def move(self, handle: int, source: Position, target: Position) -> bool:
        """Move a cell between tiles. Leaves the grid untouched on failure."""
        if not self.in_bounds(target) or self.occupant_at(target) is not None:
            return False
        if not self.vacate(handle, source):
            return False
        return self.place(handle, target)

    def occupancy_snapshot(self) -> np.ndarray:
        """Copy of the occupant array, for start-of-tick lookups."""
        return self.occupant.copy()

    # ---- Environment ----

    def seed_food(self, density: float, rng: np.random.Generator) -> int:
        """Scatter food over roughly ``density`` of the tiles. Returns tiles seeded."""
        self.food = rng.random((self.height, self.width)) < density
        return int(self.food.sum())

    def take_food(self, position: Position) -> bool:
        """Remove food from a tile. Returns True if there was food to take."""
        x, y = self.clamp(position)
        if not self.food[y, x]:
            return False
        self.food[y, x] = False
        return True

    def add_pheromone(self, position: Position, amount: float) -> None:
        x, y = self.clamp(position)
        self.pheromone[y, x] += amount

    def decay_pheromone(self, rate: float) -> None:
        """Scale every pheromone level by ``1 - rate``."""
        if rate > 0.0:
            self.pheromone *= 1.0 - rate
