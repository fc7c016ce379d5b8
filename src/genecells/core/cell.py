"""
Core cell (agent) dataclass for the genecells world.

A cell is controlled entirely by its genome. It carries its grid position,
heading, last displacement, food reserve, kill counter, and an oscillator
that feeds one of its sensors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from genecells.core.genome import Genome, generate_offspring
from genecells.core.grid import Position
from genecells.core.neurons import ACTUATOR_COUNT

DEFAULT_FOOD = 10
DEFAULT_OSCILLATOR_PERIOD = 10


class Compass(Enum):
    """Facing directions. Values are (dx, dy) with y growing south."""
    NORTH = (0, -1)
    SOUTH = (0, 1)
    EAST = (1, 0)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @classmethod
    def from_int(cls, n: int) -> Compass:
        return _COMPASS_ORDER[int(n) % 4]

    @classmethod
    def from_vector(cls, dx: int, dy: int) -> Compass:
        return cls((dx, dy))


_COMPASS_ORDER = [Compass.NORTH, Compass.SOUTH, Compass.EAST, Compass.WEST]


@dataclass
class Oscillator:
    """Square-wave generator: the phase flips every ``frequency`` ticks."""
    frequency: int = DEFAULT_OSCILLATOR_PERIOD
    counter: int = 0
    phase: bool = False

    def advance(self) -> None:
        self.counter += 1
        if self.counter >= self.frequency:
            self.counter = 0
            self.phase = not self.phase

    @property
    def signal(self) -> float:
        return 1.0 if self.phase else -1.0


@dataclass
class Cell:
    """A simulated agent wired by its genome."""

    genome: Genome
    position: Position = (0, 0)
    rotation: Compass = Compass.NORTH
    last_move: Position = (0, 0)
    food_level: int = DEFAULT_FOOD
    kill_count: int = 0
    oscillator: Oscillator = field(default_factory=Oscillator)
    is_alive: bool = True

    # === Per-tick derived state ===
    responsiveness: float = 1.0
    actuator_levels: np.ndarray = field(
        default_factory=lambda: np.zeros(ACTUATOR_COUNT, dtype=np.float64),
    )

    @property
    def forward(self) -> Position:
        """The tile one step ahead along the current heading."""
        x, y = self.position
        return (x + self.rotation.dx, y + self.rotation.dy)

    def spawn_offspring(
        self, rng: np.random.Generator,
        food_level: int = DEFAULT_FOOD,
    ) -> Cell:
        """Child with a possibly-mutated genome copy and birth defaults.

        Heading and oscillator frequency are inherited; position, last move,
        food, and kills are reset. The caller places the child on the grid.
        """
        return Cell(
            genome=generate_offspring(self.genome, rng),
            rotation=self.rotation,
            food_level=food_level,
            oscillator=Oscillator(frequency=self.oscillator.frequency),
        )

    def __repr__(self) -> str:
        status = "alive" if self.is_alive else "dead"
        return (
            f"Cell(pos={self.position}, facing={self.rotation.name}, "
            f"food={self.food_level}, kills={self.kill_count}, {status})"
        )
