"""
Neuron catalog: sensors, internal neurons, and actuators.

Each kind set is closed and index-stable. ``from_int`` reduces any raw id
modulo the set size, so every gene maps to a valid neuron and there is no
invalid-gene state.

Sensors read the start-of-tick world; internal neurons squash the sum of
their inputs; actuators are applied by the world (see ``world.py``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

import numpy as np

from genecells.core.grid import Position, SpatialGrid

if TYPE_CHECKING:
    from genecells.core.cell import Cell


class _Catalog(Enum):
    """Integer-valued kinds with modulo-reduced lookup."""

    @classmethod
    def from_int(cls, n: int):
        return cls(int(n) % len(cls))


class SensorNeuron(_Catalog):
    """24 sensor kinds."""
    # Spatial
    FOOD_LEFT_RIGHT = 0
    FOOD_UP_DOWN = 1
    FOOD_FORWARD = 2
    FOOD_DENSITY = 3
    PHEROMONE_LEFT_RIGHT = 4
    PHEROMONE_UP_DOWN = 5
    PHEROMONE_FORWARD = 6
    PHEROMONE_DENSITY = 7
    BLOCKAGE_LEFT_RIGHT = 8
    BLOCKAGE_UP_DOWN = 9
    BLOCKAGE_FORWARD = 10
    POP_LEFT_RIGHT = 11
    POP_UP_DOWN = 12
    POP_FORWARD = 13
    POP_DENSITY = 14
    # Position
    LOCATION_X = 15
    LOCATION_Y = 16
    # History
    AGE = 17
    KILL_COUNT = 18
    LAST_MOVE_X = 19
    LAST_MOVE_Y = 20
    GENETIC_SIMILARITY = 21
    # Misc
    RANDOM = 22
    OSCILLATOR = 23


class InternalNeuron(_Catalog):
    """8 recurrent neuron kinds, named by activation."""
    TANH = 0
    COSH = 1
    SINH = 2
    ABS = 3
    NEG = 4
    AVG = 5
    SQRT = 6
    INVERSE_SQRT = 7


class ActuatorNeuron(_Catalog):
    """8 actuator kinds."""
    SET_OSCILLATOR = 0
    EMIT_PHEROMONE = 1
    SET_RESPONSIVENESS = 2
    MOVE = 3
    MOVE_X = 4
    MOVE_Y = 5
    MOVE_RANDOM = 6
    KILL_FORWARD = 7


SENSOR_COUNT = len(SensorNeuron)
INTERNAL_COUNT = len(InternalNeuron)
ACTUATOR_COUNT = len(ActuatorNeuron)


def finite_or_zero(value: float) -> float:
    """Map NaN and +/-inf to 0.0."""
    value = float(value)
    return value if np.isfinite(value) else 0.0


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------

@dataclass
class SensorContext:
    """Everything a sensor may read: the start-of-tick grid and the tick's RNG."""
    grid: SpatialGrid
    rng: np.random.Generator
    pheromone_threshold: float = 0.0


Predicate = Callable[[Position], bool]


def _axis_probe(position: Position, axis: Position, present: Predicate) -> float:
    """-1 if the tile behind ``axis`` matches, else +1 if the tile ahead does, else 0."""
    x, y = position
    dx, dy = axis
    if present((x - dx, y - dy)):
        return -1.0
    if present((x + dx, y + dy)):
        return 1.0
    return 0.0


def _density(grid: SpatialGrid, position: Position, present: Predicate) -> float:
    """Fraction of the clamped 3x3 block (self included) that matches."""
    samples = grid.neighbourhood(position)
    return sum(1 for p in samples if present(p)) / len(samples)


def _normalized(coordinate: int, extent: int) -> float:
    if extent <= 1:
        return 0.0
    return 2.0 * coordinate / (extent - 1) - 1.0


def evaluate_sensor(
    kind: SensorNeuron, cell: Cell, handle: int, ctx: SensorContext,
) -> float:
    """Read one sensor for ``cell``. Non-finite readings come back as 0.0."""
    grid = ctx.grid
    pos = cell.position

    def food(p: Position) -> bool:
        return grid.has_food(p)

    def pheromone(p: Position) -> bool:
        return grid.pheromone_at(p) > ctx.pheromone_threshold

    def other_cell(p: Position) -> bool:
        occupant = grid.occupant_at(p)
        return occupant is not None and occupant != handle

    def blocked(p: Position) -> bool:
        return not grid.in_bounds(p) or other_cell(p)

    def any_cell(p: Position) -> bool:
        return grid.occupant_at(p) is not None

    lr, ud, fwd = (1, 0), (0, 1), cell.rotation.value

    S = SensorNeuron
    if kind is S.FOOD_LEFT_RIGHT:
        value = _axis_probe(pos, lr, food)
    elif kind is S.FOOD_UP_DOWN:
        value = _axis_probe(pos, ud, food)
    elif kind is S.FOOD_FORWARD:
        value = _axis_probe(pos, fwd, food)
    elif kind is S.FOOD_DENSITY:
        value = _density(grid, pos, food)
    elif kind is S.PHEROMONE_LEFT_RIGHT:
        value = _axis_probe(pos, lr, pheromone)
    elif kind is S.PHEROMONE_UP_DOWN:
        value = _axis_probe(pos, ud, pheromone)
    elif kind is S.PHEROMONE_FORWARD:
        value = _axis_probe(pos, fwd, pheromone)
    elif kind is S.PHEROMONE_DENSITY:
        value = _density(grid, pos, pheromone)
    elif kind is S.BLOCKAGE_LEFT_RIGHT:
        value = _axis_probe(pos, lr, blocked)
    elif kind is S.BLOCKAGE_UP_DOWN:
        value = _axis_probe(pos, ud, blocked)
    elif kind is S.BLOCKAGE_FORWARD:
        value = _axis_probe(pos, fwd, blocked)
    elif kind is S.POP_LEFT_RIGHT:
        value = _axis_probe(pos, lr, other_cell)
    elif kind is S.POP_UP_DOWN:
        value = _axis_probe(pos, ud, other_cell)
    elif kind is S.POP_FORWARD:
        value = _axis_probe(pos, fwd, other_cell)
    elif kind is S.POP_DENSITY:
        value = _density(grid, pos, any_cell)
    elif kind is S.LOCATION_X:
        value = _normalized(pos[0], grid.width)
    elif kind is S.LOCATION_Y:
        value = _normalized(pos[1], grid.height)
    elif kind is S.LAST_MOVE_X:
        value = float(cell.last_move[0])
    elif kind is S.LAST_MOVE_Y:
        value = float(cell.last_move[1])
    elif kind is S.RANDOM:
        value = float(ctx.rng.uniform(-1.0, 1.0))
    elif kind is S.OSCILLATOR:
        value = cell.oscillator.signal
    else:
        # AGE, KILL_COUNT, GENETIC_SIMILARITY: left to the life-cycle layer
        value = 0.0
    return finite_or_zero(value)


# ---------------------------------------------------------------------------
# Internal activations
# ---------------------------------------------------------------------------

def activate(kind: InternalNeuron, total: float, count: int) -> float:
    """
    Apply an internal neuron's activation to the sum of its inputs.

    ``count`` is the number of inputs processed, used only by AVG.
    Overflow and domain errors (cosh of a large sum, sqrt of a negative,
    1/sqrt(0)) yield 0.0.
    """
    x = np.float64(total)
    with np.errstate(all="ignore"):
        if kind is InternalNeuron.TANH:
            value = np.tanh(x)
        elif kind is InternalNeuron.COSH:
            value = np.cosh(x)
        elif kind is InternalNeuron.SINH:
            value = np.sinh(x)
        elif kind is InternalNeuron.ABS:
            value = np.tanh(np.abs(x))
        elif kind is InternalNeuron.NEG:
            value = np.tanh(-x)
        elif kind is InternalNeuron.AVG:
            value = x / count if count else 0.0
        elif kind is InternalNeuron.SQRT:
            value = np.sqrt(x)
        else:
            value = np.reciprocal(np.sqrt(x))
    return finite_or_zero(value)


def squash(total: float) -> float:
    """Actuator drive: tanh into [-1, 1]."""
    return finite_or_zero(np.tanh(np.float64(total)))
