"""
Tests for the neuron catalog.

Covers modulo-reduced kind lookup, every sensor family against a small
hand-built grid, and the internal activations including their non-finite
edge cases.
"""

import math

import numpy as np
import pytest

from genecells.core.cell import Cell, Compass, Oscillator
from genecells.core.genome import Genome
from genecells.core.grid import SpatialGrid
from genecells.core.neurons import (
    ACTUATOR_COUNT,
    INTERNAL_COUNT,
    SENSOR_COUNT,
    ActuatorNeuron,
    InternalNeuron,
    SensorContext,
    SensorNeuron,
    activate,
    evaluate_sensor,
    finite_or_zero,
    squash,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_cell(position=(2, 2), rotation=Compass.EAST, **kwargs) -> Cell:
    return Cell(genome=Genome.zeros(1), position=position, rotation=rotation, **kwargs)


def _setup(position=(2, 2), rotation=Compass.EAST, size=5, **kwargs):
    """A size x size grid with one cell (handle 0) placed on it."""
    grid = SpatialGrid(size, size)
    cell = _make_cell(position, rotation, **kwargs)
    grid.place(0, position)
    ctx = SensorContext(grid, np.random.default_rng(3))
    return grid, cell, ctx


def _read(kind, cell, ctx, handle=0):
    return evaluate_sensor(kind, cell, handle, ctx)


# ===========================================================================
# Catalog
# ===========================================================================

class TestCatalog:
    def test_sizes(self):
        assert SENSOR_COUNT == 24
        assert INTERNAL_COUNT == 8
        assert ACTUATOR_COUNT == 8

    def test_from_int_identity(self):
        for kind in SensorNeuron:
            assert SensorNeuron.from_int(kind.value) is kind
        for kind in ActuatorNeuron:
            assert ActuatorNeuron.from_int(kind.value) is kind

    def test_from_int_wraps(self):
        assert SensorNeuron.from_int(24) is SensorNeuron.FOOD_LEFT_RIGHT
        assert SensorNeuron.from_int(127) is SensorNeuron.from_int(127 % 24)
        assert InternalNeuron.from_int(13) is InternalNeuron.AVG
        assert ActuatorNeuron.from_int(11) is ActuatorNeuron.MOVE

    def test_from_int_any_raw_id_is_valid(self):
        for n in range(0, 1000, 7):
            assert isinstance(InternalNeuron.from_int(n), InternalNeuron)

    def test_index_stability(self):
        assert SensorNeuron.RANDOM.value == 22
        assert SensorNeuron.OSCILLATOR.value == 23
        assert InternalNeuron.INVERSE_SQRT.value == 7
        assert ActuatorNeuron.KILL_FORWARD.value == 7


# ===========================================================================
# Sensors
# ===========================================================================

class TestAxisProbes:
    def test_nothing_around(self):
        _, cell, ctx = _setup()
        assert _read(SensorNeuron.FOOD_LEFT_RIGHT, cell, ctx) == 0.0
        assert _read(SensorNeuron.FOOD_UP_DOWN, cell, ctx) == 0.0

    def test_left(self):
        grid, cell, ctx = _setup()
        grid.food[2, 1] = True
        assert _read(SensorNeuron.FOOD_LEFT_RIGHT, cell, ctx) == -1.0

    def test_right(self):
        grid, cell, ctx = _setup()
        grid.food[2, 3] = True
        assert _read(SensorNeuron.FOOD_LEFT_RIGHT, cell, ctx) == 1.0

    def test_left_wins_tie(self):
        grid, cell, ctx = _setup()
        grid.food[2, 1] = True
        grid.food[2, 3] = True
        assert _read(SensorNeuron.FOOD_LEFT_RIGHT, cell, ctx) == -1.0

    def test_up_then_down(self):
        grid, cell, ctx = _setup()
        grid.food[3, 2] = True
        assert _read(SensorNeuron.FOOD_UP_DOWN, cell, ctx) == 1.0
        grid.food[1, 2] = True
        assert _read(SensorNeuron.FOOD_UP_DOWN, cell, ctx) == -1.0

    def test_forward_follows_heading(self):
        grid, cell, ctx = _setup(rotation=Compass.EAST)
        grid.food[2, 3] = True
        assert _read(SensorNeuron.FOOD_FORWARD, cell, ctx) == 1.0
        cell.rotation = Compass.WEST
        assert _read(SensorNeuron.FOOD_FORWARD, cell, ctx) == -1.0
        cell.rotation = Compass.NORTH
        assert _read(SensorNeuron.FOOD_FORWARD, cell, ctx) == 0.0

    def test_forward_facing_south(self):
        grid, cell, ctx = _setup(rotation=Compass.SOUTH)
        grid.food[3, 2] = True
        assert _read(SensorNeuron.FOOD_FORWARD, cell, ctx) == 1.0

    def test_pheromone_threshold(self):
        grid, cell, ctx = _setup()
        grid.add_pheromone((3, 2), 0.5)
        assert _read(SensorNeuron.PHEROMONE_LEFT_RIGHT, cell, ctx) == 1.0
        ctx.pheromone_threshold = 1.0
        assert _read(SensorNeuron.PHEROMONE_LEFT_RIGHT, cell, ctx) == 0.0

    def test_population_ignores_self(self):
        grid, cell, ctx = _setup(position=(0, 2))
        # Left of the wall clamps back onto the cell's own tile
        assert _read(SensorNeuron.POP_LEFT_RIGHT, cell, ctx) == 0.0
        grid.place(1, (1, 2))
        assert _read(SensorNeuron.POP_LEFT_RIGHT, cell, ctx) == 1.0

    def test_blockage_sees_wall(self):
        _, cell, ctx = _setup(position=(0, 2), rotation=Compass.WEST)
        assert _read(SensorNeuron.BLOCKAGE_LEFT_RIGHT, cell, ctx) == -1.0
        assert _read(SensorNeuron.BLOCKAGE_FORWARD, cell, ctx) == 1.0
        assert _read(SensorNeuron.BLOCKAGE_UP_DOWN, cell, ctx) == 0.0

    def test_blockage_sees_cells(self):
        grid, cell, ctx = _setup()
        grid.place(1, (2, 3))
        assert _read(SensorNeuron.BLOCKAGE_UP_DOWN, cell, ctx) == 1.0

    def test_edge_food_repeats_outward(self):
        grid, cell, ctx = _setup(position=(4, 2))
        grid.food[2, 4] = True
        # Right of the east wall clamps onto the cell's own food tile
        assert _read(SensorNeuron.FOOD_LEFT_RIGHT, cell, ctx) == 1.0


class TestDensity:
    def test_food_density(self):
        grid, cell, ctx = _setup()
        grid.food[1, 1] = True
        grid.food[2, 2] = True
        grid.food[3, 3] = True
        grid.food[0, 0] = True  # outside the block
        assert _read(SensorNeuron.FOOD_DENSITY, cell, ctx) == pytest.approx(3 / 9)

    def test_corner_density_counts_clamped_duplicates(self):
        grid, cell, ctx = _setup(position=(0, 0))
        grid.food[0, 0] = True
        assert _read(SensorNeuron.FOOD_DENSITY, cell, ctx) == pytest.approx(4 / 9)

    def test_pop_density_counts_self(self):
        grid, cell, ctx = _setup()
        assert _read(SensorNeuron.POP_DENSITY, cell, ctx) == pytest.approx(1 / 9)
        grid.place(1, (1, 1))
        assert _read(SensorNeuron.POP_DENSITY, cell, ctx) == pytest.approx(2 / 9)

    def test_pheromone_density_in_unit_range(self):
        grid, cell, ctx = _setup()
        grid.pheromone[:, :] = 10.0
        assert _read(SensorNeuron.PHEROMONE_DENSITY, cell, ctx) == 1.0


class TestPositionAndHistory:
    @pytest.mark.parametrize("x,expected", [(0, -1.0), (2, 0.0), (4, 1.0)])
    def test_location_x(self, x, expected):
        _, cell, ctx = _setup(position=(x, 1))
        assert _read(SensorNeuron.LOCATION_X, cell, ctx) == pytest.approx(expected)

    def test_location_y(self):
        _, cell, ctx = _setup(position=(1, 4))
        assert _read(SensorNeuron.LOCATION_Y, cell, ctx) == pytest.approx(1.0)

    def test_location_on_single_column_grid(self):
        grid = SpatialGrid(1, 3)
        cell = _make_cell(position=(0, 1))
        ctx = SensorContext(grid, np.random.default_rng(0))
        assert _read(SensorNeuron.LOCATION_X, cell, ctx) == 0.0

    def test_last_move(self):
        _, cell, ctx = _setup(last_move=(-1, 0))
        assert _read(SensorNeuron.LAST_MOVE_X, cell, ctx) == -1.0
        assert _read(SensorNeuron.LAST_MOVE_Y, cell, ctx) == 0.0

    def test_placeholders_read_zero(self):
        _, cell, ctx = _setup(kill_count=5)
        assert _read(SensorNeuron.AGE, cell, ctx) == 0.0
        assert _read(SensorNeuron.KILL_COUNT, cell, ctx) == 0.0
        assert _read(SensorNeuron.GENETIC_SIMILARITY, cell, ctx) == 0.0


class TestMiscSensors:
    def test_random_range(self):
        _, cell, ctx = _setup()
        values = [_read(SensorNeuron.RANDOM, cell, ctx) for _ in range(500)]
        assert all(-1.0 <= v <= 1.0 for v in values)
        assert min(values) < 0 < max(values)

    def test_oscillator(self):
        _, cell, ctx = _setup(oscillator=Oscillator(phase=False))
        assert _read(SensorNeuron.OSCILLATOR, cell, ctx) == -1.0
        cell.oscillator.phase = True
        assert _read(SensorNeuron.OSCILLATOR, cell, ctx) == 1.0


# ===========================================================================
# Activations
# ===========================================================================

class TestActivations:
    @pytest.mark.parametrize("kind,x,expected", [
        (InternalNeuron.TANH, 0.5, math.tanh(0.5)),
        (InternalNeuron.COSH, 0.5, math.cosh(0.5)),
        (InternalNeuron.SINH, -0.5, math.sinh(-0.5)),
        (InternalNeuron.ABS, -0.5, math.tanh(0.5)),
        (InternalNeuron.NEG, 0.5, math.tanh(-0.5)),
        (InternalNeuron.SQRT, 4.0, 2.0),
        (InternalNeuron.INVERSE_SQRT, 4.0, 0.5),
    ])
    def test_values(self, kind, x, expected):
        assert activate(kind, x, 1) == pytest.approx(expected)

    def test_average_divides_by_count(self):
        assert activate(InternalNeuron.AVG, 3.0, 4) == pytest.approx(0.75)

    def test_average_of_nothing(self):
        assert activate(InternalNeuron.AVG, 0.0, 0) == 0.0

    def test_inverse_sqrt_of_zero_is_zero(self):
        assert activate(InternalNeuron.INVERSE_SQRT, 0.0, 1) == 0.0

    def test_sqrt_of_negative_is_zero(self):
        assert activate(InternalNeuron.SQRT, -1.0, 1) == 0.0

    def test_cosh_overflow_is_zero(self):
        assert activate(InternalNeuron.COSH, 1e4, 1) == 0.0
        assert activate(InternalNeuron.SINH, -1e4, 1) == 0.0

    def test_activation_of_zero(self):
        assert activate(InternalNeuron.TANH, 0.0, 1) == 0.0
        assert activate(InternalNeuron.COSH, 0.0, 1) == 1.0

    def test_squash(self):
        assert squash(0.0) == 0.0
        assert squash(100.0) == pytest.approx(1.0)
        assert -1.0 <= squash(-3.0) < 0.0

    def test_finite_or_zero(self):
        assert finite_or_zero(float("nan")) == 0.0
        assert finite_or_zero(float("inf")) == 0.0
        assert finite_or_zero(-float("inf")) == 0.0
        assert finite_or_zero(2.5) == 2.5
