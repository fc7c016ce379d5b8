"""
World simulator: owns the cell arena and the grid, runs the tick pipeline.

Each ``step()`` runs two cell phases, then an environment update:

1. Sense: every living cell decodes its genome and reads its sensors
   against the start-of-tick grid. Nothing is written.
2. Act: cells are visited in handle order; actuator drives are computed
   from the sensed inputs (internal neurons evaluated recursively) and
   applied to the cell and the grid.
3. Environment: cells eat the food they stand on, oscillators advance,
   and pheromone decays.

Act-phase conflicts are settled against the start-of-tick occupancy with a
first-writer-wins rule in handle order, so a fixed seed always reproduces
the same run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from genecells.core.cell import Cell, Compass, Oscillator
from genecells.core.config import WorldConfig
from genecells.core.genome import Genome
from genecells.core.grid import EMPTY, Position, SpatialGrid, Tile
from genecells.core.network import CellBrain, wire
from genecells.core.neurons import (
    ACTUATOR_COUNT,
    ActuatorNeuron,
    SensorContext,
    squash,
)

logger = logging.getLogger(__name__)


@dataclass
class TickEvents:
    """What happened during a single tick."""
    moves: int = 0
    blocked_moves: int = 0
    kills: int = 0
    pheromone_emitted: float = 0.0
    food_eaten: int = 0

    def to_events_dict(self) -> dict[str, Any]:
        return {
            "moves": self.moves,
            "blocked_moves": self.blocked_moves,
            "kills": self.kills,
            "pheromone_emitted": self.pheromone_emitted,
            "food_eaten": self.food_eaten,
        }


def _sign(value: float) -> int:
    return 1 if value > 0 else -1 if value < 0 else 0


class World:
    """
    A population of genome-driven cells on a bounded grid.

    Cells live in an arena (``self.cells``) and are addressed by their index
    there; the grid stores those handles. Dead cells keep their handle.
    """

    def __init__(self, config: WorldConfig, rng: np.random.Generator | None = None):
        if config.gene_count < 1:
            raise ValueError(f"gene_count must be at least 1, got {config.gene_count}")
        if config.population < 0:
            raise ValueError(f"population must be non-negative, got {config.population}")
        if not np.isfinite(config.weight_scale) or config.weight_scale <= 0:
            raise ValueError(
                f"weight_scale must be finite and positive, got {config.weight_scale}"
            )
        if config.oscillator_period < 1:
            raise ValueError(
                f"oscillator_period must be at least 1, got {config.oscillator_period}"
            )
        if config.max_oscillator_period < 1:
            raise ValueError(
                f"max_oscillator_period must be at least 1, got {config.max_oscillator_period}"
            )
        if not 0.0 <= config.pheromone_decay_rate <= 1.0:
            raise ValueError(
                f"pheromone_decay_rate must be in [0, 1], got {config.pheromone_decay_rate}"
            )

        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.random_seed)
        self.grid = SpatialGrid(config.width, config.height)
        if config.population > len(self.grid):
            raise ValueError(
                f"population {config.population} does not fit on a "
                f"{config.width}x{config.height} grid"
            )

        self.cells: list[Cell] = []
        self.tick = 0
        self.last_events = TickEvents()
        self._populate()

    # ------------------------------------------------------------------
    # Initial population
    # ------------------------------------------------------------------
    def _populate(self) -> None:
        cfg = self.config
        food_tiles = self.grid.seed_food(cfg.food_density, self.rng)
        slots = self.rng.choice(len(self.grid), size=cfg.population, replace=False)
        for slot in slots:
            if cfg.random_genomes:
                genome = Genome.random(cfg.gene_count, self.rng)
            else:
                genome = Genome.zeros(cfg.gene_count)
            self.add_cell(Cell(
                genome=genome,
                position=(int(slot) % cfg.width, int(slot) // cfg.width),
                rotation=Compass.from_int(self.rng.integers(0, 4)),
                food_level=cfg.initial_food,
                oscillator=Oscillator(frequency=cfg.oscillator_period),
            ))
        logger.info(
            "World %r created: %d cells, %d genes, %dx%d grid, %d food tiles",
            cfg.experiment_name, cfg.population, cfg.gene_count,
            cfg.width, cfg.height, food_tiles,
        )

    def add_cell(self, cell: Cell) -> int:
        """Add a cell at its own ``position`` and return its handle.

        Raises:
            ValueError: If the position is off-grid or already occupied, or
                the genome length differs from the world's.
        """
        if len(cell.genome) != self.config.gene_count:
            raise ValueError(
                f"genome has {len(cell.genome)} genes, world uses {self.config.gene_count}"
            )
        handle = len(self.cells)
        if not self.grid.place(handle, cell.position):
            raise ValueError(f"cannot place cell at {cell.position}")
        self.cells.append(cell)
        return handle

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def tile(self, x: int, y: int) -> Tile:
        return self.grid.resolve((x, y))

    def cell(self, handle: int) -> Cell:
        return self.cells[handle]

    def living_cells(self) -> list[tuple[int, Cell]]:
        return [(h, c) for h, c in enumerate(self.cells) if c.is_alive]

    @property
    def population_size(self) -> int:
        return sum(1 for c in self.cells if c.is_alive)

    # ------------------------------------------------------------------
    # Tick pipeline
    # ------------------------------------------------------------------
    def step(self) -> None:
        """Advance the world by one tick."""
        cfg = self.config
        events = TickEvents()
        occupancy = self.grid.occupancy_snapshot()

        # === Phase 1: Sense (read-only) ===
        ctx = SensorContext(self.grid, self.rng, cfg.pheromone_presence_threshold)
        brains: dict[int, CellBrain] = {
            handle: wire(cell, handle, ctx, cfg.weight_scale)
            for handle, cell in self.living_cells()
        }

        # === Phase 2: Act (handle order, first writer wins) ===
        claimed: set[Position] = set()
        for handle, brain in brains.items():
            cell = self.cells[handle]
            if not cell.is_alive:
                continue  # Killed earlier this tick
            self._act(handle, cell, brain, occupancy, claimed, events)

        # === Phase 3: Environment ===
        for _, cell in self.living_cells():
            if self.grid.take_food(cell.position):
                cell.food_level += cfg.food_value
                events.food_eaten += 1
            cell.oscillator.advance()
        self.grid.decay_pheromone(cfg.pheromone_decay_rate)

        self.last_events = events
        self.tick += 1
        logger.debug("Tick %d: %s", self.tick, events.to_events_dict())

    def _act(
        self, handle: int, cell: Cell, brain: CellBrain,
        occupancy: np.ndarray, claimed: set[Position], events: TickEvents,
    ) -> None:
        cfg = self.config
        A = ActuatorNeuron
        wired = brain.wired_actuators()

        levels = np.zeros(ACTUATOR_COUNT, dtype=np.float64)
        for kind in wired:
            levels[kind.value] = squash(brain.actuator_drive(kind))
        cell.actuator_levels = levels

        cell.responsiveness = 1.0
        if A.SET_RESPONSIVENESS in wired:
            cell.responsiveness = float(np.clip(
                (levels[A.SET_RESPONSIVENESS.value] + 1.0) / 2.0, 0.0, 1.0,
            ))

        start_position = cell.position
        start_rotation = cell.rotation
        cell.last_move = (0, 0)
        # Movement intents accumulate into one vector; at most one step per tick
        vx = vy = 0.0

        for kind in wired:
            effective = levels[kind.value] * cell.responsiveness
            if kind is A.SET_OSCILLATOR:
                span = cfg.max_oscillator_period - 1
                cell.oscillator.frequency = 1 + int(round((effective + 1.0) / 2.0 * span))
            elif kind is A.EMIT_PHEROMONE:
                if effective > 0:
                    amount = cfg.pheromone_emit_amount * effective
                    self.grid.add_pheromone(start_position, amount)
                    events.pheromone_emitted += amount
            elif kind is A.MOVE:
                vx += start_rotation.dx * effective
                vy += start_rotation.dy * effective
            elif kind is A.MOVE_X:
                vx += effective
            elif kind is A.MOVE_Y:
                vy += effective
            elif kind is A.MOVE_RANDOM:
                if abs(effective) > cfg.movement_threshold:
                    heading = Compass.from_int(self.rng.integers(0, 4))
                    vx += heading.dx * abs(effective)
                    vy += heading.dy * abs(effective)
            elif kind is A.KILL_FORWARD:
                if cfg.kills_enabled and effective > cfg.kill_threshold:
                    self._kill_forward(handle, cell, start_position, start_rotation,
                                       occupancy, events)

        if max(abs(vx), abs(vy)) > cfg.movement_threshold:
            if abs(vx) >= abs(vy):
                step = (_sign(vx), 0)
            else:
                step = (0, _sign(vy))
            self._try_move(handle, cell, step, occupancy, claimed, events)

    def _try_move(
        self, handle: int, cell: Cell, step: Position,
        occupancy: np.ndarray, claimed: set[Position], events: TickEvents,
    ) -> bool:
        """Step one tile if the target was empty at tick start and is unclaimed."""
        heading = Compass.from_vector(*step)
        if heading not in (cell.rotation, _opposite(cell.rotation)):
            cell.rotation = heading

        x, y = cell.position
        target = (x + step[0], y + step[1])
        if (
            not self.grid.in_bounds(target)
            or occupancy[target[1], target[0]] != EMPTY
            or target in claimed
            or not self.grid.move(handle, cell.position, target)
        ):
            events.blocked_moves += 1
            return False

        claimed.add(target)
        cell.position = target
        cell.last_move = step
        events.moves += 1
        return True

    def _kill_forward(
        self, handle: int, cell: Cell, position: Position, rotation: Compass,
        occupancy: np.ndarray, events: TickEvents,
    ) -> None:
        """Kill whichever living cell stood ahead of ``position`` at tick start."""
        ahead = (position[0] + rotation.dx, position[1] + rotation.dy)
        if not self.grid.in_bounds(ahead):
            return
        victim_handle = int(occupancy[ahead[1], ahead[0]])
        if victim_handle in (EMPTY, handle):
            return
        victim = self.cells[victim_handle]
        if not victim.is_alive:
            return
        victim.is_alive = False
        self.grid.vacate(victim_handle, victim.position)
        cell.kill_count += 1
        events.kills += 1
        logger.debug("Tick %d: cell %d killed cell %d", self.tick, handle, victim_handle)


def _opposite(heading: Compass) -> Compass:
    return Compass.from_vector(-heading.dx, -heading.dy)


def new_world(
    population: int, gene_count: int, width: int, height: int,
    rng: np.random.Generator | None = None, **overrides: Any,
) -> World:
    """Build a world with random, non-colliding starting positions and headings."""
    config = WorldConfig(
        population=population, gene_count=gene_count,
        width=width, height=height, **overrides,
    )
    return World(config, rng=rng)
