"""
Master configuration for a genecells world.

World-level tunables live here. Cell keeps its own birth defaults (food,
oscillator period) for cells built outside a World; a World always passes
its configured values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass
class WorldConfig:
    """
    World configuration: population, grid, and every actuator constant.

    Use ``to_dict()`` / ``from_dict()`` for serialization and comparison.
    """

    # === Experiment identity ===
    experiment_name: str = "default"
    random_seed: int | None = None

    # === Population & grid ===
    population: int = 100
    gene_count: int = 16
    width: int = 64
    height: int = 64
    random_genomes: bool = True  # False = all-zero genomes

    # === Cells ===
    initial_food: int = 10
    food_value: int = 1  # Food gained per eaten tile

    # === Environment ===
    food_density: float = 0.1  # Fraction of tiles seeded with food
    pheromone_decay_rate: float = 0.05  # Applied at the end of every tick
    pheromone_presence_threshold: float = 0.0

    # === Network ===
    # Connection weight = int16(weight bits) / weight_scale, i.e. [-4, 4)
    weight_scale: float = 8192.0

    # === Actuators ===
    # A movement intent must exceed this to step. At 0 any non-zero intent
    # steps, so SetResponsiveness only scales drives; raise it above 0 for
    # low responsiveness to hold a cell still.
    movement_threshold: float = 0.0
    pheromone_emit_amount: float = 1.0
    kills_enabled: bool = False
    kill_threshold: float = 0.5
    oscillator_period: int = 10  # Ticks per oscillator phase
    max_oscillator_period: int = 64

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WorldConfig:
        """Deserialize from a dict."""
        return cls(**{k: v for k, v in d.items() if not k.startswith("_")})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> WorldConfig:
        return cls.from_dict(json.loads(s))

    def diff(self, other: WorldConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
