"""
Metrics collector for per-tick population and environment statistics.

Records a lightweight snapshot after each ``World.step()`` and provides
time series extraction for plotting or inspection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from genecells.core.world import World


@dataclass
class TickMetrics:
    """Metrics for a single tick."""
    tick: int
    population_size: int
    mean_food: float
    total_kills: int
    food_tiles: int
    mean_pheromone: float
    max_pheromone: float
    events: dict[str, Any] = field(default_factory=dict)


class MetricsCollector:
    """Collects TickMetrics across a run."""

    def __init__(self) -> None:
        self.history: list[TickMetrics] = []

    def record(self, world: World) -> TickMetrics:
        living = [cell for _, cell in world.living_cells()]
        food = np.array([c.food_level for c in living], dtype=np.float64)
        metrics = TickMetrics(
            tick=world.tick,
            population_size=len(living),
            mean_food=float(food.mean()) if food.size else 0.0,
            total_kills=sum(c.kill_count for c in world.cells),
            food_tiles=int(world.grid.food.sum()),
            mean_pheromone=float(world.grid.pheromone.mean()),
            max_pheromone=float(world.grid.pheromone.max()),
            events=world.last_events.to_events_dict(),
        )
        self.history.append(metrics)
        return metrics

    def time_series(self, name: str) -> np.ndarray:
        """
        Extract one metric across all recorded ticks.

        ``name`` is a TickMetrics field, or an events key such as ``"moves"``.
        """
        values = []
        for m in self.history:
            if name in m.events:
                values.append(m.events[name])
            else:
                values.append(getattr(m, name))
        return np.array(values, dtype=np.float64)

    def summary(self) -> dict[str, Any]:
        if not self.history:
            return {}
        last = self.history[-1]
        return {
            "ticks": len(self.history),
            "final_population": last.population_size,
            "total_kills": last.total_kills,
            "total_moves": int(self.time_series("moves").sum()),
            "total_food_eaten": int(self.time_series("food_eaten").sum()),
        }
