#!/usr/bin/env python3
"""Run a baseline genecells world and print per-tick results."""

import logging

from genecells.core.config import WorldConfig
from genecells.core.world import World
from genecells.metrics.collector import MetricsCollector


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = WorldConfig(
        experiment_name="baseline",
        population=200,
        gene_count=16,
        width=48,
        height=48,
        kills_enabled=True,
        random_seed=42,
    )
    ticks = 100

    print(f"=== genecells: {config.experiment_name} ===")
    print(f"Population: {config.population}  Genes: {config.gene_count}")
    print(f"Grid: {config.width}x{config.height}  Ticks: {ticks}")
    print()

    world = World(config)
    collector = MetricsCollector()

    print(f"{'Tick':>5} {'Pop':>5} {'Moves':>6} {'Block':>6} {'Kills':>5} "
          f"{'Eaten':>5} {'Food':>6} {'Pher':>7}")
    print("-" * 52)

    for _ in range(ticks):
        world.step()
        m = collector.record(world)
        if m.tick % 10 == 0:
            ev = m.events
            print(
                f"{m.tick:5d} {m.population_size:5d} {ev['moves']:6d} "
                f"{ev['blocked_moves']:6d} {ev['kills']:5d} {ev['food_eaten']:5d} "
                f"{m.mean_food:6.2f} {m.mean_pheromone:7.4f}"
            )

    print()
    print("=== Summary ===")
    for key, value in collector.summary().items():
        print(f"  {key:18s}: {value}")


if __name__ == "__main__":
    main()
