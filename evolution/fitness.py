"""Fitness functions: lower is better, zero is optimal."""

from __future__ import annotations

from typing import Callable

from genome.genome import Genome

FitnessFn = Callable[[int, Genome], float]


def ticks_to_target(target: int) -> FitnessFn:
    """Score by distance between ticks taken and a target age-up time."""

    def score(ticks: int, genome: Genome) -> float:
        return float(abs(target - ticks))

    return score


def with_size_penalty(base: FitnessFn, weight: float) -> FitnessFn:
    """Add ``weight`` per gene to discourage bloat."""

    def score(ticks: int, genome: Genome) -> float:
        return base(ticks, genome) + weight * len(genome)

    return score


__all__ = ["FitnessFn", "ticks_to_target", "with_size_penalty"]
