"""(1+1) stochastic hill-climbing over genomes.

``evolve`` scores independent trials of one base genome and keeps the best;
``hill_climb`` wraps it in the outer mutate-and-compare loop.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from core.engine import run_trial
from core.organism import Age
from core.rng import RandomSource
from evolution.fitness import FitnessFn
from genome.genome import Genome

logger = logging.getLogger(__name__)

DeriveFn = Callable[[Genome, int], Genome]


@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    candidate_score: float
    best_score: float
    accepted: bool
    gene_count: int
    fingerprint: str


@dataclass
class EvolutionResult:
    best_score: float
    best_genome: Genome
    iterations: int = 0
    history: List[IterationRecord] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.best_score <= 0.0


def _score_trial(genome: Genome, tick_cap: int, fitness_fn: FitnessFn, until: Age) -> float:
    outcome = run_trial(genome, tick_cap, until=until)
    if not outcome.reached:
        # Never reaching the target age is a failed trial, not a timing.
        return math.inf
    return float(fitness_fn(outcome.ticks, genome))


def _safe_score(index: int, genome: Genome, tick_cap: int, fitness_fn: FitnessFn, until: Age) -> float:
    # A failing trial only loses itself, never the whole run.
    try:
        return _score_trial(genome, tick_cap, fitness_fn, until)
    except Exception:
        logger.exception("Trial %d failed; scoring it as +inf", index)
        return math.inf


def evolve(
    base_genome: Genome,
    trial_count: int,
    tick_cap: int,
    fitness_fn: FitnessFn,
    *,
    derive: Optional[DeriveFn] = None,
    executor: Optional[Executor] = None,
    until: Age = Age.CHILD,
) -> Tuple[float, Genome]:
    """Run ``trial_count`` trials and return the minimum score and its genome.

    Ties go to the earliest trial, also when an executor runs them concurrently.
    """
    if trial_count < 1:
        raise ValueError(f"trial_count must be >= 1, got {trial_count}")
    trials = [derive(base_genome, i) if derive else base_genome for i in range(trial_count)]
    args = [(i, g, tick_cap, fitness_fn, until) for i, g in enumerate(trials)]
    if executor is None:
        scores = [_safe_score(*a) for a in args]
    else:
        futures = [executor.submit(_safe_score, *a) for a in args]
        scores = [f.result() for f in futures]

    best_index = 0
    for i, score in enumerate(scores):
        if score < scores[best_index]:
            best_index = i
    return scores[best_index], trials[best_index]


def hill_climb(
    base_genome: Genome,
    stream: RandomSource,
    *,
    trial_count: int,
    tick_cap: int,
    fitness_fn: FitnessFn,
    max_iterations: int,
    target_score: float = 0.0,
    executor: Optional[Executor] = None,
    on_iteration: Optional[Callable[[IterationRecord], None]] = None,
) -> EvolutionResult:
    """Mutate the incumbent once per iteration and keep strict improvements.

    While no trial has reached the target age every score is +inf; a
    candidate that also scores +inf still replaces the incumbent so mutations
    can accumulate until one does.
    """
    best_score, best_genome = evolve(base_genome, trial_count, tick_cap, fitness_fn, executor=executor)
    result = EvolutionResult(best_score=best_score, best_genome=best_genome)
    logger.info("Base genome (%d genes) scored %.3f", len(best_genome), best_score)

    while result.best_score > target_score and result.iterations < max_iterations:
        result.iterations += 1
        candidate = result.best_genome.mutate(stream)
        score, winner = evolve(candidate, trial_count, tick_cap, fitness_fn, executor=executor)
        accepted = score < result.best_score or (math.isinf(score) and math.isinf(result.best_score))
        if accepted:
            result.best_score = score
            result.best_genome = winner
            if math.isinf(score):
                logger.debug("Iteration %d drifted to %d genes without reaching the target age", result.iterations, len(winner))
            else:
                logger.info("Iteration %d improved score to %.3f (%d genes)", result.iterations, score, len(winner))
        record = IterationRecord(
            iteration=result.iterations,
            candidate_score=score,
            best_score=result.best_score,
            accepted=accepted,
            gene_count=len(result.best_genome),
            fingerprint=result.best_genome.fingerprint(),
        )
        result.history.append(record)
        if on_iteration is not None:
            on_iteration(record)

    return result


__all__ = ["DeriveFn", "EvolutionResult", "IterationRecord", "evolve", "hill_climb"]
