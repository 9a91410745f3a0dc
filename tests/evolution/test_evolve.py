import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.rng import RNG
from evolution.fitness import ticks_to_target, with_size_penalty
from evolution.loop import evolve, hill_climb
from experiments.scenarios.aging import maturation_genome
from genome.genes import InitialState
from genome.genome import Genome

# maturation_genome reaches Child on its third tick.
CHILD_TICKS = 3


def test_ticks_to_target_is_absolute_distance():
    score = ticks_to_target(10)
    assert score(7, Genome()) == 3.0
    assert score(13, Genome()) == 3.0
    assert score(10, Genome()) == 0.0


def test_size_penalty_adds_per_gene():
    score = with_size_penalty(ticks_to_target(3), 0.5)
    assert score(3, maturation_genome()) == 2.0


def test_evolve_returns_minimum_score():
    def derive(base, i):
        return maturation_genome() if i == 2 else base

    score, genome = evolve(Genome(), 4, 10, ticks_to_target(CHILD_TICKS), derive=derive)
    assert score == 0.0
    assert genome == maturation_genome()


def test_evolve_breaks_ties_toward_first_trial():
    def derive(base, i):
        return Genome(base.genes + (InitialState(200 + i, 0.0),))

    score, genome = evolve(maturation_genome(), 3, 10, ticks_to_target(CHILD_TICKS), derive=derive)
    assert score == 0.0
    assert genome.genes[-1] == InitialState(200, 0.0)


def test_trial_that_never_matures_scores_infinity():
    # An empty genome never leaves Baby, even when the cap equals the target.
    score, genome = evolve(Genome(), 1, CHILD_TICKS, ticks_to_target(CHILD_TICKS))
    assert math.isinf(score)
    assert genome == Genome()


def test_maturing_on_the_last_allowed_tick_still_counts():
    score, _ = evolve(maturation_genome(), 1, CHILD_TICKS, ticks_to_target(CHILD_TICKS))
    assert score == 0.0


def test_failed_trial_scores_infinity(caplog):
    def derive(base, i):
        return Genome() if i == 0 else maturation_genome()

    def fitness(ticks, genome):
        if len(genome) == 0:
            raise ValueError("boom")
        return abs(CHILD_TICKS - ticks)

    with caplog.at_level("ERROR"):
        score, genome = evolve(Genome(), 3, 10, fitness, derive=derive)
    assert score == 0.0
    assert genome == maturation_genome()
    assert "Trial 0 failed" in caplog.text


def test_all_trials_failing_yields_infinity():
    def fitness(ticks, genome):
        raise RuntimeError("nope")

    score, _ = evolve(Genome(), 2, 5, fitness)
    assert math.isinf(score)


def test_executor_matches_serial_result():
    def derive(base, i):
        return Genome(base.genes + (InitialState(100 + i, 0.0),))

    serial = evolve(maturation_genome(), 4, 10, ticks_to_target(CHILD_TICKS), derive=derive)
    with ThreadPoolExecutor(max_workers=3) as executor:
        threaded = evolve(maturation_genome(), 4, 10, ticks_to_target(CHILD_TICKS), derive=derive, executor=executor)
    assert threaded == serial


def test_evolve_requires_a_trial():
    with pytest.raises(ValueError):
        evolve(Genome(), 0, 10, ticks_to_target(3))


def test_hill_climb_stops_immediately_when_base_is_optimal():
    result = hill_climb(
        maturation_genome(),
        RNG(seed=1).stream("mutation"),
        trial_count=1,
        tick_cap=10,
        fitness_fn=ticks_to_target(CHILD_TICKS),
        max_iterations=50,
    )
    assert result.best_score == 0.0
    assert result.iterations == 0
    assert result.converged
    assert result.history == []


def _climb(seed, records=None):
    return hill_climb(
        Genome(),
        RNG(seed=seed).stream("mutation"),
        trial_count=1,
        tick_cap=40,
        fitness_fn=ticks_to_target(20),
        max_iterations=40,
        on_iteration=records.append if records is not None else None,
    )


def test_hill_climb_best_score_never_regresses():
    records = []
    result = _climb(21, records)
    assert result.iterations == len(result.history) == len(records)
    assert 1 <= result.iterations <= 40
    previous = math.inf
    for record in result.history:
        assert record.best_score <= previous
        if record.accepted:
            assert record.candidate_score == record.best_score
            assert record.best_score < previous or math.isinf(previous)
        else:
            assert record.candidate_score >= record.best_score
        previous = record.best_score
    assert result.best_score == previous


def test_hill_climb_keeps_finite_incumbent_over_unreached_candidates():
    records = []
    result = hill_climb(
        maturation_genome(),
        RNG(seed=4).stream("mutation"),
        trial_count=1,
        tick_cap=10,
        fitness_fn=ticks_to_target(5),
        max_iterations=25,
        on_iteration=records.append,
    )
    assert records
    for record in records:
        assert not math.isinf(record.best_score)
        if math.isinf(record.candidate_score):
            assert not record.accepted
    assert result.best_score <= 2.0


def test_unreached_candidates_drift_from_an_empty_genome():
    result = hill_climb(
        Genome(),
        RNG(seed=2).stream("mutation"),
        trial_count=1,
        tick_cap=5,
        fitness_fn=ticks_to_target(3),
        max_iterations=6,
    )
    unreached = [r for r in result.history if math.isinf(r.best_score)]
    assert all(r.accepted for r in unreached)
    assert len(result.best_genome) >= 1


def test_hill_climb_is_deterministic_per_seed():
    first = _climb(8)
    second = _climb(8)
    assert first.best_score == second.best_score
    assert first.best_genome == second.best_genome
    assert [r.fingerprint for r in first.history] == [r.fingerprint for r in second.history]
