from __future__ import annotations

import pytest

from experiments.runner import SCENARIOS, run
from genome.genome import Genome
from metrics.hash import RunHash, tick_hash, trace_hash
from metrics.logger import JsonlLogger, load_trace
from .trace import generate_trace

DEFAULT_SEED = 1337
DEFAULT_TICKS = 200


def build_hashes(scenario: str, seed: int = DEFAULT_SEED, ticks: int = DEFAULT_TICKS) -> list[dict]:
    run_hash = RunHash()
    hashes = []
    for tick in generate_trace(scenario, seed=seed, ticks=ticks):
        digest = run_hash.update(tick)
        hashes.append({"tick": tick.tick, "hash": digest})
    hashes.append({"tick": "run", "hash": run_hash.hexdigest()})
    return hashes


@pytest.mark.parametrize("scenario", sorted(SCENARIOS))
def test_trace_hash_is_reproducible(scenario: str) -> None:
    assert build_hashes(scenario) == build_hashes(scenario), "Determinism regression: trace hash differs between runs"


def test_written_trace_hashes_like_in_memory_trace(tmp_path) -> None:
    trace = generate_trace("full_sim", seed=DEFAULT_SEED, ticks=50)
    with JsonlLogger(tmp_path / "ticks.jsonl") as logger:
        logger.write_all(trace)
    reloaded = load_trace(tmp_path / "ticks.jsonl")
    assert [tick_hash(t) for t in reloaded] == [tick_hash(t) for t in trace]
    assert trace_hash(reloaded) == trace_hash(trace)


def test_run_hash_in_summary_matches_trace_file(tmp_path) -> None:
    summary = run("chem_decay", seed=DEFAULT_SEED, ticks=40, outdir=tmp_path)
    assert trace_hash(load_trace(tmp_path / "ticks.jsonl")) == summary["run_hash"]


def test_reloaded_genome_reproduces_trace(tmp_path) -> None:
    stored = SCENARIOS["full_sim"]().build_genome(DEFAULT_SEED)
    path = tmp_path / "genome.json"
    stored.save(path)
    reloaded = Genome.load(path, config=stored.config)
    first = generate_trace("full_sim", seed=DEFAULT_SEED, ticks=60, genome=stored)
    second = generate_trace("full_sim", seed=DEFAULT_SEED, ticks=60, genome=reloaded)
    assert trace_hash(first) == trace_hash(second)
