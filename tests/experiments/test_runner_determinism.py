import json
import tempfile
from pathlib import Path

from experiments.runner import run


def assert_deterministic(scenario: str, seed: int, ticks: int):
    with tempfile.TemporaryDirectory() as d1, tempfile.TemporaryDirectory() as d2:
        run(scenario, seed=seed, ticks=ticks, outdir=Path(d1))
        run(scenario, seed=seed, ticks=ticks, outdir=Path(d2))

        summary1 = json.loads(Path(d1, "summary.json").read_text())
        summary2 = json.loads(Path(d2, "summary.json").read_text())
        assert summary1 == summary2

        ticks1 = Path(d1, "ticks.jsonl").read_text().splitlines()[:50]
        ticks2 = Path(d2, "ticks.jsonl").read_text().splitlines()[:50]
        assert ticks1 == ticks2


def test_chem_decay_runner_deterministic():
    assert_deterministic("chem_decay", seed=1337, ticks=300)


def test_full_sim_runner_deterministic():
    assert_deterministic("full_sim", seed=1337, ticks=300)


def test_aging_runner_deterministic():
    assert_deterministic("aging", seed=1337, ticks=300)
