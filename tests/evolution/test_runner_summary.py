import json
import math

import pytest

from core.config import EvolutionConfig
from core.engine import run_trial
from evolution.runner import run
from genome.genome import Genome


def test_empty_start_does_not_count_as_converged(tmp_path):
    summary = run(EvolutionConfig(max_iterations=0), tmp_path)
    assert math.isinf(summary["best_score"])
    assert summary["converged"] is False
    assert summary["gene_count"] == 0
    assert json.loads((tmp_path / "summary.json").read_text())["converged"] is False


def test_converged_genome_actually_matures(tmp_path):
    config = EvolutionConfig(seed=5, tick_cap=30, target_ticks=10, max_iterations=60)
    summary = run(config, tmp_path)
    evolved = Genome.load(tmp_path / "evolved.json")
    outcome = run_trial(evolved, config.tick_cap)
    if math.isinf(summary["best_score"]):
        assert not outcome.reached
    else:
        assert outcome.reached
        assert summary["best_score"] == abs(config.target_ticks - outcome.ticks)


@pytest.mark.parametrize("target_ticks", [0, 300, 301])
def test_target_must_fit_below_tick_cap(target_ticks):
    with pytest.raises(ValueError):
        EvolutionConfig(tick_cap=300, target_ticks=target_ticks)
