from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.chem import Chemical
from core.engine import Simulation
from core.rng import RNG
from experiments.scenarios.base import Scenario
from genome.genes import Decay, Emitter, Reaction, Receptor, ReceptorType
from genome.genome import Genome
from genome.mutation import random_brain
from metrics.schema import TickData


class FullSimScenario(Scenario):
    """Chemistry feeding receptor signals into a randomly wired brain."""

    name = "full_sim"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.hidden_layers = int(cfg.get("hidden_layers", 2))
        self.width = int(cfg.get("width", 8))
        self.ticks_run = 0
        self.firing_ticks: List[int] = []
        self.outputs_on_firing: List[List[float]] = []
        self.last_output: Optional[List[float]] = None

    def build_genome(self, seed: int) -> Genome:
        config = self.simulation_config()
        stream = RNG(seed=seed).stream("brain")
        return Genome(
            [
                Emitter(chemical=0, gain=0.125),
                Reaction(Decay(Chemical(0, 0.25)), rate=4),
                Receptor(ReceptorType.LOWER_BOUND, chemical=0, gain=1.0, threshold=0.3),
                random_brain(stream, config.brain_inputs, config.brain_outputs, self.hidden_layers, self.width),
            ],
            config=config,
        )

    def on_tick(self, sim: Simulation, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        self.last_output = tickdata.brain_output
        if tickdata.firings and tickdata.brain_output is not None:
            self.firing_ticks.append(tick_index)
            self.outputs_on_firing.append(tickdata.brain_output)

    def summarize(self) -> Dict[str, Any]:
        return {
            "ticks_run": self.ticks_run,
            "firing_ticks": self.firing_ticks,
            "outputs_on_firing": self.outputs_on_firing,
            "last_output": self.last_output,
        }


__all__ = ["FullSimScenario"]
