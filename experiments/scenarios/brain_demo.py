from __future__ import annotations

from typing import Any, Dict, List, Optional

from brain.network import expected_weight_count
from core.config import SimulationConfig
from core.engine import Simulation
from experiments.scenarios.base import Scenario
from genome.genes import Brain
from genome.genome import Genome
from metrics.schema import TickData


class BrainDemoScenario(Scenario):
    """Drives a small genome-encoded network with a fixed input vector."""

    name = "brain_demo"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.hidden_layers = int(cfg.get("hidden_layers", 2))
        self.width = int(cfg.get("width", 2))
        self.weight = float(cfg.get("weight", 1.0))
        self.inputs: List[float] = [float(v) for v in cfg.get("inputs", [0.1, 0.33])]
        self.outputs = int(cfg.get("outputs", 2))
        self.network_built = False
        self.last_output: Optional[List[float]] = None
        self.ticks_run = 0

    def simulation_config(self) -> SimulationConfig:
        return SimulationConfig(brain_inputs=len(self.inputs), brain_outputs=self.outputs)

    def build_genome(self, seed: int) -> Genome:
        count = expected_weight_count(len(self.inputs), self.outputs, self.hidden_layers, self.width)
        return Genome([Brain(self.hidden_layers, self.width, [self.weight] * count)], config=self.simulation_config())

    def setup(self, sim: Simulation) -> None:
        self.network_built = sim.organism.brain is not None

    def on_tick(self, sim: Simulation, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        if sim.organism.brain is not None:
            self.last_output = sim.organism.brain.update(self.inputs)

    def summarize(self) -> Dict[str, Any]:
        return {
            "ticks_run": self.ticks_run,
            "network_built": self.network_built,
            "inputs": self.inputs,
            "output": self.last_output,
        }


__all__ = ["BrainDemoScenario"]
