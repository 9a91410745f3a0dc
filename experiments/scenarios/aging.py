from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from core.engine import Simulation
from core.organism import Age, Locus
from experiments.scenarios.base import Scenario
from genome.genes import Emitter, Receptor, ReceptorType
from genome.genome import Genome
from metrics.schema import TickData


def maturation_genome() -> Genome:
    """A steady emitter whose rising level trips three age markers in turn."""
    return Genome(
        [
            Emitter(chemical=1, gain=0.125),
            Receptor(ReceptorType.UPPER_BOUND, chemical=1, gain=1.0, threshold=0.3, locus=Locus.AGED_TO_CHILD),
            Receptor(ReceptorType.UPPER_BOUND, chemical=1, gain=1.0, threshold=0.55, locus=Locus.AGED_TO_ADOLESCENT),
            Receptor(ReceptorType.UPPER_BOUND, chemical=1, gain=1.0, threshold=0.8, locus=Locus.AGED_TO_YOUTH),
        ]
    )


class AgingScenario(Scenario):
    """Reports every age transition of a stored (or built-in) genome."""

    name = "aging"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.genome_path = cfg.get("genome")
        self.transitions: List[Dict[str, Any]] = []
        self.age = Age.BABY.name
        self.died_at = -1
        self.ticks_run = 0

    def build_genome(self, seed: int) -> Genome:
        if self.genome_path:
            return Genome.load(Path(self.genome_path), config=self.simulation_config())
        return maturation_genome()

    def setup(self, sim: Simulation) -> None:
        self.age = sim.organism.age().name

    def on_tick(self, sim: Simulation, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        if tickdata.age != self.age:
            self.transitions.append({"tick": tick_index, "from": self.age, "to": tickdata.age})
            self.age = tickdata.age
        if not tickdata.alive and self.died_at < 0:
            self.died_at = tick_index

    def is_done(self, sim: Simulation, tickdata: TickData, tick_index: int) -> bool:
        return not tickdata.alive

    def summarize(self) -> Dict[str, Any]:
        return {
            "ticks_run": self.ticks_run,
            "transitions": self.transitions,
            "final_age": self.age,
            "died_at": self.died_at,
        }


__all__ = ["AgingScenario", "maturation_genome"]
