"""Multi-tick simulation engine that drives an organism with a genome."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from core.config import SimulationConfig
from core.organism import Age, Organism
from genome.genome import Genome, TickReport
from metrics.schema import TickData

StopCondition = Callable[[Organism], bool]


@dataclass(frozen=True)
class TrialOutcome:
    ticks: int
    reached: bool
    alive: bool
    age: Age


def _tick_data(tick: int, organism: Organism, report: TickReport, scenario: str, fingerprint: str) -> TickData:
    # JSON object keys are strings; convert once here so traces hash stably.
    return TickData(
        tick=tick,
        age=organism.age().name,
        alive=organism.is_alive(),
        loci={str(k): v for k, v in organism.loci().items()},
        concentrations={str(k): v for k, v in organism.chemistry.snapshot().items()},
        deltas={str(k): v for k, v in report.deltas.items()},
        firings=[asdict(f) for f in report.firings],
        brain_output=report.brain_output,
        scenario=scenario,
        genome_fingerprint=fingerprint,
    )


class Simulation:
    """Owns one organism for the lifetime of a run."""

    def __init__(self, genome: Genome, *, scenario: str = "", config: SimulationConfig | None = None) -> None:
        if config is not None:
            genome = Genome(genome.genes, config=config)
        self.genome = genome
        self.config = genome.config
        self.scenario = scenario
        self.fingerprint = genome.fingerprint()
        self.reset()

    def reset(self) -> None:
        self.organism = Organism()
        self.genome.initialize(self.organism)
        self.tick = -1

    def step(self) -> TickData:
        if self.config.stop_on_death and not self.organism.is_alive():
            raise RuntimeError("Cannot step a dead organism")
        self.tick += 1
        report = self.genome.step(self.organism)
        return _tick_data(self.tick, self.organism, report, self.scenario, self.fingerprint)

    def run(self, ticks: int, *, stop_when: Optional[StopCondition] = None) -> List[TickData]:
        """Execute up to N ticks and return the TickData stream."""
        trace: List[TickData] = []
        for _ in range(ticks):
            if self.config.stop_on_death and not self.organism.is_alive():
                break
            trace.append(self.step())
            if stop_when is not None and stop_when(self.organism):
                break
        return trace


def run_trial(genome: Genome, tick_cap: int, *, until: Age = Age.CHILD) -> TrialOutcome:
    """Run a fresh organism until its age equals ``until``, it dies, or the cap is hit."""
    organism = Organism()
    genome.initialize(organism)
    ticks = 0
    reached = False
    while ticks < tick_cap:
        genome.step(organism)
        ticks += 1
        if organism.age() == until:
            reached = True
            break
        if genome.config.stop_on_death and not organism.is_alive():
            break
    return TrialOutcome(ticks=ticks, reached=reached, alive=organism.is_alive(), age=organism.age())


__all__ = ["Simulation", "StopCondition", "TrialOutcome", "run_trial"]
