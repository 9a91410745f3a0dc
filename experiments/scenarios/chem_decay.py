from __future__ import annotations

import logging
from typing import Any, Dict, List

from core.chem import Chemical
from core.engine import Simulation
from experiments.scenarios.base import Scenario
from genome.genes import Decay, Emitter, Reaction, Receptor, ReceptorType
from genome.genome import Genome
from metrics.schema import TickData

logger = logging.getLogger(__name__)


class ChemDecayScenario(Scenario):
    """Constant emission against a periodic decay, watched by a lower-bound receptor."""

    name = "chem_decay"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.chemical = int(cfg.get("chemical", 0))
        self.emit_gain = float(cfg.get("emit_gain", 0.125))
        self.decay_amount = float(cfg.get("decay_amount", 0.25))
        self.decay_rate = int(cfg.get("decay_rate", 4))
        self.threshold = float(cfg.get("threshold", 0.3))
        self.firing_ticks: List[int] = []
        self.firing_values: List[float] = []
        self.peak = 0.0
        self.final = 0.0
        self.ticks_run = 0

    def build_genome(self, seed: int) -> Genome:
        return Genome(
            [
                Emitter(chemical=self.chemical, gain=self.emit_gain),
                Reaction(Decay(Chemical(self.chemical, self.decay_amount)), rate=self.decay_rate),
                Receptor(ReceptorType.LOWER_BOUND, chemical=self.chemical, gain=1.0, threshold=self.threshold),
            ]
        )

    def on_tick(self, sim: Simulation, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        for firing in tickdata.firings:
            logger.debug("Receptor for %s triggered with output %s at tick %d", firing["chemical"], firing["value"], tick_index)
            self.firing_ticks.append(tick_index)
            self.firing_values.append(firing["value"])
        self.final = tickdata.concentrations.get(str(self.chemical), 0.0)
        self.peak = max(self.peak, self.final)

    def summarize(self) -> Dict[str, Any]:
        return {
            "ticks_run": self.ticks_run,
            "firing_ticks": self.firing_ticks,
            "firing_values": self.firing_values,
            "peak_concentration": self.peak,
            "final_concentration": self.final,
        }


__all__ = ["ChemDecayScenario"]
