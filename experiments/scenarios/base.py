"""Scenario base class for headless simulation runs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from core.config import SimulationConfig
from core.engine import Simulation
from genome.genome import Genome
from metrics.schema import TickData


class Scenario(ABC):
    name: str = "base"

    def simulation_config(self) -> SimulationConfig:
        return SimulationConfig()

    @abstractmethod
    def build_genome(self, seed: int) -> Genome:
        """Deterministically assemble the genome this scenario runs."""

    def setup(self, sim: Simulation) -> None:
        """Hook invoked once after the organism is initialized."""

    @abstractmethod
    def on_tick(self, sim: Simulation, tickdata: TickData, tick_index: int) -> None:
        """Hook invoked every tick."""

    def is_done(self, sim: Simulation, tickdata: TickData, tick_index: int) -> bool:
        return False

    @abstractmethod
    def summarize(self) -> Dict[str, Any]:
        """Return summary metrics."""


__all__ = ["Scenario"]
