"""Configuration dataclasses for simulations and evolution runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Type, TypeVar

from core.chem import CHEMICAL_COUNT

T = TypeVar("T")


def _from_mapping(cls: Type[T], data: Mapping[str, Any]) -> T:
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**dict(data))


@dataclass
class SimulationConfig:
    # Brain inputs are one slot per chemical id.
    brain_inputs: int = CHEMICAL_COUNT
    brain_outputs: int = 4
    stop_on_death: bool = True

    def __post_init__(self) -> None:
        if self.brain_inputs < 0 or self.brain_outputs < 0:
            raise ValueError("brain_inputs and brain_outputs must be non-negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        return _from_mapping(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EvolutionConfig:
    seed: int = 1337
    trial_count: int = 1
    tick_cap: int = 300
    target_ticks: int = 100
    max_iterations: int = 1000
    target_score: float = 0.0
    workers: int = 0

    def __post_init__(self) -> None:
        if self.trial_count < 1:
            raise ValueError(f"trial_count must be >= 1, got {self.trial_count}")
        if self.tick_cap < 1:
            raise ValueError(f"tick_cap must be >= 1, got {self.tick_cap}")
        if not 1 <= self.target_ticks < self.tick_cap:
            raise ValueError(f"target_ticks must be in [1, tick_cap), got {self.target_ticks} with tick_cap={self.tick_cap}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.workers < 0:
            raise ValueError(f"workers must be >= 0, got {self.workers}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvolutionConfig":
        return _from_mapping(cls, data)

    @classmethod
    def load(cls, path: str | Path) -> "EvolutionConfig":
        return cls.from_dict(json.loads(Path(path).read_text()))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["EvolutionConfig", "SimulationConfig"]
