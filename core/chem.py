"""Chemical species, per-tick delta batching, and the committed concentration map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Tuple

ChemicalId = int
Concentration = float

CHEMICAL_COUNT = 256
MIN_CONCENTRATION = 0.0
MAX_CONCENTRATION = 1.0


def clamp_concentration(value: float) -> float:
    return max(MIN_CONCENTRATION, min(MAX_CONCENTRATION, value))


@dataclass(frozen=True)
class Chemical:
    """A species paired with an amount.

    Inside reactions the amount is the stoichiometric weight of one reaction
    event rather than a standing concentration.
    """

    id: ChemicalId
    concentration: Concentration = 0.0


class DeltaMap:
    """Pending concentration adjustments accumulated during one tick."""

    def __init__(self) -> None:
        self._deltas: Dict[ChemicalId, float] = {}

    def add(self, chemical: ChemicalId, amount: float) -> None:
        self._deltas[chemical] = self._deltas.get(chemical, 0.0) + amount

    def get(self, chemical: ChemicalId) -> float:
        return self._deltas.get(chemical, 0.0)

    def items(self) -> Iterator[Tuple[ChemicalId, float]]:
        return iter(sorted(self._deltas.items()))

    def as_dict(self) -> Dict[ChemicalId, float]:
        return dict(sorted(self._deltas.items()))

    def __len__(self) -> int:
        return len(self._deltas)

    def __bool__(self) -> bool:
        return bool(self._deltas)

    def __repr__(self) -> str:
        return f"DeltaMap({self.as_dict()!r})"


class ChemicalSystem:
    """Committed species concentrations, always within [0, 1]."""

    def __init__(self, initial: Mapping[ChemicalId, float] | None = None) -> None:
        self._concentrations: Dict[ChemicalId, Concentration] = {}
        for chemical, value in (initial or {}).items():
            self.set(chemical, value)

    def get(self, chemical: ChemicalId) -> Concentration:
        """Return the committed concentration, materializing absent species at 0."""
        return self._concentrations.setdefault(chemical, 0.0)

    concentration = get

    def set(self, chemical: ChemicalId, value: float) -> None:
        self._concentrations[chemical] = clamp_concentration(value)

    def apply(self, deltas: DeltaMap) -> None:
        """Commit a tick's batched deltas, clamping every touched species."""
        for chemical, delta in deltas.items():
            self._concentrations[chemical] = clamp_concentration(self.get(chemical) + delta)

    def snapshot(self) -> Dict[ChemicalId, Concentration]:
        return dict(sorted(self._concentrations.items()))

    def ids(self) -> Tuple[ChemicalId, ...]:
        return tuple(sorted(self._concentrations))

    def __contains__(self, chemical: object) -> bool:
        return chemical in self._concentrations

    def __len__(self) -> int:
        return len(self._concentrations)


__all__ = [
    "CHEMICAL_COUNT",
    "Chemical",
    "ChemicalId",
    "ChemicalSystem",
    "Concentration",
    "DeltaMap",
    "clamp_concentration",
]
