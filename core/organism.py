"""Organism body: chemistry, locus registers, and the derived age stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional

from core.chem import ChemicalSystem

if TYPE_CHECKING:
    from brain.network import NeuralNetwork

LocusId = int
LocusValue = int

MAX_LOCUS_VALUE = 255


class Locus(IntEnum):
    DEATH = 0
    AGED_TO_CHILD = 1
    AGED_TO_ADOLESCENT = 2
    AGED_TO_YOUTH = 3
    AGED_TO_ADULT = 4
    AGED_TO_OLD = 5
    AGED_TO_SENILE = 6
    HUNGER = 7


class Age(IntEnum):
    BABY = 0
    CHILD = 1
    ADOLESCENT = 2
    YOUTH = 3
    ADULT = 4
    OLD = 5
    SENILE = 6


class Drive(Enum):
    HUNGER = "hunger"


# Most mature first; the first nonzero marker decides the stage.
_AGE_MARKERS = (
    (Locus.AGED_TO_SENILE, Age.SENILE),
    (Locus.AGED_TO_OLD, Age.OLD),
    (Locus.AGED_TO_ADULT, Age.ADULT),
    (Locus.AGED_TO_YOUTH, Age.YOUTH),
    (Locus.AGED_TO_ADOLESCENT, Age.ADOLESCENT),
    (Locus.AGED_TO_CHILD, Age.CHILD),
)

_DRIVE_LOCI = {Drive.HUNGER: Locus.HUNGER}


def clamp_locus(value: float) -> LocusValue:
    return int(max(0, min(MAX_LOCUS_VALUE, round(value))))


@dataclass
class Organism:
    """A simulated body. Genes act on it through explicit context passing."""

    chemistry: ChemicalSystem = field(default_factory=ChemicalSystem)
    rate_counters: List[int] = field(default_factory=list)
    brain: Optional["NeuralNetwork"] = None
    brain_output: Optional[List[float]] = None
    _loci: Dict[LocusId, LocusValue] = field(default_factory=dict, repr=False)

    def locus(self, locus_id: LocusId) -> LocusValue:
        return self._loci.setdefault(int(locus_id), 0)

    def set_locus(self, locus_id: LocusId, value: float) -> None:
        self._loci[int(locus_id)] = clamp_locus(value)

    def loci(self) -> Dict[LocusId, LocusValue]:
        return dict(sorted(self._loci.items()))

    def age(self) -> Age:
        for marker, stage in _AGE_MARKERS:
            if self.locus(marker) != 0:
                return stage
        return Age.BABY

    def is_alive(self) -> bool:
        return self.locus(Locus.DEATH) == 0

    def drive(self, drive: Drive) -> LocusValue:
        return self.locus(_DRIVE_LOCI[drive])


__all__ = ["Age", "Drive", "Locus", "LocusId", "LocusValue", "MAX_LOCUS_VALUE", "Organism", "clamp_locus"]
