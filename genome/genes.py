"""Gene variants and their per-tick kinetics.

Genes are immutable values. Rate-gating counters are owned by the organism
(indexed by gene position) and threaded through ``step`` explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Set, Tuple, Type, Union

from core.chem import Chemical, ChemicalId, ChemicalSystem, DeltaMap, clamp_concentration
from core.organism import MAX_LOCUS_VALUE, LocusId, LocusValue, Organism


class IoType(Enum):
    ANALOG = "analog"
    DIGITAL = "digital"


class ReceptorType(Enum):
    LOWER_BOUND = "lower_bound"
    UPPER_BOUND = "upper_bound"


def rate_gate(counter: int, rate: int) -> Tuple[bool, int]:
    """Advance a tick counter; returns (fires, new_counter)."""
    counter += 1
    if counter < rate:
        return False, counter
    return True, 0


# --- reaction shapes -------------------------------------------------------


@dataclass(frozen=True)
class ReactionShape:
    shape: ClassVar[str] = "base"

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        raise NotImplementedError

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        """Species whose availability bounds the number of reaction events."""
        raise NotImplementedError

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        raise NotImplementedError

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        raise NotImplementedError

    def events(self, chemistry: ChemicalSystem) -> float:
        """Number of reaction events the committed concentrations allow."""
        ratios = [chemistry.get(c.id) / c.concentration for c in self.reactants if c.concentration > 0.0]
        return min(ratios) if ratios else 0.0

    def react(self, chemistry: ChemicalSystem, deltas: DeltaMap) -> float:
        n = self.events(chemistry)
        if n <= 0.0:
            return 0.0
        for chem in self.consumed:
            deltas.add(chem.id, -n * chem.concentration)
        for chem in self.produced:
            deltas.add(chem.id, n * chem.concentration)
        return n


@dataclass(frozen=True)
class Normal(ReactionShape):
    """A + B -> C + D"""

    shape: ClassVar[str] = "normal"
    a: Chemical
    b: Chemical
    c: Chemical
    d: Chemical

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b, self.c, self.d)

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        return (self.c, self.d)


@dataclass(frozen=True)
class Fusion(ReactionShape):
    """A + B -> C"""

    shape: ClassVar[str] = "fusion"
    a: Chemical
    b: Chemical
    c: Chemical

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b, self.c)

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        return (self.c,)


@dataclass(frozen=True)
class Decay(ReactionShape):
    """A -> nothing"""

    shape: ClassVar[str] = "decay"
    a: Chemical

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        return (self.a,)

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        return (self.a,)

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        return (self.a,)

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        return ()


@dataclass(frozen=True)
class Catalytic(ReactionShape):
    """A + B -> A + C"""

    shape: ClassVar[str] = "catalytic"
    a: Chemical
    b: Chemical
    c: Chemical

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b, self.c)

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        return (self.b,)

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        return (self.c,)


@dataclass(frozen=True)
class CatalyticBreakdown(ReactionShape):
    """A + B -> A"""

    shape: ClassVar[str] = "catalytic_breakdown"
    a: Chemical
    b: Chemical

    @property
    def chemicals(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def reactants(self) -> Tuple[Chemical, ...]:
        return (self.a, self.b)

    @property
    def consumed(self) -> Tuple[Chemical, ...]:
        return (self.b,)

    @property
    def produced(self) -> Tuple[Chemical, ...]:
        return ()


REACTION_SHAPES: Dict[str, Type[ReactionShape]] = {
    cls.shape: cls for cls in (Normal, Fusion, Decay, Catalytic, CatalyticBreakdown)
}


# --- genes -----------------------------------------------------------------


@dataclass(frozen=True)
class InitialState:
    """Seeds one species before the first tick."""

    species: ChemicalId
    concentration: float

    def apply(self, organism: Organism) -> None:
        organism.chemistry.set(self.species, self.concentration)


@dataclass(frozen=True)
class Emitter:
    """Converts a locus reading into a chemical delta every ``rate`` ticks."""

    chemical: ChemicalId
    gain: float
    kind: IoType = IoType.DIGITAL
    rate: int = 1
    locus: LocusId = 0
    threshold: LocusValue = 0
    invert: bool = False
    clear_after_read: bool = False

    def step(self, organism: Organism, deltas: DeltaMap, counter: int, clears: Optional[Set[LocusId]] = None) -> int:
        """Emit for one tick and return the new rate counter.

        With ``clears`` given, a cleared locus is recorded there instead of
        zeroed, so every emitter in the tick reads the same pre-tick value.
        """
        fires, counter = rate_gate(counter, self.rate)
        if not fires:
            return counter
        value = organism.locus(self.locus)
        if self.clear_after_read:
            if clears is None:
                organism.set_locus(self.locus, 0)
            else:
                clears.add(self.locus)
        signal = MAX_LOCUS_VALUE - value if self.invert else value
        if self.kind is IoType.DIGITAL:
            if signal >= self.threshold:
                deltas.add(self.chemical, self.gain)
            return counter
        modifier = self.gain / MAX_LOCUS_VALUE
        if signal >= self.threshold:
            deltas.add(self.chemical, (signal - self.threshold) * modifier)
        else:
            loss = (self.threshold - signal) * modifier
            # Loss never exceeds what is committed.
            deltas.add(self.chemical, -min(loss, organism.chemistry.get(self.chemical)))
        return counter


@dataclass(frozen=True)
class Reaction:
    kind: ReactionShape
    rate: int = 1

    def step(self, organism: Organism, deltas: DeltaMap, counter: int) -> int:
        fires, counter = rate_gate(counter, self.rate)
        if fires:
            self.kind.react(organism.chemistry, deltas)
        return counter


@dataclass(frozen=True)
class Receptor:
    """Edge-triggered threshold detector on one chemical.

    With ``locus`` set, a firing is written to that locus (scaled to 0-255)
    instead of being returned as a neural signal.
    """

    kind: ReceptorType
    chemical: ChemicalId
    gain: float
    threshold: float
    locus: Optional[LocusId] = None

    def sense(self, chemistry: ChemicalSystem, deltas: DeltaMap) -> Optional[float]:
        prev = chemistry.get(self.chemical)
        curr = prev + deltas.get(self.chemical)
        if self.kind is ReceptorType.LOWER_BOUND:
            fired = prev > self.threshold and curr < self.threshold
        else:
            fired = prev < self.threshold and curr > self.threshold
        if not fired:
            return None
        return clamp_concentration(curr * self.gain)

    def couple(self, organism: Organism, value: float) -> Optional[float]:
        if self.locus is None:
            return value
        organism.set_locus(self.locus, value * MAX_LOCUS_VALUE)
        return None

    def step(self, organism: Organism, deltas: DeltaMap) -> Optional[float]:
        value = self.sense(organism.chemistry, deltas)
        if value is None:
            return None
        return self.couple(organism, value)


@dataclass(frozen=True)
class Brain:
    """Encodes a neural network; consumed when a simulation is set up."""

    hidden_layer_count: int
    neurons_per_hidden_layer: int
    weights: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))


Gene = Union[InitialState, Emitter, Reaction, Receptor, Brain]

GENE_TYPES: Dict[str, Type] = {
    "InitialState": InitialState,
    "Emitter": Emitter,
    "Reaction": Reaction,
    "Receptor": Receptor,
    "Brain": Brain,
}


def gene_tag(gene: Gene) -> str:
    return type(gene).__name__


__all__ = [
    "Brain",
    "Catalytic",
    "CatalyticBreakdown",
    "Decay",
    "Emitter",
    "Fusion",
    "GENE_TYPES",
    "Gene",
    "InitialState",
    "IoType",
    "Normal",
    "REACTION_SHAPES",
    "Reaction",
    "ReactionShape",
    "Receptor",
    "ReceptorType",
    "gene_tag",
    "rate_gate",
]
