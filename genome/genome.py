"""Genome: an ordered, immutable gene sequence that drives an organism."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from brain.network import NeuralNetwork
from core.chem import ChemicalId, DeltaMap
from core.config import SimulationConfig
from core.organism import LocusId, Organism
from core.pipeline import Pipeline
from core.rng import RandomSource
from genome.codec import decode_genes, encode_genes
from genome.genes import Brain, Emitter, Gene, InitialState, Reaction, Receptor
from genome.mutation import mutate_gene, random_gene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Firing:
    gene_index: int
    chemical: ChemicalId
    value: float
    locus: Optional[LocusId] = None


@dataclass
class TickReport:
    """What happened during one genome tick."""

    firings: List[Firing] = field(default_factory=list)
    deltas: Dict[ChemicalId, float] = field(default_factory=dict)
    brain_output: Optional[List[float]] = None

    @property
    def signals(self) -> Dict[ChemicalId, float]:
        return {f.chemical: f.value for f in self.firings if f.locus is None}


@dataclass
class _TickContext:
    organism: Organism
    deltas: DeltaMap = field(default_factory=DeltaMap)
    report: TickReport = field(default_factory=TickReport)


class Genome:
    def __init__(self, genes: Iterable[Gene] = (), config: SimulationConfig | None = None) -> None:
        self._genes: Tuple[Gene, ...] = tuple(genes)
        self.config = config or SimulationConfig()
        self._pipeline = Pipeline(
            handlers={
                "kinetics": self._kinetics_step,
                "sensing": self._sensing_step,
                "commit": self._commit_step,
                "brain": self._brain_step,
            }
        )

    @property
    def genes(self) -> Tuple[Gene, ...]:
        return self._genes

    def __len__(self) -> int:
        return len(self._genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(self._genes)

    def __getitem__(self, index: int) -> Gene:
        return self._genes[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return self._genes == other._genes

    def __hash__(self) -> int:
        return hash(self._genes)

    def __repr__(self) -> str:
        return f"Genome({list(self._genes)!r})"

    def receptors(self) -> List[Receptor]:
        return [g for g in self._genes if isinstance(g, Receptor)]

    def brain_gene(self) -> Optional[Brain]:
        return next((g for g in self._genes if isinstance(g, Brain)), None)

    def build_brain(self) -> Optional[NeuralNetwork]:
        gene = self.brain_gene()
        if gene is None:
            return None
        net = NeuralNetwork.with_weights(
            self.config.brain_inputs,
            self.config.brain_outputs,
            gene.hidden_layer_count,
            gene.neurons_per_hidden_layer,
            gene.weights,
        )
        if net is None:
            logger.warning(
                "Brain gene with %d weights does not fit a %d-input %d-output %dx%d topology; running without a brain",
                len(gene.weights),
                self.config.brain_inputs,
                self.config.brain_outputs,
                gene.hidden_layer_count,
                gene.neurons_per_hidden_layer,
            )
        return net

    # --- simulation --------------------------------------------------------

    def initialize(self, organism: Organism) -> None:
        """Seed chemistry, reset rate counters, and build the brain."""
        for gene in self._genes:
            if isinstance(gene, InitialState):
                gene.apply(organism)
        organism.rate_counters = [0] * len(self._genes)
        organism.brain = self.build_brain()
        organism.brain_output = None

    def step(self, organism: Organism) -> TickReport:
        """Advance the organism by one logical tick."""
        if len(organism.rate_counters) != len(self._genes):
            raise RuntimeError("Genome.step called on an organism this genome did not initialize")
        ctx = _TickContext(organism=organism)
        self._pipeline.run(ctx)
        return ctx.report

    def _kinetics_step(self, ctx: _TickContext) -> None:
        counters = ctx.organism.rate_counters
        clears: Set[LocusId] = set()
        for index, gene in enumerate(self._genes):
            if isinstance(gene, Emitter):
                counters[index] = gene.step(ctx.organism, ctx.deltas, counters[index], clears)
            elif isinstance(gene, Reaction):
                counters[index] = gene.step(ctx.organism, ctx.deltas, counters[index])
        # Emitters all read pre-tick loci; clears land once every emitter has run.
        for locus in sorted(clears):
            ctx.organism.set_locus(locus, 0)

    def _sensing_step(self, ctx: _TickContext) -> None:
        for index, gene in enumerate(self._genes):
            if not isinstance(gene, Receptor):
                continue
            value = gene.sense(ctx.organism.chemistry, ctx.deltas)
            if value is None:
                continue
            gene.couple(ctx.organism, value)
            ctx.report.firings.append(Firing(index, gene.chemical, value, gene.locus))

    def _commit_step(self, ctx: _TickContext) -> None:
        ctx.report.deltas = ctx.deltas.as_dict()
        ctx.organism.chemistry.apply(ctx.deltas)

    def _brain_step(self, ctx: _TickContext) -> None:
        net = ctx.organism.brain
        if net is None:
            return
        inputs = [0.0] * net.input_count
        # Later receptors on the same chemical overwrite earlier ones.
        for chemical, value in ctx.report.signals.items():
            if chemical < net.input_count:
                inputs[chemical] = value
        output = net.update(inputs)
        ctx.organism.brain_output = output
        ctx.report.brain_output = output

    # --- evolution ---------------------------------------------------------

    def mutate(self, stream: RandomSource) -> "Genome":
        """Return a variant with one appended gene or one mutated gene field."""
        genes = list(self._genes)
        if stream.random() < 1.0 / (len(genes) + 1):
            genes.append(random_gene(stream))
        else:
            index = stream.randint(0, len(genes) - 1)
            genes[index] = mutate_gene(genes[index], stream)
        return Genome(genes, config=self.config)

    # --- persistence -------------------------------------------------------

    def to_json(self) -> str:
        return encode_genes(self._genes)

    @classmethod
    def from_json(cls, text: str, config: SimulationConfig | None = None) -> "Genome":
        return cls(decode_genes(text), config=config)

    def fingerprint(self) -> str:
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path, config: SimulationConfig | None = None) -> "Genome":
        return cls.from_json(Path(path).read_text(encoding="utf-8"), config=config)


__all__ = ["Firing", "Genome", "TickReport"]
