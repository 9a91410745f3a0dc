"""Random gene generation and the per-variant field mutation table."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, List, Optional, Type

from core.chem import CHEMICAL_COUNT, Chemical
from core.organism import MAX_LOCUS_VALUE
from core.rng import RandomSource
from genome.genes import (
    GENE_TYPES,
    Brain,
    Catalytic,
    CatalyticBreakdown,
    Decay,
    Emitter,
    Fusion,
    Gene,
    InitialState,
    IoType,
    Normal,
    Reaction,
    Receptor,
    ReceptorType,
)
from brain.network import expected_weight_count

# Random locus ids cover the named loci plus spare drive registers.
RANDOM_LOCUS_COUNT = 16
MAX_RANDOM_RATE = 255
MAX_STOICHIOMETRIC_AMOUNT = 1.0 / 16.0

FieldMutator = Callable[[Any, RandomSource], Any]


class MutationTableError(RuntimeError):
    """Raised when a gene variant has no mutation entry."""


def _bool(stream: RandomSource) -> bool:
    return stream.random() < 0.5


def random_chemical_id(stream: RandomSource) -> int:
    return stream.randint(0, CHEMICAL_COUNT - 1)


def random_concentration(stream: RandomSource) -> float:
    return stream.uniform(0.0, 1.0)


def random_locus_id(stream: RandomSource) -> int:
    return stream.randint(0, RANDOM_LOCUS_COUNT - 1)


def random_locus_value(stream: RandomSource) -> int:
    return stream.randint(0, MAX_LOCUS_VALUE)


def random_rate(stream: RandomSource) -> int:
    return stream.randint(0, MAX_RANDOM_RATE)


def random_amount(stream: RandomSource) -> float:
    return stream.uniform(0.0, MAX_STOICHIOMETRIC_AMOUNT)


def random_weight(stream: RandomSource) -> float:
    return stream.uniform(-1.0, 1.0)


def random_reagent(stream: RandomSource) -> Chemical:
    return Chemical(random_chemical_id(stream), random_amount(stream))


def random_reaction_type(stream: RandomSource):
    shape = stream.choice((Normal, Fusion, Decay, Catalytic, CatalyticBreakdown))
    arity = len(dataclasses.fields(shape))
    return shape(*(random_reagent(stream) for _ in range(arity)))


def random_initial_state(stream: RandomSource) -> InitialState:
    return InitialState(species=random_chemical_id(stream), concentration=random_concentration(stream))


def random_emitter(stream: RandomSource) -> Emitter:
    return Emitter(
        chemical=random_chemical_id(stream),
        gain=random_concentration(stream),
        kind=stream.choice(list(IoType)),
        rate=random_rate(stream),
        locus=random_locus_id(stream),
        threshold=random_locus_value(stream),
        invert=_bool(stream),
        clear_after_read=_bool(stream),
    )


def random_reaction(stream: RandomSource) -> Reaction:
    return Reaction(kind=random_reaction_type(stream), rate=random_rate(stream))


def random_receptor_locus(stream: RandomSource) -> Optional[int]:
    return random_locus_id(stream) if _bool(stream) else None


def random_receptor(stream: RandomSource) -> Receptor:
    return Receptor(
        kind=stream.choice(list(ReceptorType)),
        chemical=random_chemical_id(stream),
        gain=random_concentration(stream),
        threshold=random_concentration(stream),
        locus=random_receptor_locus(stream),
    )


def random_brain(
    stream: RandomSource,
    input_count: int,
    output_count: int,
    hidden_layer_count: int,
    neurons_per_hidden_layer: int,
) -> Brain:
    count = expected_weight_count(input_count, output_count, hidden_layer_count, neurons_per_hidden_layer)
    return Brain(
        hidden_layer_count=hidden_layer_count,
        neurons_per_hidden_layer=neurons_per_hidden_layer,
        weights=tuple(random_weight(stream) for _ in range(count)),
    )


# Brain genes are built explicitly for a known topology, never drawn blind.
RANDOM_GENE_FACTORIES: List[Callable[[RandomSource], Gene]] = [
    random_initial_state,
    random_emitter,
    random_reaction,
    random_receptor,
]


def random_gene(stream: RandomSource) -> Gene:
    return stream.choice(RANDOM_GENE_FACTORIES)(stream)


def _redraw(draw: Callable[[RandomSource], Any]) -> FieldMutator:
    return lambda _current, stream: draw(stream)


def _mutate_one_weight(weights: tuple, stream: RandomSource) -> tuple:
    if not weights:
        return weights
    index = stream.randint(0, len(weights) - 1)
    return weights[:index] + (random_weight(stream),) + weights[index + 1 :]


MUTATION_TABLE: Dict[Type, Dict[str, FieldMutator]] = {
    InitialState: {
        "species": _redraw(random_chemical_id),
        "concentration": _redraw(random_concentration),
    },
    Emitter: {
        "chemical": _redraw(random_chemical_id),
        "gain": _redraw(random_concentration),
        "kind": _redraw(lambda s: s.choice(list(IoType))),
        "rate": _redraw(random_rate),
        "locus": _redraw(random_locus_id),
        "threshold": _redraw(random_locus_value),
        "invert": _redraw(_bool),
        "clear_after_read": _redraw(_bool),
    },
    Reaction: {
        "kind": _redraw(random_reaction_type),
        "rate": _redraw(random_rate),
    },
    Receptor: {
        "kind": _redraw(lambda s: s.choice(list(ReceptorType))),
        "chemical": _redraw(random_chemical_id),
        "gain": _redraw(random_concentration),
        "threshold": _redraw(random_concentration),
        "locus": _redraw(random_receptor_locus),
    },
    # Topology is fixed so the weight vector stays valid.
    Brain: {
        "weights": _mutate_one_weight,
    },
}


def check_mutation_table() -> None:
    for tag, gene_type in GENE_TYPES.items():
        if gene_type not in MUTATION_TABLE:
            raise MutationTableError(f"No mutation entry for gene variant {tag}")
        field_names = {f.name for f in dataclasses.fields(gene_type)}
        stray = set(MUTATION_TABLE[gene_type]) - field_names
        if stray:
            raise MutationTableError(f"{tag} mutation entry names unknown fields {sorted(stray)}")


def mutate_gene(gene: Gene, stream: RandomSource) -> Gene:
    """Replace exactly one field of ``gene`` with a freshly drawn value."""
    mutators = MUTATION_TABLE.get(type(gene))
    if not mutators:
        raise MutationTableError(f"No mutation entry for gene variant {type(gene).__name__}")
    name = stream.choice(sorted(mutators))
    return dataclasses.replace(gene, **{name: mutators[name](getattr(gene, name), stream)})


__all__ = [
    "MUTATION_TABLE",
    "MutationTableError",
    "check_mutation_table",
    "mutate_gene",
    "random_brain",
    "random_emitter",
    "random_gene",
    "random_initial_state",
    "random_reaction",
    "random_reaction_type",
    "random_receptor",
]
