import pytest

from brain.network import expected_weight_count
from core.chem import Chemical
from core.config import SimulationConfig
from core.organism import Age, Locus, Organism
from experiments.scenarios.aging import maturation_genome
from genome.genes import Brain, Decay, Emitter, InitialState, Reaction, Receptor, ReceptorType
from genome.genome import Genome


def _decay_genome():
    return Genome(
        [
            Emitter(chemical=0, gain=0.125),
            Reaction(Decay(Chemical(0, 0.25)), rate=4),
            Receptor(ReceptorType.LOWER_BOUND, chemical=0, gain=1.0, threshold=0.3),
        ]
    )


def test_emission_against_periodic_decay():
    genome = _decay_genome()
    organism = Organism()
    genome.initialize(organism)

    levels = []
    firings = {}
    for tick in range(8):
        report = genome.step(organism)
        levels.append(organism.chemistry.get(0))
        if report.firings:
            firings[tick] = [(f.gene_index, f.value) for f in report.firings]

    assert levels == [0.125, 0.25, 0.375, 0.125, 0.25, 0.375, 0.5, 0.125]
    assert firings == {3: [(2, 0.125)], 7: [(2, 0.125)]}


def test_tick_report_carries_committed_deltas():
    genome = _decay_genome()
    organism = Organism()
    genome.initialize(organism)
    reports = [genome.step(organism) for _ in range(4)]
    assert reports[0].deltas == {0: 0.125}
    assert reports[3].deltas == {0: -0.25}
    assert reports[3].signals == {0: 0.125}


def test_gene_order_does_not_change_chemistry():
    forward = _decay_genome()
    backward = Genome(list(reversed(forward.genes)))
    a, b = Organism(), Organism()
    forward.initialize(a)
    backward.initialize(b)
    for _ in range(12):
        fa = forward.step(a)
        fb = backward.step(b)
        assert a.chemistry.snapshot() == b.chemistry.snapshot()
        assert [f.value for f in fa.firings] == [f.value for f in fb.firings]


def test_initialize_seeds_species_and_resets_counters():
    genome = Genome([InitialState(9, 0.75), Emitter(chemical=9, gain=0.1, rate=3)])
    organism = Organism()
    organism.rate_counters = [5, 5, 5]
    genome.initialize(organism)
    assert organism.chemistry.get(9) == 0.75
    assert organism.rate_counters == [0, 0]
    genome.step(organism)
    assert organism.rate_counters == [0, 1]


def test_step_requires_initialize():
    with pytest.raises(RuntimeError):
        _decay_genome().step(Organism())


def test_empty_genome_is_a_no_op():
    genome = Genome()
    organism = Organism()
    genome.initialize(organism)
    report = genome.step(organism)
    assert report.firings == []
    assert report.deltas == {}
    assert organism.brain is None


def test_maturation_trips_age_markers_in_order():
    genome = maturation_genome()
    organism = Organism()
    genome.initialize(organism)
    ages = []
    for _ in range(8):
        genome.step(organism)
        ages.append(organism.age())
    assert ages[2] == Age.CHILD
    assert ages[4] == Age.ADOLESCENT
    assert ages[6] == Age.YOUTH
    assert ages[:2] == [Age.BABY, Age.BABY]
    assert organism.locus(Locus.AGED_TO_CHILD) == 96


def test_brain_receives_receptor_signals_by_chemical_slot():
    config = SimulationConfig(brain_inputs=2, brain_outputs=1)
    count = expected_weight_count(2, 1, 0, 0)
    genome = Genome(
        [
            Emitter(chemical=1, gain=0.5),
            Receptor(ReceptorType.UPPER_BOUND, chemical=1, gain=1.0, threshold=0.25),
            Brain(0, 0, [1.0] * count),
        ],
        config=config,
    )
    organism = Organism()
    genome.initialize(organism)
    assert organism.brain is not None
    report = genome.step(organism)
    assert report.signals == {1: 0.5}
    expected = organism.brain.update([0.0, 0.5])
    assert report.brain_output == expected
    assert organism.brain_output == expected


def test_mismatched_brain_gene_runs_without_a_brain(caplog):
    config = SimulationConfig(brain_inputs=2, brain_outputs=1)
    genome = Genome([Brain(1, 3, [0.5] * 4)], config=config)
    organism = Organism()
    with caplog.at_level("WARNING"):
        genome.initialize(organism)
    assert organism.brain is None
    assert "does not fit" in caplog.text
    assert genome.step(organism).brain_output is None


def test_clearing_emitter_does_not_hide_locus_from_later_emitters():
    genes = [
        Emitter(chemical=0, gain=0.5, locus=9, clear_after_read=True),
        Emitter(chemical=1, gain=0.5, locus=9, threshold=1),
    ]
    snapshots = []
    for order in (genes, list(reversed(genes))):
        genome = Genome(order)
        organism = Organism()
        genome.initialize(organism)
        organism.set_locus(9, 200)
        genome.step(organism)
        snapshots.append(organism.chemistry.snapshot())
        assert organism.locus(9) == 0
    assert snapshots[0] == snapshots[1] == {0: 0.5, 1: 0.5}
