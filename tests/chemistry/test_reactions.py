from core.chem import Chemical, ChemicalSystem, DeltaMap
from core.organism import Organism
from genome.genes import Catalytic, CatalyticBreakdown, Decay, Fusion, Normal, Reaction


def _react(shape, initial):
    chem = ChemicalSystem(initial)
    deltas = DeltaMap()
    n = shape.react(chem, deltas)
    return n, deltas, chem


def test_normal_consumes_reactants_and_produces_products():
    shape = Normal(Chemical(0, 0.25), Chemical(1, 0.125), Chemical(2, 0.0625), Chemical(3, 0.5))
    n, deltas, _ = _react(shape, {0: 0.5, 1: 0.5})
    assert n == 2.0
    assert deltas.as_dict() == {0: -0.5, 1: -0.25, 2: 0.125, 3: 1.0}


def test_fusion_product_bounded_by_event_count():
    shape = Fusion(Chemical(0, 0.25), Chemical(1, 0.25), Chemical(2, 0.25))
    n, deltas, chem = _react(shape, {0: 0.75, 1: 0.5})
    assert n == 2.0
    assert deltas.get(2) <= n * 0.25
    chem.apply(deltas)
    assert chem.get(2) <= n * 0.25
    assert chem.get(0) == 0.25
    assert chem.get(1) == 0.0


def test_decay_never_increases_concentration():
    for start in (0.0, 0.1, 0.37, 1.0):
        shape = Decay(Chemical(4, 0.25))
        _, deltas, chem = _react(shape, {4: start})
        chem.apply(deltas)
        assert chem.get(4) <= start


def test_catalytic_leaves_catalyst_untouched():
    shape = Catalytic(Chemical(0, 0.5), Chemical(1, 0.25), Chemical(2, 0.125))
    n, deltas, _ = _react(shape, {0: 0.5, 1: 1.0})
    assert n == 1.0
    assert deltas.get(0) == 0.0
    assert deltas.get(1) == -0.25
    assert deltas.get(2) == 0.125


def test_catalytic_breakdown_only_consumes_substrate():
    shape = CatalyticBreakdown(Chemical(0, 0.25), Chemical(1, 0.25))
    n, deltas, _ = _react(shape, {0: 1.0, 1: 0.5})
    assert n == 2.0
    assert deltas.as_dict() == {1: -0.5}


def test_missing_reactant_means_no_events():
    shape = Fusion(Chemical(0, 0.25), Chemical(1, 0.25), Chemical(2, 0.25))
    n, deltas, _ = _react(shape, {0: 1.0})
    assert n == 0.0
    assert not deltas


def test_zero_stoichiometry_is_inert():
    n, deltas, _ = _react(Decay(Chemical(0, 0.0)), {0: 0.5})
    assert n == 0.0
    assert not deltas


def test_reaction_is_rate_gated():
    organism = Organism()
    organism.chemistry.set(0, 1.0)
    reaction = Reaction(Decay(Chemical(0, 0.25)), rate=3)
    counter = 0
    fired = []
    for _ in range(6):
        deltas = DeltaMap()
        counter = reaction.step(organism, deltas, counter)
        fired.append(bool(deltas))
    assert fired == [False, False, True, False, False, True]


def test_reactions_read_the_committed_snapshot():
    organism = Organism()
    organism.chemistry.set(0, 0.5)
    deltas = DeltaMap()
    first = Reaction(Decay(Chemical(0, 0.25)))
    second = Reaction(Decay(Chemical(0, 0.25)))
    first.step(organism, deltas, 0)
    second.step(organism, deltas, 0)
    # Both saw 0.5 committed; the overdraw is clamped at commit.
    assert deltas.get(0) == -1.0
    organism.chemistry.apply(deltas)
    assert organism.chemistry.get(0) == 0.0
