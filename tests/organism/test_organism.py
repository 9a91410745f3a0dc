from core.organism import Age, Drive, Locus, Organism, clamp_locus


def test_newborn_is_a_living_baby():
    organism = Organism()
    assert organism.age() == Age.BABY
    assert organism.is_alive()


def test_most_mature_marker_wins():
    organism = Organism()
    organism.set_locus(Locus.AGED_TO_CHILD, 10)
    assert organism.age() == Age.CHILD
    organism.set_locus(Locus.AGED_TO_ADULT, 1)
    assert organism.age() == Age.ADULT
    organism.set_locus(Locus.AGED_TO_SENILE, 255)
    assert organism.age() == Age.SENILE


def test_skipped_stages_are_allowed():
    organism = Organism()
    organism.set_locus(Locus.AGED_TO_YOUTH, 3)
    assert organism.age() == Age.YOUTH


def test_death_locus():
    organism = Organism()
    organism.set_locus(Locus.DEATH, 1)
    assert not organism.is_alive()


def test_locus_values_are_clamped_bytes():
    assert clamp_locus(-3) == 0
    assert clamp_locus(300) == 255
    assert clamp_locus(95.625) == 96
    organism = Organism()
    organism.set_locus(9, 1000)
    assert organism.locus(9) == 255


def test_hunger_drive_reads_its_locus():
    organism = Organism()
    organism.set_locus(Locus.HUNGER, 42)
    assert organism.drive(Drive.HUNGER) == 42
