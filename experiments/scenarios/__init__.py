from experiments.scenarios.base import Scenario
from experiments.scenarios.aging import AgingScenario
from experiments.scenarios.brain_demo import BrainDemoScenario
from experiments.scenarios.chem_decay import ChemDecayScenario
from experiments.scenarios.full_sim import FullSimScenario

__all__ = [
    "Scenario",
    "AgingScenario",
    "BrainDemoScenario",
    "ChemDecayScenario",
    "FullSimScenario",
]
