from __future__ import annotations

import json
from typing import Any, Dict, List

from flask import jsonify, request

from app.routes import bp
from core.engine import Simulation
from experiments.runner import SCENARIOS
from genome.codec import GenomeDecodeError
from genome.genome import Genome
from metrics.hash import trace_hash
from metrics.schema import TickData

MAX_BATCH = 100


class SimulationState:
    """Wrapper to hold the simulation and its history for API responses."""

    def __init__(self, seed: int = 1337, scenario: str = "chem_decay", genome: Genome | None = None) -> None:
        if scenario not in SCENARIOS:
            raise ValueError(f"Scenario '{scenario}' not found. Available: {', '.join(sorted(SCENARIOS))}")
        self.seed = seed
        self.scenario = SCENARIOS[scenario]()
        self.scenario_name = scenario
        if genome is None:
            genome = self.scenario.build_genome(seed)
        self.sim = Simulation(genome, scenario=scenario, config=self.scenario.simulation_config())
        self.history: List[TickData] = []

    def step(self, batch_size: int) -> Dict[str, Any]:
        ticks = self.sim.run(batch_size)
        self.history.extend(ticks)
        if not ticks:
            return serialize_tick(self.history[-1]) if self.history else {}
        return serialize_tick(ticks[-1])


state: SimulationState | None = None


def init_state(seed: int = 1337, scenario: str = "chem_decay", genome: Genome | None = None) -> None:
    global state
    state = SimulationState(seed=seed, scenario=scenario, genome=genome)


def serialize_tick(tick: TickData) -> Dict[str, Any]:
    payload = tick.to_ordered_dict()
    payload["stats"] = {
        "firing_count": len(tick.firings),
        "chemical_count": len(tick.concentrations),
        "locus_count": len(tick.loci),
    }
    return payload


@bp.route("/", methods=["GET"])
def index() -> Any:
    assert state is not None, "Simulation state not initialized"
    return jsonify(
        {
            "status": "ok",
            "scenario": state.scenario_name,
            "tick": state.sim.tick,
            "age": state.sim.organism.age().name,
            "alive": state.sim.organism.is_alive(),
        }
    )


@bp.route("/step", methods=["POST"])
def step() -> Any:
    assert state is not None, "Simulation state not initialized"
    req = request.get_json(silent=True) or {}
    batch_size = max(1, min(int(req.get("batch_size", 1)), MAX_BATCH))
    return jsonify(state.step(batch_size))


@bp.route("/reset", methods=["POST"])
def reset() -> Any:
    req = request.get_json(silent=True) or {}
    seed = int(req.get("seed", 1337))
    scenario = str(req.get("scenario", state.scenario_name if state else "chem_decay"))
    if scenario not in SCENARIOS:
        return jsonify({"status": "error", "error": f"unknown scenario {scenario!r}"}), 400
    init_state(seed=seed, scenario=scenario)
    return jsonify({"status": "reset", "seed": seed, "scenario": scenario})


@bp.route("/history", methods=["GET"])
def history() -> Any:
    assert state is not None, "Simulation state not initialized"
    return jsonify([serialize_tick(t) for t in state.history])


@bp.route("/genome", methods=["GET"])
def get_genome() -> Any:
    assert state is not None, "Simulation state not initialized"
    genome = state.sim.genome
    return jsonify({"fingerprint": genome.fingerprint(), "genome": json.loads(genome.to_json())})


@bp.route("/genome", methods=["POST"])
def put_genome() -> Any:
    assert state is not None, "Simulation state not initialized"
    try:
        genome = Genome.from_json(request.get_data(as_text=True))
    except GenomeDecodeError as exc:
        return jsonify({"status": "error", "error": str(exc)}), 400
    init_state(seed=state.seed, scenario=state.scenario_name, genome=genome)
    return jsonify({"status": "loaded", "fingerprint": genome.fingerprint(), "genes": len(genome)})


@bp.route("/determinism_check", methods=["POST"])
def determinism_check() -> Any:
    assert state is not None, "Simulation state not initialized"
    req = request.get_json(silent=True) or {}
    ticks = max(1, min(int(req.get("ticks", 200)), 10_000))
    genome = state.sim.genome
    first = trace_hash(Simulation(genome, scenario=state.scenario_name).run(ticks))
    second = trace_hash(Simulation(genome, scenario=state.scenario_name).run(ticks))
    return jsonify({"match": first == second, "run_hash": first, "ticks": ticks})
