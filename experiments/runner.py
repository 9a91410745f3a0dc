from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Type

from core.engine import Simulation
from experiments.scenarios.aging import AgingScenario
from experiments.scenarios.base import Scenario
from experiments.scenarios.brain_demo import BrainDemoScenario
from experiments.scenarios.chem_decay import ChemDecayScenario
from experiments.scenarios.full_sim import FullSimScenario
from metrics.hash import RunHash
from metrics.logger import JsonlLogger
from metrics.schema import SCHEMA_VERSION

SCENARIOS: Dict[str, Type[Scenario]] = {
    "chem_decay": ChemDecayScenario,
    "brain_demo": BrainDemoScenario,
    "full_sim": FullSimScenario,
    "aging": AgingScenario,
}


def list_scenarios() -> str:
    return "\n".join(sorted(SCENARIOS.keys()))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Headless scenario runner")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS.keys()))
    parser.add_argument("--seed", type=int, default=1337)
    parser.add_argument("--ticks", type=int, default=8)
    parser.add_argument("--out", type=str, required=False)
    parser.add_argument("--list", action="store_true", help="List available scenarios")
    parser.add_argument("--scenario-config", type=str, help="Path to JSON scenario config")
    parser.add_argument("--save-genome", action="store_true", help="Also write the scenario genome as genome.json")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args()


def run(
    scenario_name: str,
    seed: int,
    ticks: int,
    outdir: Path,
    scenario_config: dict | None = None,
    *,
    save_genome: bool = False,
) -> dict:
    scenario = SCENARIOS[scenario_name](scenario_config)
    genome = scenario.build_genome(seed)
    sim = Simulation(genome, scenario=scenario_name, config=scenario.simulation_config())
    scenario.setup(sim)

    outdir.mkdir(parents=True, exist_ok=True)
    if save_genome:
        sim.genome.save(outdir / "genome.json")

    rh = RunHash()
    ticks_run_actual = 0
    with JsonlLogger(outdir / "ticks.jsonl") as trace:
        for i in range(ticks):
            if sim.config.stop_on_death and not sim.organism.is_alive():
                break
            tick = sim.step()
            ticks_run_actual += 1
            scenario.on_tick(sim, tick, i)
            trace.write(tick)
            rh.update(tick)
            if scenario.is_done(sim, tick, i):
                break

    summary = scenario.summarize()
    summary.update(
        {
            "scenario": scenario_name,
            "seed": seed,
            "ticks_requested": ticks,
            "ticks_run": ticks_run_actual,
            "schema_version": SCHEMA_VERSION,
            "genome_fingerprint": sim.fingerprint,
            "run_hash": rh.hexdigest(),
            "scenario_config": scenario_config or {},
        }
    )
    (outdir / "summary.json").write_text(json.dumps(summary, sort_keys=True, separators=(",", ":")))
    return summary


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s - %(levelname)s - %(message)s")
    if args.list:
        print(list_scenarios())
        return
    if not args.scenario:
        raise SystemExit("Scenario required unless --list is used")
    scenario_config = None
    if args.scenario_config:
        scenario_config = json.loads(Path(args.scenario_config).read_text())
    outdir = Path(args.out) if args.out else Path(f"runs/{args.scenario}_{args.seed}")
    summary = run(args.scenario, args.seed, args.ticks, outdir, scenario_config, save_genome=args.save_genome)
    print(f"Scenario {args.scenario} ran {summary['ticks_run']} ticks. Results are in {outdir}")


if __name__ == "__main__":
    main()
