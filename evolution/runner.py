import argparse
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from core.config import EvolutionConfig
from core.rng import RNG
from evolution.fitness import ticks_to_target
from evolution.loop import hill_climb
from genome.genome import Genome
from metrics.logger import JsonlLogger

logger = logging.getLogger("evolution.runner")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hill-climb a genome toward a target age-up time")
    parser.add_argument("--out", type=str, required=True, help="Output directory for the evolved genome and history")
    parser.add_argument("--config", type=str, help="Path to a JSON EvolutionConfig; flags below override it")
    parser.add_argument("--genome", type=str, help="Starting genome JSON (default: empty genome)")
    parser.add_argument("--seed", type=int, help="Seed for the mutation stream")
    parser.add_argument("--trials", type=int, help="Trials per evolve call")
    parser.add_argument("--tick-cap", type=int, help="Maximum ticks per trial")
    parser.add_argument("--target-ticks", type=int, help="Desired tick at which the organism becomes a Child")
    parser.add_argument("--max-iterations", type=int, help="Outer iteration limit")
    parser.add_argument("--workers", type=int, help="Thread workers for trials (0 runs serially)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> EvolutionConfig:
    data = EvolutionConfig.load(args.config).to_dict() if args.config else EvolutionConfig().to_dict()
    overrides = {
        "seed": args.seed,
        "trial_count": args.trials,
        "tick_cap": args.tick_cap,
        "target_ticks": args.target_ticks,
        "max_iterations": args.max_iterations,
        "workers": args.workers,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return EvolutionConfig.from_dict(data)


def run(config: EvolutionConfig, outdir: Path, base: Genome | None = None) -> dict:
    outdir.mkdir(parents=True, exist_ok=True)
    (outdir / "config.json").write_text(json.dumps(config.to_dict(), sort_keys=True, separators=(",", ":")))

    stream = RNG(seed=config.seed).stream("mutation")
    fitness = ticks_to_target(config.target_ticks)
    base = base if base is not None else Genome()

    executor = ThreadPoolExecutor(max_workers=config.workers) if config.workers > 0 else None
    try:
        with JsonlLogger(outdir / "history.jsonl") as history:
            result = hill_climb(
                base,
                stream,
                trial_count=config.trial_count,
                tick_cap=config.tick_cap,
                fitness_fn=fitness,
                max_iterations=config.max_iterations,
                target_score=config.target_score,
                executor=executor,
                on_iteration=history.write,
            )
    finally:
        if executor is not None:
            executor.shutdown()

    result.best_genome.save(outdir / "evolved.json")
    summary = {
        "seed": config.seed,
        "target_ticks": config.target_ticks,
        "best_score": result.best_score,
        "iterations": result.iterations,
        "converged": result.best_score <= config.target_score,
        "gene_count": len(result.best_genome),
        "genome_fingerprint": result.best_genome.fingerprint(),
    }
    (outdir / "summary.json").write_text(json.dumps(summary, sort_keys=True, separators=(",", ":")))
    return summary


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s - %(levelname)s - %(message)s")
    config = build_config(args)
    base = Genome.load(args.genome) if args.genome else None
    outdir = Path(args.out)
    summary = run(config, outdir, base)
    print(f"Evolution finished with score {summary['best_score']} after {summary['iterations']} iterations. Results are in {outdir}")


if __name__ == "__main__":
    main()
