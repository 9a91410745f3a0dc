import argparse
import json
from pathlib import Path

import pandas as pd

from metrics.logger import read_jsonl


def ticks_frame(trace_path: Path) -> pd.DataFrame:
    """Flatten a ticks.jsonl trace into one row per tick with a column per chemical."""
    rows = []
    for tick in read_jsonl(trace_path):
        row = {
            "tick": tick["tick"],
            "age": tick["age"],
            "alive": tick["alive"],
            "firing_count": len(tick["firings"]),
            "scenario": tick.get("scenario", ""),
        }
        for chemical, value in tick["concentrations"].items():
            row[f"chem_{int(chemical):03d}"] = value
        for locus, value in tick["loci"].items():
            row[f"locus_{int(locus):03d}"] = value
        rows.append(row)
    frame = pd.DataFrame(rows)
    # Species touched later in the run are absent (zero) before first touch.
    chem_cols = [c for c in frame.columns if c.startswith("chem_") or c.startswith("locus_")]
    if chem_cols:
        frame[chem_cols] = frame[chem_cols].fillna(0)
    return frame


def firings_frame(trace_path: Path) -> pd.DataFrame:
    rows = []
    for tick in read_jsonl(trace_path):
        for firing in tick["firings"]:
            rows.append({"tick": tick["tick"], **firing})
    return pd.DataFrame(rows, columns=["tick", "gene_index", "chemical", "value", "locus"])


def history_frame(history_path: Path) -> pd.DataFrame:
    return pd.DataFrame(list(read_jsonl(history_path)))


def extract_data(run_dir: Path, output_dir: Path) -> None:
    """Extract a scenario or evolution run directory into Parquet tables."""
    output_dir.mkdir(parents=True, exist_ok=True)

    for f in output_dir.glob("*.parquet"):
        f.unlink()

    trace_path = run_dir / "ticks.jsonl"
    if trace_path.exists():
        ticks_frame(trace_path).to_parquet(output_dir / "ticks.parquet")
        firings_frame(trace_path).to_parquet(output_dir / "firings.parquet")
        print(f"Tick tables saved to {output_dir}")

    history_path = run_dir / "history.jsonl"
    if history_path.exists():
        history_frame(history_path).to_parquet(output_dir / "history.parquet")
        print(f"Evolution history saved to {output_dir / 'history.parquet'}")

    summary_path = run_dir / "summary.json"
    if summary_path.exists():
        summary = json.loads(summary_path.read_text())
        flat = {k: v for k, v in summary.items() if not isinstance(v, (list, dict))}
        pd.DataFrame([flat]).to_parquet(output_dir / "summary.parquet")


def main():
    parser = argparse.ArgumentParser(description="Extract run data into Parquet tables.")
    parser.add_argument("run_dir", type=Path, help="Directory of a scenario or evolution run.")
    parser.add_argument("--output-dir", type=Path, default=Path("analysis/processed"), help="Directory to save the Parquet tables.")
    args = parser.parse_args()

    extract_data(args.run_dir, args.output_dir)


if __name__ == "__main__":
    main()
