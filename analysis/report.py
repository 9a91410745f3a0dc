import argparse
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from analysis.metrics import age_transitions, concentration_stats, firing_counts, score_curve_stats  # noqa: E402


def _read(path: Path) -> pd.DataFrame:
    return pd.read_parquet(path) if path.exists() else pd.DataFrame()


def generate_report(processed_dir: Path, report_dir: Path) -> Path:
    """Generate a markdown report with plots from the processed data."""
    report_dir.mkdir(parents=True, exist_ok=True)

    ticks_df = _read(processed_dir / "ticks.parquet")
    firings_df = _read(processed_dir / "firings.parquet")
    history_df = _read(processed_dir / "history.parquet")

    report_parts = ["# Analysis Report\n"]

    report_parts.append("## Run Metadata\n")
    metadata = {
        "Processed Directory": f"`{processed_dir}`",
        "Ticks": len(ticks_df),
        "Firings": len(firings_df),
        "Evolution Iterations": len(history_df),
    }
    report_parts.append(pd.DataFrame([metadata]).to_markdown(index=False))
    report_parts.append("\n")

    # --- Chemistry ---
    report_parts.append("## Chemical Concentrations\n")
    stats = concentration_stats(ticks_df)
    if not stats.empty:
        report_parts.append(stats.to_markdown())
        chem_cols = [c for c in ticks_df.columns if c.startswith("chem_")]
        plt.figure()
        for col in chem_cols:
            plt.plot(ticks_df["tick"], ticks_df[col], label=col)
        plt.ylim(0.0, 1.0)
        plt.title("Concentration per Tick")
        plt.xlabel("Tick")
        plt.ylabel("Concentration")
        if len(chem_cols) <= 10:
            plt.legend()
        plt.savefig(report_dir / "concentrations.png")
        plt.close()
        report_parts.append("\n![Concentrations](concentrations.png)\n")
    else:
        report_parts.append("No chemistry data found.\n")

    # --- Receptors ---
    report_parts.append("## Receptor Firings\n")
    counts = firing_counts(firings_df)
    if not counts.empty:
        report_parts.append(counts.to_markdown(index=False))
    else:
        report_parts.append("No receptor firings found.")
    report_parts.append("\n")

    # --- Age ---
    report_parts.append("## Age Transitions\n")
    transitions = age_transitions(ticks_df)
    if len(transitions) > 1:
        report_parts.append(transitions.to_markdown(index=False))
    else:
        report_parts.append("The organism never changed age.")
    report_parts.append("\n")

    # --- Evolution ---
    report_parts.append("## Evolution\n")
    curve = score_curve_stats(history_df)
    if curve:
        report_parts.append(pd.DataFrame([curve]).to_markdown(index=False))
        plt.figure()
        plt.plot(history_df["iteration"], history_df["best_score"], label="best")
        plt.scatter(history_df["iteration"], history_df["candidate_score"], s=4, alpha=0.4, label="candidate")
        plt.title("Score by Iteration")
        plt.xlabel("Iteration")
        plt.ylabel("Score")
        plt.legend()
        plt.savefig(report_dir / "scores.png")
        plt.close()
        report_parts.append("\n![Scores](scores.png)\n")
    else:
        report_parts.append("No evolution history found.\n")

    report_path = report_dir / "report.md"
    report_path.write_text("\n".join(report_parts))
    print(f"Report saved to {report_path}")
    return report_path


def main():
    parser = argparse.ArgumentParser(description="Generate analysis report from processed data.")
    parser.add_argument("--processed-dir", type=Path, default=Path("analysis/processed"), help="Directory with Parquet tables.")
    parser.add_argument("--report-dir", type=Path, default=Path("analysis/report"), help="Directory to save the report and plots.")
    args = parser.parse_args()

    generate_report(args.processed_dir, args.report_dir)


if __name__ == "__main__":
    main()
