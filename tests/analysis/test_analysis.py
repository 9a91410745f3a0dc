
from analysis.extract import extract_data, firings_frame, history_frame, ticks_frame
from analysis.metrics import age_transitions, firing_counts, score_curve_stats
from analysis.report import generate_report
from core.config import EvolutionConfig
from evolution.runner import run as run_evolution
from experiments.runner import run as run_scenario


def test_ticks_frame_has_a_column_per_species(tmp_path):
    run_scenario("chem_decay", seed=1, ticks=8, outdir=tmp_path)
    frame = ticks_frame(tmp_path / "ticks.jsonl")
    assert list(frame["tick"]) == list(range(8))
    assert list(frame["chem_000"]) == [0.125, 0.25, 0.375, 0.125, 0.25, 0.375, 0.5, 0.125]

    counts = firing_counts(firings_frame(tmp_path / "ticks.jsonl"))
    assert counts.to_dict("records") == [{"gene_index": 2, "chemical": 0, "firings": 2}]


def test_age_transitions_from_aging_run(tmp_path):
    run_scenario("aging", seed=1, ticks=8, outdir=tmp_path)
    transitions = age_transitions(ticks_frame(tmp_path / "ticks.jsonl"))
    assert transitions.to_dict("records") == [
        {"tick": 0, "age": "BABY"},
        {"tick": 2, "age": "CHILD"},
        {"tick": 4, "age": "ADOLESCENT"},
        {"tick": 6, "age": "YOUTH"},
    ]


def test_score_curve_is_monotonic(tmp_path):
    config = EvolutionConfig(seed=2, tick_cap=20, target_ticks=6, max_iterations=10)
    run_evolution(config, tmp_path)
    history = history_frame(tmp_path / "history.jsonl")
    stats = score_curve_stats(history)
    assert stats["monotonic"] is True
    assert stats["iterations"] == len(history)


def test_extract_then_report(tmp_path):
    run_dir = tmp_path / "run"
    processed = tmp_path / "processed"
    report_dir = tmp_path / "report"
    run_scenario("chem_decay", seed=1, ticks=8, outdir=run_dir)
    extract_data(run_dir, processed)
    assert (processed / "ticks.parquet").exists()
    assert (processed / "firings.parquet").exists()
    assert (processed / "summary.parquet").exists()

    report_path = generate_report(processed, report_dir)
    text = report_path.read_text()
    assert "## Chemical Concentrations" in text
    assert "chem_000" in text
    assert (report_dir / "concentrations.png").exists()
