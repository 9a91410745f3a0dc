from typing import Dict

import pandas as pd


def concentration_stats(ticks_df: pd.DataFrame) -> pd.DataFrame:
    """Mean/min/max per chemical column."""
    chem_cols = [c for c in ticks_df.columns if c.startswith("chem_")]
    if not chem_cols:
        return pd.DataFrame()
    return ticks_df[chem_cols].agg(["mean", "min", "max"]).T


def firing_counts(firings_df: pd.DataFrame) -> pd.DataFrame:
    """Number of firings per receptor gene."""
    if firings_df.empty:
        return pd.DataFrame(columns=["gene_index", "chemical", "firings"])
    return (
        firings_df.groupby(["gene_index", "chemical"]).size().rename("firings").reset_index()
    )


def age_transitions(ticks_df: pd.DataFrame) -> pd.DataFrame:
    if ticks_df.empty or "age" not in ticks_df.columns:
        return pd.DataFrame(columns=["tick", "age"])
    changed = ticks_df["age"] != ticks_df["age"].shift()
    return ticks_df.loc[changed, ["tick", "age"]].reset_index(drop=True)


def score_curve_stats(history_df: pd.DataFrame) -> Dict[str, float]:
    if history_df.empty or "best_score" not in history_df.columns:
        return {}
    accepted = history_df["accepted"].sum() if "accepted" in history_df.columns else 0
    return {
        "iterations": int(len(history_df)),
        "accepted": int(accepted),
        "acceptance_rate": float(accepted / len(history_df)),
        "initial_best": float(history_df["best_score"].iloc[0]),
        "final_best": float(history_df["best_score"].iloc[-1]),
        "monotonic": bool(history_df["best_score"].is_monotonic_decreasing),
    }
