from __future__ import annotations

"""
Visualization utilities for workforce projections.

Read-only plotting functions that consume the projections CSV written by
`project_workforce.py` (long format: Year, Occupation, Supply, Demand, Gap)
and produce static PNGs under `output/plots/`. They never touch parameter
stores or scenarios.

Usage:
    from viz.plots import generate_all_plots_from_csv
    generate_all_plots_from_csv(Path('output/workforce_projections.csv'))
"""

from pathlib import Path
import pandas as pd
import matplotlib

matplotlib.use("Agg")  # headless: plots are only ever written to files
import matplotlib.pyplot as plt  # noqa: E402

from workforce_model.io_paths import OUTPUT_DIR  # noqa: E402
from workforce_model.projection import PROJECTION_COLUMNS  # noqa: E402


def _ensure_plots_dir(plots_dir: Path | None = None) -> Path:
    """Ensure the plots directory (default `output/plots/`) exists and return it."""
    plots_dir = plots_dir or OUTPUT_DIR / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)
    return plots_dir


def _read_projections_csv(csv_path: Path | str) -> pd.DataFrame:
    """Load the projections CSV and check its columns."""
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Projections CSV not found: {csv_path}")
    df = pd.read_csv(csv_path)
    missing = [c for c in PROJECTION_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Unexpected CSV format: missing columns {missing}")
    return df


def _save_fig(fig: plt.Figure, filename: str, plots_dir: Path | None = None) -> Path:
    out_path = _ensure_plots_dir(plots_dir) / filename
    fig.savefig(out_path, bbox_inches="tight", dpi=150)
    plt.close(fig)
    return out_path


def plot_total_supply_vs_demand(df: pd.DataFrame, plots_dir: Path | None = None) -> Path:
    """Total supply and total demand across all occupations per year."""
    totals = df.groupby("Year")[["Supply", "Demand"]].sum().sort_index()
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(totals.index, totals["Supply"].values, marker="o", label="Supply (Total)")
    ax.plot(totals.index, totals["Demand"].values, marker="o", label="Demand (Total)")
    ax.fill_between(totals.index, totals["Supply"].values, totals["Demand"].values, alpha=0.15, label="Gap")

    ax.set_title("Workforce Supply vs Demand (All Occupations)")
    ax.set_xticks(list(totals.index))
    ax.set_ylabel("FTE")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", fontsize=8)
    return _save_fig(fig, "total_supply_vs_demand.png", plots_dir)


def plot_gap_by_occupation(df: pd.DataFrame, plots_dir: Path | None = None) -> Path:
    """One gap line per occupation; positive values are shortages."""
    pivot = df.pivot(index="Year", columns="Occupation", values="Gap").sort_index()
    fig, ax = plt.subplots(figsize=(10, 5))
    for occ in pivot.columns:
        ax.plot(pivot.index, pivot[occ].values, marker=".", label=occ)
    ax.axhline(0, color="black", linewidth=0.8)

    ax.set_title("Workforce Gap by Occupation (Demand - Supply)")
    ax.set_xticks(list(pivot.index))
    ax.set_ylabel("FTE gap")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best", fontsize=8, ncol=2)
    return _save_fig(fig, "gap_by_occupation.png", plots_dir)


def plot_supply_demand_for_year(df: pd.DataFrame, year: int, plots_dir: Path | None = None) -> Path:
    """Grouped bars of supply and demand per occupation for a single year."""
    snapshot = df[df["Year"] == year].set_index("Occupation")
    if snapshot.empty:
        raise ValueError(f"No projections for year {year}")
    x = range(len(snapshot.index))
    width = 0.4
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar([i - width / 2 for i in x], snapshot["Supply"].values, width=width, label="Supply")
    ax.bar([i + width / 2 for i in x], snapshot["Demand"].values, width=width, label="Demand")

    ax.set_title(f"Supply and Demand by Occupation, {year}")
    ax.set_xticks(list(x))
    ax.set_xticklabels(snapshot.index, rotation=30, ha="right")
    ax.set_ylabel("FTE")
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend(loc="best", fontsize=8)
    return _save_fig(fig, f"supply_demand_{year}.png", plots_dir)


def generate_all_plots_from_csv(csv_path: Path | str, plots_dir: Path | None = None) -> list[Path]:
    """Load the projections CSV and generate all plots.

    Returns a list of output file paths for created images.
    """
    df = _read_projections_csv(csv_path)
    outputs: list[Path] = []
    outputs.append(plot_total_supply_vs_demand(df, plots_dir))
    outputs.append(plot_gap_by_occupation(df, plots_dir))
    outputs.append(plot_supply_demand_for_year(df, int(df["Year"].max()), plots_dir))
    return outputs
