from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from workforce_model.baseline import generate_baseline
from workforce_model.projection import project


def test_generate_plots_smoke(tmp_path: Path):
    """Smoke test: plots are generated from a freshly written projections CSV.

    Verifies each PNG is created under the requested directory and is not
    empty.
    """
    csv_path = tmp_path / "workforce_projections.csv"
    project(generate_baseline()).to_frame().to_csv(csv_path, index=False)

    from viz.plots import generate_all_plots_from_csv

    out_paths = generate_all_plots_from_csv(csv_path, plots_dir=tmp_path / "plots")
    assert [p.name for p in out_paths] == [
        "total_supply_vs_demand.png",
        "gap_by_occupation.png",
        "supply_demand_2034.png",
    ]
    for p in out_paths:
        assert p.exists(), f"Plot not created: {p}"
        assert p.stat().st_size > 0, f"Plot file is empty: {p}"


def test_unexpected_csv_rejected(tmp_path: Path):
    from viz.plots import generate_all_plots_from_csv

    csv_path = tmp_path / "other.csv"
    pd.DataFrame({"Year": [2024], "Value": [1]}).to_csv(csv_path, index=False)
    with pytest.raises(ValueError, match="missing columns"):
        generate_all_plots_from_csv(csv_path, plots_dir=tmp_path)


def test_missing_csv(tmp_path: Path):
    from viz.plots import generate_all_plots_from_csv

    with pytest.raises(FileNotFoundError):
        generate_all_plots_from_csv(tmp_path / "absent.csv")
