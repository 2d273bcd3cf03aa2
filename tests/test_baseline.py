from __future__ import annotations

"""
Tests for baseline generation: built-in constants and the population CSV path.
"""

from pathlib import Path

import pandas as pd
import pytest

from workforce_model.baseline import (
    generate_baseline,
    generate_baseline_from_population,
    load_population_csv,
    validate_population_frame,
)
from workforce_model.errors import PopulationDataError
from workforce_model.io_paths import INPUTS_DIR
from workforce_model.naming import (
    ATTRITION_RATE,
    DOMESTIC_MIGRANTS,
    EDUCATIONAL_INFLOW,
    HEALTH_STATUS_CHANGE,
    INTERNATIONAL_MIGRANTS,
    POPULATION_GROWTH,
    RE_ENTRANTS,
    RETIREMENT_RATE,
    SERVICE_UTILIZATION,
    SUPPLY,
    YEARS,
)
from workforce_model.validation import validate_store_complete


class TestBuiltInBaseline:
    def test_supply_grows_one_percent_of_base_per_year(self, baseline):
        assert baseline.get_value(SUPPLY, 2024, "Physicians") == 2500
        assert baseline.get_value(SUPPLY, 2026, "Physicians") == pytest.approx(2550)
        assert baseline.get_value(SUPPLY, 2034, "Registered Nurses") == pytest.approx(4620)

    def test_constant_parameters_every_year(self, baseline):
        for year in YEARS:
            assert baseline.get_value(EDUCATIONAL_INFLOW, year, "Registered Nurses") == 200
            assert baseline.get_value(RETIREMENT_RATE, year, "Physicians") == 0.06
            assert baseline.get_value(ATTRITION_RATE, year, "Medical Office Assistants") == 0.15
            assert baseline.get_value(POPULATION_GROWTH, year, "85+") == 0.03
            assert baseline.get_value(SERVICE_UTILIZATION, year, "Mental Health Services") == 0.05

    def test_complete_and_deterministic(self, baseline):
        validate_store_complete(baseline)
        assert generate_baseline().to_dict() == baseline.to_dict()


class TestPopulationBaseline:
    def test_derived_workforce_values(self, population_rows):
        store = generate_baseline_from_population(population_rows)
        # 500,000 people in 2024 -> 2.5 physicians per 1,000
        assert store.get_value(SUPPLY, 2024, "Physicians") == pytest.approx(1250)
        assert store.get_value(EDUCATIONAL_INFLOW, 2024, "Physicians") == pytest.approx(50)
        assert store.get_value(INTERNATIONAL_MIGRANTS, 2030, "Physicians") == pytest.approx(12.5)
        assert store.get_value(DOMESTIC_MIGRANTS, 2030, "Physicians") == pytest.approx(7.5)
        assert store.get_value(RE_ENTRANTS, 2030, "Physicians") == pytest.approx(5.0)
        assert store.get_value(RETIREMENT_RATE, 2030, "Physicians") == 0.06

    def test_supply_compounds_with_mean_growth(self, population_rows):
        store = generate_baseline_from_population(population_rows)
        assert store.get_value(SUPPLY, 2025, "Physicians") == pytest.approx(1250 * 1.02)
        assert store.get_value(SUPPLY, 2027, "Physicians") == pytest.approx(1250 * 1.02 ** 3)

    def test_growth_carried_across_horizon(self, population_rows):
        store = generate_baseline_from_population(population_rows)
        for year in YEARS:
            for group in ("0-18", "19-64", "65-84", "85+"):
                assert store.get_value(POPULATION_GROWTH, year, group) == pytest.approx(0.02)

    def test_health_and_service_scale_with_overall_growth(self, population_rows):
        store = generate_baseline_from_population(population_rows)
        assert store.get_value(HEALTH_STATUS_CHANGE, 2026, "Major Chronic") == pytest.approx(0.03)
        assert store.get_value(HEALTH_STATUS_CHANGE, 2026, "Minor Acute") == pytest.approx(-0.01)
        assert store.get_value(SERVICE_UTILIZATION, 2026, "Mental Health Services") == pytest.approx(0.04)

    def test_accepts_dataframe(self, population_rows):
        store = generate_baseline_from_population(pd.DataFrame(population_rows))
        validate_store_complete(store)

    def test_missing_column_rejected(self, population_rows):
        rows = [{k: v for k, v in row.items() if k != "Gender"} for row in population_rows]
        with pytest.raises(PopulationDataError, match="Gender"):
            generate_baseline_from_population(rows)

    def test_non_numeric_population_rejected(self, population_rows):
        population_rows[3]["Projected_Population"] = "many"
        with pytest.raises(PopulationDataError):
            generate_baseline_from_population(population_rows)

    def test_empty_rows_rejected(self):
        with pytest.raises(PopulationDataError):
            validate_population_frame(pd.DataFrame(columns=["Year", "Gender", "Age_Group", "Projected_Population"]))

    def test_header_whitespace_tolerated(self, population_rows):
        frame = pd.DataFrame(population_rows).rename(columns={"Age_Group": " Age_Group "})
        cleaned = validate_population_frame(frame)
        assert "Age_Group" in cleaned.columns


class TestPopulationCsv:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(PopulationDataError):
            load_population_csv(tmp_path / "nope.csv")

    def test_bundled_sample_loads(self):
        df = load_population_csv(INPUTS_DIR / "population_projections.csv")
        assert sorted(df["Year"].unique().tolist()) == list(YEARS)
        store = generate_baseline_from_population(df)
        validate_store_complete(store)

    def test_csv_written_by_test(self, tmp_path: Path, population_rows):
        path = tmp_path / "pop.csv"
        pd.DataFrame(population_rows).to_csv(path, index=False)
        df = load_population_csv(path)
        assert len(df) == len(population_rows)


class TestFullHorizonImport:
    def test_flat_growth_every_year(self, tmp_path: Path, full_horizon_population_rows):
        path = tmp_path / "population.csv"
        pd.DataFrame(full_horizon_population_rows).to_csv(path, index=False)

        store = generate_baseline_from_population(load_population_csv(path))
        for year in YEARS:
            for group in ("0-18", "19-64", "65-84", "85+"):
                assert store.get_value(POPULATION_GROWTH, year, group) == pytest.approx(0.02)
        assert store.get_value(SUPPLY, 2034, "Physicians") == pytest.approx(1250 * 1.02 ** 10)

    def test_import_through_state_manager(self, tmp_path: Path, full_horizon_population_rows):
        from workforce_model.ui_logic import StateManager

        path = tmp_path / "population.csv"
        pd.DataFrame(full_horizon_population_rows).to_csv(path, index=False)
        manager = StateManager()
        ok, error = manager.import_population_csv(path)
        assert ok, error

        baseline = manager.get_state().baseline
        growth = {(year, group): baseline.get_value(POPULATION_GROWTH, year, group) for year in YEARS for group in ("0-18", "19-64", "65-84", "85+")}
        assert len(growth) == 44
        assert all(value == pytest.approx(0.02) for value in growth.values())
        assert manager.current_projections().cell(2024, "Physicians").supply == 1250
