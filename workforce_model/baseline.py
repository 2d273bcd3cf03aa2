from __future__ import annotations

"""
Baseline generation for the workforce model.

Two entry points build the immutable baseline `ParameterStore`:

- `generate_baseline()` uses fixed per-occupation constants (deterministic).
- `generate_baseline_from_population(rows)` derives workforce supply and
  demand drivers from projected population data (the CSV import path).

Design choices:
- CSV input is validated in full before any derivation starts; a malformed
  file raises `PopulationDataError` and nothing else happens.
- The derivation formulas are fixed heuristics, not fitted models.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

import logging
import pandas as pd

from .errors import PopulationDataError
from .naming import (
    AGE_GROUPS,
    ATTRITION_RATE,
    BASE_YEAR,
    DOMESTIC_MIGRANTS,
    EDUCATIONAL_INFLOW,
    HEALTH_STATUS_CHANGE,
    INTERNATIONAL_MIGRANTS,
    OCCUPATIONS,
    POPULATION_GROWTH,
    RE_ENTRANTS,
    RETIREMENT_RATE,
    SERVICE_UTILIZATION,
    SUPPLY,
    YEARS,
)
from .parameters import ParameterStore

log = logging.getLogger(__name__)


# ----- Built-in baseline constants (per occupation) -----
BASE_SUPPLY: Dict[str, float] = {
    "Physicians": 2500,
    "Nurse Practitioners": 800,
    "Registered Nurses": 4200,
    "Licensed Practical Nurses": 1800,
    "Medical Office Assistants": 3200,
}
EDUCATIONAL_INFLOWS: Dict[str, float] = {
    "Physicians": 100,
    "Nurse Practitioners": 50,
    "Registered Nurses": 200,
    "Licensed Practical Nurses": 150,
    "Medical Office Assistants": 100,
}
INTERNATIONAL_MIGRANT_INFLOWS: Dict[str, float] = {
    "Physicians": 25,
    "Nurse Practitioners": 10,
    "Registered Nurses": 40,
    "Licensed Practical Nurses": 20,
    "Medical Office Assistants": 15,
}
DOMESTIC_MIGRANT_INFLOWS: Dict[str, float] = {
    "Physicians": 15,
    "Nurse Practitioners": 8,
    "Registered Nurses": 30,
    "Licensed Practical Nurses": 15,
    "Medical Office Assistants": 10,
}
RE_ENTRANT_INFLOWS: Dict[str, float] = {
    "Physicians": 10,
    "Nurse Practitioners": 5,
    "Registered Nurses": 25,
    "Licensed Practical Nurses": 12,
    "Medical Office Assistants": 20,
}
RETIREMENT_RATES: Dict[str, float] = {
    "Physicians": 0.06,
    "Nurse Practitioners": 0.05,
    "Registered Nurses": 0.04,
    "Licensed Practical Nurses": 0.04,
    "Medical Office Assistants": 0.03,
}
ATTRITION_RATE_DEFAULT = 0.15
SUPPLY_GROWTH_PER_YEAR = 0.01

POPULATION_GROWTH_RATES: Dict[str, float] = {
    "0-18": 0.01,
    "19-64": 0.015,
    "65-84": 0.025,
    "85+": 0.03,
}
HEALTH_STATUS_CHANGES: Dict[str, float] = {
    "Major Chronic": 0.02,
    "Minor Acute": -0.01,
    "Palliative": 0.005,
    "Healthy": -0.015,
}
SERVICE_UTILIZATION_CHANGES: Dict[str, float] = {
    "Primary Care Visits": 0.02,
    "Preventive Care": 0.03,
    "Chronic Disease Management": 0.04,
    "Mental Health Services": 0.05,
}

# ----- Population-derived heuristics -----
POPULATION_COLUMNS = ["Year", "Gender", "Age_Group", "Projected_Population"]
DEFAULT_POPULATION_GROWTH = 0.02

# FTE per 1,000 population
WORKFORCE_PER_THOUSAND: Dict[str, float] = {
    "Physicians": 2.5,
    "Nurse Practitioners": 0.8,
    "Registered Nurses": 8.5,
    "Licensed Practical Nurses": 3.2,
    "Medical Office Assistants": 4.5,
}
# Annual graduates as a share of base supply
EDUCATIONAL_INFLOW_SHARE: Dict[str, float] = {
    "Physicians": 0.04,
    "Nurse Practitioners": 0.06,
    "Registered Nurses": 0.05,
    "Licensed Practical Nurses": 0.08,
    "Medical Office Assistants": 0.03,
}
# Shares of educational inflow
INTERNATIONAL_MIGRANT_SHARE = 0.25
DOMESTIC_MIGRANT_SHARE = 0.15
RE_ENTRANT_SHARE = 0.10

HEALTH_STATUS_GROWTH_FACTORS: Dict[str, float] = {
    "Major Chronic": 1.5,
    "Minor Acute": -0.5,
    "Palliative": 0.8,
    "Healthy": -0.3,
}
SERVICE_UTILIZATION_GROWTH_FACTORS: Dict[str, float] = {
    "Primary Care Visits": 1.0,
    "Preventive Care": 1.2,
    "Chronic Disease Management": 1.8,
    "Mental Health Services": 2.0,
}


def _empty_tree(kinds: Iterable[str]) -> Dict[str, Dict[int, Dict[str, float]]]:
    return {kind: {year: {} for year in YEARS} for kind in kinds}


def generate_baseline() -> ParameterStore:
    """Build the deterministic baseline from the built-in constants.

    Supply grows linearly by 1% of the 2024 base per year; every other
    parameter holds the same value in each year of the horizon.
    """
    tree = _empty_tree(
        [
            SUPPLY,
            EDUCATIONAL_INFLOW,
            INTERNATIONAL_MIGRANTS,
            DOMESTIC_MIGRANTS,
            RE_ENTRANTS,
            RETIREMENT_RATE,
            ATTRITION_RATE,
            POPULATION_GROWTH,
            HEALTH_STATUS_CHANGE,
            SERVICE_UTILIZATION,
        ]
    )
    for year in YEARS:
        for occ in OCCUPATIONS:
            tree[SUPPLY][year][occ] = BASE_SUPPLY[occ] * (1 + (year - BASE_YEAR) * SUPPLY_GROWTH_PER_YEAR)
            tree[EDUCATIONAL_INFLOW][year][occ] = EDUCATIONAL_INFLOWS[occ]
            tree[INTERNATIONAL_MIGRANTS][year][occ] = INTERNATIONAL_MIGRANT_INFLOWS[occ]
            tree[DOMESTIC_MIGRANTS][year][occ] = DOMESTIC_MIGRANT_INFLOWS[occ]
            tree[RE_ENTRANTS][year][occ] = RE_ENTRANT_INFLOWS[occ]
            tree[RETIREMENT_RATE][year][occ] = RETIREMENT_RATES[occ]
            tree[ATTRITION_RATE][year][occ] = ATTRITION_RATE_DEFAULT
        tree[POPULATION_GROWTH][year] = dict(POPULATION_GROWTH_RATES)
        tree[HEALTH_STATUS_CHANGE][year] = dict(HEALTH_STATUS_CHANGES)
        tree[SERVICE_UTILIZATION][year] = dict(SERVICE_UTILIZATION_CHANGES)
    return ParameterStore(tree)


# ----- Population CSV path -----


def validate_population_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a cleaned copy of `frame` or raise PopulationDataError.

    - Header whitespace is stripped
    - All of `Year, Gender, Age_Group, Projected_Population` must be present
    - Year and Projected_Population must be numeric; Age_Group non-empty
    """
    df = frame.copy()
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in POPULATION_COLUMNS if c not in df.columns]
    if missing:
        raise PopulationDataError(
            f"Population data missing required columns: {', '.join(missing)} "
            f"(expected header: {','.join(POPULATION_COLUMNS)})"
        )
    if df.empty:
        raise PopulationDataError("Population data contains no rows")

    df = df[POPULATION_COLUMNS].copy()
    df["Age_Group"] = df["Age_Group"].astype(str).str.strip()
    df["Gender"] = df["Gender"].astype(str).str.strip()

    years = pd.to_numeric(df["Year"], errors="coerce")
    bad_years = df.loc[years.isna(), "Year"].tolist()
    if bad_years:
        raise PopulationDataError(f"Non-numeric Year values in population data: {bad_years[:5]}")
    population = pd.to_numeric(df["Projected_Population"], errors="coerce")
    bad_pop = df.loc[population.isna(), "Projected_Population"].tolist()
    if bad_pop:
        raise PopulationDataError(f"Non-numeric Projected_Population values in population data: {bad_pop[:5]}")
    if (df["Age_Group"] == "").any():
        raise PopulationDataError("Population data contains rows with an empty Age_Group")

    df["Year"] = years.astype(int)
    df["Projected_Population"] = population.astype(float)

    unknown = sorted(set(df["Age_Group"]) - set(AGE_GROUPS))
    if unknown:
        log.warning("Population data contains unrecognized age groups (kept as-is): %s", unknown)
    return df


def load_population_csv(path: Union[Path, str]) -> pd.DataFrame:
    """Read and validate a population CSV. No model state is touched here."""
    path = Path(path)
    if not path.exists():
        raise PopulationDataError(f"Population CSV not found: {path}")
    try:
        frame = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise PopulationDataError(f"Could not parse population CSV {path}: {exc}") from exc
    df = validate_population_frame(frame)
    log.info("Loaded population CSV %s: %d rows, years %d-%d", path, len(df), df["Year"].min(), df["Year"].max())
    return df


def compute_population_growth(frame: pd.DataFrame) -> Dict[int, Dict[str, float]]:
    """Growth rate per (year, age group) from summed projected population.

    The first year, and any year whose previous total is zero or absent,
    defaults to 2% growth.
    """
    totals = frame.groupby(["Year", "Age_Group"])["Projected_Population"].sum()
    years = sorted(int(y) for y in totals.index.get_level_values("Year").unique())
    groups = list(dict.fromkeys(frame["Age_Group"].tolist()))

    growth: Dict[int, Dict[str, float]] = {}
    for idx, year in enumerate(years):
        growth[year] = {}
        for group in groups:
            current = float(totals.get((year, group), 0.0))
            previous = float(totals.get((years[idx - 1], group), 0.0)) if idx > 0 else 0.0
            if idx == 0 or previous == 0:
                growth[year][group] = DEFAULT_POPULATION_GROWTH
            else:
                growth[year][group] = (current - previous) / previous
    return growth


def generate_baseline_from_population(rows: Union[pd.DataFrame, Iterable[Mapping[str, object]]]) -> ParameterStore:
    """Derive a complete baseline store from projected population rows.

    `rows` may be a DataFrame or an iterable of dicts with the CSV columns.
    Raises PopulationDataError before doing any work if the data is malformed.
    """
    frame = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    df = validate_population_frame(frame)

    growth_by_year = compute_population_growth(df)
    data_years = sorted(growth_by_year)
    first_year = data_years[0]
    base_population = float(df.loc[df["Year"] == first_year, "Projected_Population"].sum())

    # Fill the planning horizon: years before the data start use the default,
    # gaps and years after the data end carry the last known growth forward.
    horizon_growth: Dict[int, Dict[str, float]] = {}
    last: Dict[str, float] = {}
    for year in YEARS:
        if year in growth_by_year:
            last = growth_by_year[year]
        if last:
            horizon_growth[year] = {g: last.get(g, DEFAULT_POPULATION_GROWTH) for g in AGE_GROUPS}
        else:
            horizon_growth[year] = {g: DEFAULT_POPULATION_GROWTH for g in AGE_GROUPS}
        for group, rate in last.items():
            horizon_growth[year].setdefault(group, rate)

    def _mean(values: List[float]) -> float:
        return sum(values) / len(values) if values else 0.0

    avg_growth_by_year = {year: _mean(list(rates.values())) for year, rates in horizon_growth.items()}
    overall_growth = _mean([rate for rates in horizon_growth.values() for rate in rates.values()])

    base_supply = {occ: base_population * WORKFORCE_PER_THOUSAND[occ] / 1000.0 for occ in OCCUPATIONS}

    tree = _empty_tree(
        [
            SUPPLY,
            EDUCATIONAL_INFLOW,
            INTERNATIONAL_MIGRANTS,
            DOMESTIC_MIGRANTS,
            RE_ENTRANTS,
            RETIREMENT_RATE,
            ATTRITION_RATE,
            POPULATION_GROWTH,
            HEALTH_STATUS_CHANGE,
            SERVICE_UTILIZATION,
        ]
    )
    growth_factor = 1.0
    for year in YEARS:
        if year > BASE_YEAR:
            growth_factor *= 1 + avg_growth_by_year[year]
        for occ in OCCUPATIONS:
            inflow = base_supply[occ] * EDUCATIONAL_INFLOW_SHARE[occ]
            tree[SUPPLY][year][occ] = base_supply[occ] * growth_factor
            tree[EDUCATIONAL_INFLOW][year][occ] = inflow
            tree[INTERNATIONAL_MIGRANTS][year][occ] = inflow * INTERNATIONAL_MIGRANT_SHARE
            tree[DOMESTIC_MIGRANTS][year][occ] = inflow * DOMESTIC_MIGRANT_SHARE
            tree[RE_ENTRANTS][year][occ] = inflow * RE_ENTRANT_SHARE
            tree[RETIREMENT_RATE][year][occ] = RETIREMENT_RATES[occ]
            tree[ATTRITION_RATE][year][occ] = ATTRITION_RATE_DEFAULT
        tree[POPULATION_GROWTH][year] = dict(horizon_growth[year])
        tree[HEALTH_STATUS_CHANGE][year] = {
            status: overall_growth * factor for status, factor in HEALTH_STATUS_GROWTH_FACTORS.items()
        }
        tree[SERVICE_UTILIZATION][year] = {
            service: overall_growth * factor for service, factor in SERVICE_UTILIZATION_GROWTH_FACTORS.items()
        }

    log.info(
        "Baseline derived from population data: base population=%.0f, mean growth=%.4f, data years %d-%d",
        base_population,
        overall_growth,
        first_year,
        data_years[-1],
    )
    return ParameterStore(tree)
