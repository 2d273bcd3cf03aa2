from __future__ import annotations

"""
Read models over projection tables for the dashboard's analysis panels.

Everything here is a pure function of one or two `ProjectionTable`s (or
parameter stores) and returns plain values or DataFrames; nothing is cached
and nothing mutates its inputs.

Contents
- Occupation filter: an "All" entry or an explicit selection
- Workforce insights: critical shortages and fast-growing gaps
- Scenario vs baseline: per-cell projection deltas and parameter % change
- Year-over-year gap analysis around a chosen year
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .naming import OCCUPATIONS
from .parameters import lookup_or_default
from .projection import ProjectionTable

ALL_OCCUPATIONS = "All"

CRITICAL_AVERAGE_GAP = 200
WARNING_GAP_TREND = 100

COMPARISON_COLUMNS = [
    "Year",
    "Occupation",
    "Supply",
    "Baseline Supply",
    "Demand",
    "Baseline Demand",
    "Gap",
    "Baseline Gap",
    "Gap Change",
    "Supply Change %",
]
YEAR_OVER_YEAR_COLUMNS = [
    "Occupation",
    "Previous Gap",
    "Current Gap",
    "Next Gap",
    "Change From Previous",
    "Change To Next",
]
PARAMETER_CHANGE_COLUMNS = ["Category", "Value", "Baseline", "Change %"]


# ----- Occupation filter -----


def toggle_occupation(selected: Sequence[str], occupation: str) -> List[str]:
    """Return the selection after clicking `occupation`.

    Choosing "All" resets the selection; choosing a single occupation while
    "All" is selected narrows to it; removing the last occupation falls back
    to "All".
    """
    if occupation == ALL_OCCUPATIONS:
        return [ALL_OCCUPATIONS]
    if ALL_OCCUPATIONS in selected:
        return [occupation]
    if occupation in selected:
        remaining = [o for o in selected if o != occupation]
        return remaining or [ALL_OCCUPATIONS]
    return list(selected) + [occupation]


def filter_occupations(selected: Sequence[str], occupations: Sequence[str] = OCCUPATIONS) -> List[str]:
    """Expand a selection to concrete occupations, keeping the canonical order."""
    if not selected or ALL_OCCUPATIONS in selected:
        return list(occupations)
    return [occ for occ in occupations if occ in selected]


# ----- Insights -----


@dataclass(frozen=True)
class Insight:
    level: str  # "critical" or "warning"
    occupation: str
    message: str


def _gap(table: ProjectionTable, year: int, occupation: str) -> int:
    cells = table.get(year, {})
    cell = cells.get(occupation)
    return cell.gap if cell is not None else 0


def insights(table: ProjectionTable, occupations: Optional[Iterable[str]] = None) -> List[Insight]:
    """Flag occupations whose gap is large on average or growing fast.

    - critical: mean gap over the horizon above 200 FTE
    - warning: last-year gap minus first-year gap above 100 FTE

    Occupations missing from a year count as a zero gap for that year.
    """
    years = table.years
    if not years:
        return []
    found: List[Insight] = []
    for occ in occupations if occupations is not None else table.occupations:
        gaps = [_gap(table, year, occ) for year in years]
        average = sum(gaps) / len(gaps)
        trend = gaps[-1] - gaps[0]
        if average > CRITICAL_AVERAGE_GAP:
            found.append(
                Insight("critical", occ, f"{occ} faces critical shortage with average gap of {round(average)} FTE")
            )
        if trend > WARNING_GAP_TREND:
            found.append(
                Insight("warning", occ, f"{occ} gap increasing rapidly - {round(trend)} FTE growth over period")
            )
    return found


# ----- Scenario vs baseline -----


def percent_change(value: float, baseline: float) -> Optional[float]:
    """(value - baseline) / baseline * 100, or None when the baseline is zero."""
    if baseline == 0:
        return None
    return (value - baseline) / baseline * 100


def compare_to_baseline(
    table: ProjectionTable,
    baseline_table: ProjectionTable,
    occupations: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Long frame of scenario vs baseline projections for the shared cells."""
    wanted = list(occupations) if occupations is not None else table.occupations
    rows = []
    for year in table.years:
        if year not in baseline_table:
            continue
        for occ in wanted:
            cell = table[year].get(occ)
            base = baseline_table[year].get(occ)
            if cell is None or base is None:
                continue
            rows.append(
                {
                    "Year": year,
                    "Occupation": occ,
                    "Supply": cell.supply,
                    "Baseline Supply": base.supply,
                    "Demand": cell.demand,
                    "Baseline Demand": base.demand,
                    "Gap": cell.gap,
                    "Baseline Gap": base.gap,
                    "Gap Change": cell.gap - base.gap,
                    "Supply Change %": percent_change(cell.supply, base.supply),
                }
            )
    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def parameter_changes(
    store: Mapping, baseline_store: Mapping, kind: str, year: int, categories: Iterable[str]
) -> pd.DataFrame:
    """Edited value, baseline value and % change for one parameter kind and year."""
    rows = []
    for cat in categories:
        value = lookup_or_default(store, kind, year, cat, 0.0)
        base = lookup_or_default(baseline_store, kind, year, cat, 0.0)
        rows.append({"Category": cat, "Value": value, "Baseline": base, "Change %": percent_change(value, base)})
    return pd.DataFrame(rows, columns=PARAMETER_CHANGE_COLUMNS)


# ----- Year over year -----


def year_over_year(
    table: ProjectionTable, year: int, occupations: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """Gaps in the year before, of and after `year`, with the changes between them.

    Years outside the table count as a zero gap.
    """
    year = int(year)
    rows = []
    for occ in occupations if occupations is not None else table.occupations:
        previous = _gap(table, year - 1, occ)
        current = _gap(table, year, occ)
        upcoming = _gap(table, year + 1, occ)
        rows.append(
            {
                "Occupation": occ,
                "Previous Gap": previous,
                "Current Gap": current,
                "Next Gap": upcoming,
                "Change From Previous": current - previous,
                "Change To Next": upcoming - current,
            }
        )
    return pd.DataFrame(rows, columns=YEAR_OVER_YEAR_COLUMNS)


__all__ = [
    "ALL_OCCUPATIONS",
    "Insight",
    "compare_to_baseline",
    "filter_occupations",
    "insights",
    "parameter_changes",
    "percent_change",
    "toggle_occupation",
    "year_over_year",
]
