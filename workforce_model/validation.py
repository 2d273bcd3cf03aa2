from __future__ import annotations

"""
Validation checks for parameter stores and projection tables.

These checks back the CLI runner and the tests. Each `validate_*` function
raises ValueError with an actionable message; `missing_cells` and
`projection_violations` return the offending entries for callers that prefer
to report rather than stop.
"""

import logging
from typing import List, Mapping, Optional, Tuple

from .naming import PARAMETER_KINDS, YEARS, categories_for
from .projection import ProjectionTable

Cell = Tuple[str, int, str]


def missing_cells(store: Mapping, years=YEARS) -> List[Cell]:
    """Every supported (kind, year, category) triple absent from `store`."""
    missing: List[Cell] = []
    for kind in PARAMETER_KINDS:
        for year in years:
            values = store.get(kind, {}).get(year, {})
            for category in categories_for(kind):
                if category not in values:
                    missing.append((kind, year, category))
    return missing


def validate_store_complete(store: Mapping, *, log: Optional[logging.Logger] = None) -> None:
    """Ensure every supported triple is present in `store`."""
    missing = missing_cells(store)
    if missing:
        msg = f"Parameter store is incomplete: {len(missing)} missing cells, e.g. {missing[:3]}"
        if log:
            log.error(msg)
        raise ValueError(msg)


def projection_violations(table: ProjectionTable) -> List[str]:
    """Describe every cell breaking non-negativity or the gap identity."""
    problems: List[str] = []
    for year, cells in table.items():
        for occ, cell in cells.items():
            if cell.supply < 0:
                problems.append(f"{year} {occ}: negative supply {cell.supply}")
            if cell.demand < 0:
                problems.append(f"{year} {occ}: negative demand {cell.demand}")
            if cell.gap != cell.demand - cell.supply:
                problems.append(f"{year} {occ}: gap {cell.gap} != demand - supply")
    return problems


def validate_projection_table(
    table: ProjectionTable,
    *,
    years=YEARS,
    occupations=None,
    log: Optional[logging.Logger] = None,
) -> None:
    """Ensure the table is complete and every cell satisfies the invariants."""
    problems = projection_violations(table)
    expected_years = list(years)
    if list(table.years) != expected_years:
        problems.append(f"table years {table.years} != expected {expected_years}")
    for year in table.years:
        missing = [occ for occ in (occupations or []) if occ not in table[year]]
        if missing:
            problems.append(f"{year}: missing occupations {missing}")
    if problems:
        msg = "Projection validation failed: " + "; ".join(problems[:5])
        if log:
            log.error(msg)
        raise ValueError(msg)
    if log:
        log.debug("Projection table validated: %d years", len(table))
