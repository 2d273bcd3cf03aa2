from __future__ import annotations

"""
Projection Engine: Parameter Store -> year-by-year Supply/Demand/Gap table.

Algorithm (per occupation, years in ascending order)
- Opening year supply is read from `supply[opening][occ]`.
- Each later year rolls the previous year's computed supply forward:
      supply[Y] = max(0, supply[Y-1] + inflows[Y] - supply[Y-1] * (retirement[Y] + attrition[Y]))
  Flow and rate lookups fall back to the previous year's value, then 0.
- Demand is independent of supply: 110% of the built-in opening supply of
  the occupation, scaled by a secular 2%/year trend and by one factor
  `(1 + mean(kind[Y]))` per demand kind present in year Y. The opening year
  is the reference point and carries no growth factors.
- Supply and demand are clamped at zero and rounded; gap = demand - supply.

Error policy
- Missing inputs never raise: `lookup_or_default` supplies defaults.
- A cell whose arithmetic fails or turns non-finite is replaced by the
  fallback triple (1000, 1100, 100) and the run continues from there.

`project(parameters)` is pure and deterministic. `project(None)` is the
display-only preview path that jitters supply randomly around the built-in
constants.
"""

from dataclasses import dataclass
import logging
import math
import random
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from .baseline import BASE_SUPPLY
from .naming import (
    ATTRITION_RATE,
    DEMAND_KINDS,
    INFLOW_KINDS,
    OCCUPATIONS,
    RETIREMENT_RATE,
    SUPPLY,
    YEARS,
)
from .parameters import lookup_or_default

log = logging.getLogger(__name__)

DEMAND_TO_SUPPLY_RATIO = 1.1
SECULAR_DEMAND_GROWTH = 0.02
PREVIEW_JITTER = 0.05

FALLBACK_SUPPLY = 1000
FALLBACK_DEMAND = 1100

PROJECTION_COLUMNS = ["Year", "Occupation", "Supply", "Demand", "Gap"]
TOTALS_COLUMNS = ["Year", "Total Supply", "Total Demand", "Total Gap"]


@dataclass(frozen=True)
class ProjectionCell:
    """Rounded FTE supply and demand for one (year, occupation)."""

    supply: int
    demand: int

    @property
    def gap(self) -> int:
        # Positive gap = shortage
        return self.demand - self.supply

    def to_dict(self) -> Dict[str, int]:
        return {"supply": self.supply, "demand": self.demand, "gap": self.gap}


FALLBACK_CELL = ProjectionCell(supply=FALLBACK_SUPPLY, demand=FALLBACK_DEMAND)


class ProjectionTable(Mapping[int, Mapping[str, ProjectionCell]]):
    """Immutable mapping year -> occupation -> ProjectionCell."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[int, Mapping[str, ProjectionCell]]) -> None:
        self._data: Mapping[int, Mapping[str, ProjectionCell]] = MappingProxyType(
            {int(year): MappingProxyType(dict(cells)) for year, cells in sorted(data.items())}
        )

    def __getitem__(self, year: int) -> Mapping[str, ProjectionCell]:
        return self._data[year]

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ProjectionTable(years={list(self._data)})"

    @property
    def years(self) -> List[int]:
        return list(self._data)

    @property
    def occupations(self) -> List[str]:
        seen: Dict[str, None] = {}
        for cells in self._data.values():
            for occ in cells:
                seen.setdefault(occ, None)
        return list(seen)

    def cell(self, year: int, occupation: str) -> ProjectionCell:
        return self._data[int(year)][occupation]

    def to_dict(self) -> Dict[int, Dict[str, Dict[str, int]]]:
        return {year: {occ: cell.to_dict() for occ, cell in cells.items()} for year, cells in self._data.items()}

    def to_frame(self) -> pd.DataFrame:
        """Long DataFrame [Year, Occupation, Supply, Demand, Gap]."""
        rows = [
            {"Year": year, "Occupation": occ, "Supply": cell.supply, "Demand": cell.demand, "Gap": cell.gap}
            for year, cells in self._data.items()
            for occ, cell in cells.items()
        ]
        return pd.DataFrame(rows, columns=PROJECTION_COLUMNS)

    def totals(self) -> pd.DataFrame:
        """Per-year totals across occupations [Year, Total Supply, Total Demand, Total Gap]."""
        rows = []
        for year, cells in self._data.items():
            supply = sum(cell.supply for cell in cells.values())
            demand = sum(cell.demand for cell in cells.values())
            rows.append({"Year": year, "Total Supply": supply, "Total Demand": demand, "Total Gap": demand - supply})
        return pd.DataFrame(rows, columns=TOTALS_COLUMNS)


def _carried_value(parameters: Mapping, kind: str, year: int, occupation: str) -> float:
    """Same-year value, else previous year's value, else 0."""
    previous = lookup_or_default(parameters, kind, year - 1, occupation, 0.0)
    return lookup_or_default(parameters, kind, year, occupation, previous)


def _mean_for_year(parameters: Mapping, kind: str, year: int) -> Optional[float]:
    values = parameters.get(kind, {}).get(year)
    if not values:
        return None
    numbers = [float(v) for v in values.values()]
    return sum(numbers) / len(numbers)


def baseline_demand(occupation: str) -> float:
    """Opening-year demand for an occupation: 110% of its built-in base supply."""
    return BASE_SUPPLY.get(occupation, FALLBACK_SUPPLY) * DEMAND_TO_SUPPLY_RATIO


def demand_multiplier(parameters: Optional[Mapping], year: int, opening_year: int = YEARS[0]) -> float:
    """Secular 2%/year trend times one `(1 + mean)` factor per demand kind with data for `year`."""
    multiplier = 1 + (year - opening_year) * SECULAR_DEMAND_GROWTH
    if parameters is None or year <= opening_year:
        return multiplier
    for kind in DEMAND_KINDS:
        mean = _mean_for_year(parameters, kind, year)
        if mean is not None:
            multiplier *= 1 + mean
    return multiplier


def _finite(value: float, what: str) -> float:
    if not math.isfinite(value):
        raise ArithmeticError(f"{what} is not finite ({value})")
    return value


def _project_occupation(
    parameters: Mapping, occupation: str, years: Sequence[int], cells: Dict[int, Dict[str, ProjectionCell]]
) -> None:
    opening_year = years[0]
    previous_supply: Optional[float] = None
    for year in years:
        try:
            if previous_supply is None:
                supply = lookup_or_default(
                    parameters, SUPPLY, year, occupation, BASE_SUPPLY.get(occupation, FALLBACK_SUPPLY)
                )
            else:
                inflows = sum(_carried_value(parameters, kind, year, occupation) for kind in INFLOW_KINDS)
                rate = _carried_value(parameters, RETIREMENT_RATE, year, occupation) + _carried_value(
                    parameters, ATTRITION_RATE, year, occupation
                )
                supply = previous_supply + inflows - previous_supply * rate
            supply = max(0.0, _finite(supply, "supply"))
            demand = max(0.0, _finite(baseline_demand(occupation) * demand_multiplier(parameters, year, opening_year), "demand"))
            cells[year][occupation] = ProjectionCell(supply=int(round(supply)), demand=int(round(demand)))
            previous_supply = supply
        except (ArithmeticError, TypeError, ValueError) as exc:
            log.warning("Projection fallback for %s in %d: %s", occupation, year, exc)
            cells[year][occupation] = FALLBACK_CELL
            previous_supply = float(FALLBACK_CELL.supply)


def _preview_projection(
    years: Sequence[int], occupations: Sequence[str], rng: Optional[random.Random]
) -> ProjectionTable:
    rng = rng or random.Random()
    cells: Dict[int, Dict[str, ProjectionCell]] = {}
    for year in years:
        cells[year] = {}
        trend = 1 + (year - years[0]) * SECULAR_DEMAND_GROWTH
        for occ in occupations:
            base = BASE_SUPPLY.get(occ, FALLBACK_SUPPLY)
            jitter = (1 - PREVIEW_JITTER) + rng.random() * 2 * PREVIEW_JITTER
            supply = max(0.0, base * trend * jitter)
            demand = max(0.0, base * DEMAND_TO_SUPPLY_RATIO * trend)
            cells[year][occ] = ProjectionCell(supply=int(round(supply)), demand=int(round(demand)))
    return ProjectionTable(cells)


def project(
    parameters: Optional[Mapping],
    *,
    years: Iterable[int] = YEARS,
    occupations: Iterable[str] = OCCUPATIONS,
    rng: Optional[random.Random] = None,
) -> ProjectionTable:
    """Compute the Supply/Demand/Gap table for every requested year and occupation.

    Args:
        parameters: A `ParameterStore` (or any mapping of the same shape). When
            None, a randomly jittered preview is returned instead.
        years: Years to project; the smallest one is the opening year.
        occupations: Occupations to project.
        rng: Random source for the preview path only.

    Returns:
        A complete `ProjectionTable`; failed cells hold the fallback triple.
    """
    year_list = sorted({int(y) for y in years})
    occupation_list = list(dict.fromkeys(occupations))
    if not year_list:
        return ProjectionTable({})

    if parameters is None:
        log.debug("No parameters supplied; generating preview projection")
        return _preview_projection(year_list, occupation_list, rng)

    cells: Dict[int, Dict[str, ProjectionCell]] = {year: {} for year in year_list}
    for occ in occupation_list:
        _project_occupation(parameters, occ, year_list, cells)
    return ProjectionTable(cells)


def projection_changed(before: Optional[Mapping], after: Optional[Mapping]) -> bool:
    """True when two parameter stores project to different tables.

    The engine reads supply only for the opening year and inflows only from
    the year after it, so edits to the other cells can be stored without
    moving any projected value.
    """
    if before is None or after is None:
        return before is not after
    return project(before).to_dict() != project(after).to_dict()
