from __future__ import annotations

"""
Edit/Propagation Controller.

`update_parameter` applies one cell edit to a `ParameterStore` and carries its
effect forward to later years of the horizon, returning a new store. Earlier
years are never touched.

Propagation rules by kind
- supply: later supply = round(reference later supply * new / reference edited-year supply)
- retirementRate, attritionRate: new rate copied to every later year
- inflow kinds: delta = new - reference edited-year inflow; later *supply*
  entries = reference later supply + delta (a permanent headcount shift)
- demand kinds: new value copied to every later year

"Reference" is the store returned by `resolve_baseline`: the saved parameters
of the active scenario, otherwise the global baseline. It is never the
in-progress editing store, so edits to other parameters do not compound.
"""

import logging
import math
from typing import List, Mapping, Optional, Tuple

from .naming import (
    BASELINE_ID,
    DEMAND_KINDS,
    INFLOW_KINDS,
    PARAMETER_KINDS,
    RATE_KINDS,
    SUPPLY,
    WORKING_ID,
    YEARS,
    categories_for,
)
from .parameters import ParameterStore, lookup_or_default

log = logging.getLogger(__name__)

Update = Tuple[str, int, str, float]


def parse_value(raw_value: object) -> float:
    """Parse user input to float; anything unparseable becomes 0.0.

    Accepts numbers and strings that may include thousands separators, a
    trailing percent sign or surrounding whitespace. Percent signs are not
    rescaled: "6%" parses to 6.0, matching what was typed.
    """
    if isinstance(raw_value, bool):
        return float(raw_value)
    if isinstance(raw_value, (int, float)):
        value = float(raw_value)
    elif isinstance(raw_value, str):
        s = raw_value.strip().replace(",", "").replace("%", "")
        try:
            value = float(s)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def resolve_baseline(
    active_id: str,
    scenarios: Mapping[str, object],
    global_baseline: ParameterStore,
) -> ParameterStore:
    """Return the reference store that edits are propagated against.

    - A saved scenario id resolves to that scenario's stored parameters.
    - "baseline", "working" and unknown ids resolve to the global baseline.

    `scenarios` maps ids to objects exposing a `parameters` attribute.

    "working" only holds applied edits of the baseline and resolves to the
    baseline itself. An inflow edit made there rewrites future supply from
    baseline values and drops a supply propagation applied before it.
    """
    if active_id in (BASELINE_ID, WORKING_ID):
        return global_baseline
    scenario = scenarios.get(active_id)
    if scenario is None:
        return global_baseline
    return getattr(scenario, "parameters")


def _validate_target(kind: str, year: int) -> None:
    if kind not in PARAMETER_KINDS:
        raise ValueError(f"Unknown parameter kind '{kind}'. Expected one of: {', '.join(PARAMETER_KINDS)}")
    if int(year) not in YEARS:
        raise ValueError(f"Year {year} is outside the planning horizon {YEARS[0]}-{YEARS[-1]}")


def _later_years(year: int) -> List[int]:
    return [y for y in YEARS if y > year]


def propagation_updates(
    reference: Mapping, kind: str, year: int, category: str, value: float
) -> List[Update]:
    """Compute the forward updates implied by setting (kind, year, category) to `value`."""
    updates: List[Update] = []
    later = _later_years(year)

    if kind == SUPPLY:
        current = lookup_or_default(reference, SUPPLY, year, category, 0.0)
        if current == 0:
            log.debug("Supply reference for %s in %d is zero; not propagating", category, year)
            return updates
        ratio = value / current
        for y in later:
            reference_supply = lookup_or_default(reference, SUPPLY, y, category, 0.0)
            updates.append((SUPPLY, y, category, float(round(reference_supply * ratio))))
    elif kind in RATE_KINDS or kind in DEMAND_KINDS:
        for y in later:
            updates.append((kind, y, category, value))
    elif kind in INFLOW_KINDS:
        current = lookup_or_default(reference, kind, year, category, 0.0)
        delta = value - current
        for y in later:
            reference_supply = lookup_or_default(reference, SUPPLY, y, category, 0.0)
            updates.append((SUPPLY, y, category, reference_supply + delta))
    return updates


def update_parameter(
    store: ParameterStore,
    kind: str,
    year: int,
    category: str,
    raw_value: object,
    *,
    baseline: Optional[ParameterStore] = None,
    propagate: bool = True,
) -> ParameterStore:
    """Return a new store with the edit applied and propagated forward.

    Args:
        store: Current editing store (left unchanged).
        kind: Parameter kind, e.g. "supply" or "retirementRate".
        year: Edited year; must be inside the planning horizon.
        category: Occupation or demand category key.
        raw_value: User input; parsed with `parse_value` (bad input -> 0).
        baseline: Reference store from `resolve_baseline`; defaults to `store`.
        propagate: Set False to change only the edited cell.

    Raises:
        ValueError: unknown kind or year outside the horizon.
    """
    _validate_target(kind, year)
    year = int(year)
    if category not in categories_for(kind):
        log.warning("Editing non-standard category '%s' for %s", category, kind)

    value = parse_value(raw_value)
    reference = baseline if baseline is not None else store

    updates: List[Update] = [(kind, year, category, value)]
    if propagate:
        updates.extend(propagation_updates(reference, kind, year, category, value))

    log.debug("Edit %s[%d][%s] = %s (%d propagated cells)", kind, year, category, value, len(updates) - 1)
    return store.with_values(updates)
