from __future__ import annotations

"""
Canonical names for the workforce planning model.

This module is the single source of truth for the planning horizon, the
occupations being projected, the demographic/service categories that drive
demand, and the parameter kinds held in a `ParameterStore`.

Design goals:
- Keep the keys used in parameter stores, scenario files and spreadsheet
  exports identical, so a value can be traced end-to-end by its name.
- Provide display labels for collaborators (dashboard, exports, plots)
  without leaking presentation concerns into the engine.
"""

import re
from typing import Dict, List, Tuple

__all__ = [
    "BASE_YEAR",
    "FINAL_YEAR",
    "YEARS",
    "OCCUPATIONS",
    "AGE_GROUPS",
    "GENDERS",
    "HEALTH_STATUSES",
    "SERVICE_CATEGORIES",
    "SUPPLY",
    "EDUCATIONAL_INFLOW",
    "INTERNATIONAL_MIGRANTS",
    "DOMESTIC_MIGRANTS",
    "RE_ENTRANTS",
    "RETIREMENT_RATE",
    "ATTRITION_RATE",
    "POPULATION_GROWTH",
    "HEALTH_STATUS_CHANGE",
    "SERVICE_UTILIZATION",
    "INFLOW_KINDS",
    "RATE_KINDS",
    "WORKFORCE_KINDS",
    "DEMAND_KINDS",
    "PARAMETER_KINDS",
    "BASELINE_ID",
    "WORKING_ID",
    "categories_for",
    "parameter_label",
    "is_fraction_kind",
    "pending_change_key",
    "safe_filename",
    "all_cells",
]


BASE_YEAR = 2024
FINAL_YEAR = 2034
YEARS: Tuple[int, ...] = tuple(range(BASE_YEAR, FINAL_YEAR + 1))

OCCUPATIONS: Tuple[str, ...] = (
    "Physicians",
    "Nurse Practitioners",
    "Registered Nurses",
    "Licensed Practical Nurses",
    "Medical Office Assistants",
)

AGE_GROUPS: Tuple[str, ...] = ("0-18", "19-64", "65-84", "85+")
GENDERS: Tuple[str, ...] = ("Male", "Female")
HEALTH_STATUSES: Tuple[str, ...] = ("Major Chronic", "Minor Acute", "Palliative", "Healthy")
SERVICE_CATEGORIES: Tuple[str, ...] = (
    "Primary Care Visits",
    "Preventive Care",
    "Chronic Disease Management",
    "Mental Health Services",
)

# ----- Parameter kinds -----
SUPPLY = "supply"
EDUCATIONAL_INFLOW = "educationalInflow"
INTERNATIONAL_MIGRANTS = "internationalMigrants"
DOMESTIC_MIGRANTS = "domesticMigrants"
RE_ENTRANTS = "reEntrants"
RETIREMENT_RATE = "retirementRate"
ATTRITION_RATE = "attritionRate"
POPULATION_GROWTH = "populationGrowth"
HEALTH_STATUS_CHANGE = "healthStatusChange"
SERVICE_UTILIZATION = "serviceUtilization"

INFLOW_KINDS: Tuple[str, ...] = (
    EDUCATIONAL_INFLOW,
    INTERNATIONAL_MIGRANTS,
    DOMESTIC_MIGRANTS,
    RE_ENTRANTS,
)
RATE_KINDS: Tuple[str, ...] = (RETIREMENT_RATE, ATTRITION_RATE)
WORKFORCE_KINDS: Tuple[str, ...] = (SUPPLY,) + INFLOW_KINDS + RATE_KINDS
DEMAND_KINDS: Tuple[str, ...] = (POPULATION_GROWTH, HEALTH_STATUS_CHANGE, SERVICE_UTILIZATION)
PARAMETER_KINDS: Tuple[str, ...] = WORKFORCE_KINDS + DEMAND_KINDS

# Kinds whose values are fractions rather than FTE counts
FRACTION_KINDS: Tuple[str, ...] = RATE_KINDS + DEMAND_KINDS

PARAMETER_LABELS: Dict[str, str] = {
    SUPPLY: "Supply",
    EDUCATIONAL_INFLOW: "Educational Inflow",
    INTERNATIONAL_MIGRANTS: "International Migrants",
    DOMESTIC_MIGRANTS: "Domestic Migrants",
    RE_ENTRANTS: "Re-entrants",
    RETIREMENT_RATE: "Retirement Rate",
    ATTRITION_RATE: "Attrition Rate",
    POPULATION_GROWTH: "Population Growth",
    HEALTH_STATUS_CHANGE: "Health Status Change",
    SERVICE_UTILIZATION: "Service Utilization",
}

# ----- Scenario ids -----
BASELINE_ID = "baseline"
WORKING_ID = "working"
RESERVED_SCENARIO_IDS: Tuple[str, ...] = (BASELINE_ID, WORKING_ID)

BASELINE_NAME = "Baseline"
WORKING_NAME = "Working Changes"
WORKING_DESCRIPTION = "Applied parameter changes - save as scenario to keep"
UNNAMED_SCENARIO = "Unnamed Scenario"


def categories_for(kind: str) -> Tuple[str, ...]:
    """Return the category keys a parameter kind is defined over.

    Raises ValueError for unknown kinds so typos in scenario files or edit
    requests are caught before they reach a store.
    """
    if kind in WORKFORCE_KINDS:
        return OCCUPATIONS
    if kind == POPULATION_GROWTH:
        return AGE_GROUPS
    if kind == HEALTH_STATUS_CHANGE:
        return HEALTH_STATUSES
    if kind == SERVICE_UTILIZATION:
        return SERVICE_CATEGORIES
    raise ValueError(f"Unknown parameter kind '{kind}'. Expected one of: {', '.join(PARAMETER_KINDS)}")


def parameter_label(kind: str) -> str:
    return PARAMETER_LABELS.get(kind, kind)


def is_fraction_kind(kind: str) -> bool:
    return kind in FRACTION_KINDS


def pending_change_key(kind: str, year: int, category: str) -> str:
    """Stable key identifying a single edited cell, e.g. ``supply|2026|Physicians``."""
    return f"{kind}|{int(year)}|{category}"


def safe_filename(label: str) -> str:
    """Replace anything that is not a letter or digit with an underscore.

    Used for export filenames; case is preserved.
    """
    return re.sub(r"[^A-Za-z0-9]", "_", str(label or "")) or "scenario"


def all_cells() -> List[Tuple[str, int, str]]:
    """Every supported (kind, year, category) triple in canonical order."""
    return [(kind, year, cat) for kind in PARAMETER_KINDS for year in YEARS for cat in categories_for(kind)]
