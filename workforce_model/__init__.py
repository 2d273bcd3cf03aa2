"""Workforce planning model source package.

Exports the parameter store, baseline generation, the projection engine and
the edit propagation rules. The scenario lifecycle lives in
`workforce_model.ui_logic`, spreadsheet export in `workforce_model.export`
and the dashboard read models in `workforce_model.analysis`.
"""

from .naming import *  # re-export canonical names
from .naming import __all__ as _naming_all  # noqa: F401

from .errors import (  # noqa: F401
    PopulationDataError,
    ScenarioError,
    ScenarioNotFoundError,
    UnappliedChangesError,
    WorkforceModelError,
)
from .parameters import ParameterStore, lookup_or_default  # noqa: F401
from .baseline import generate_baseline, generate_baseline_from_population, load_population_csv  # noqa: F401
from .projection import ProjectionCell, ProjectionTable, project, projection_changed  # noqa: F401
from .propagation import parse_value, resolve_baseline, update_parameter  # noqa: F401
from .scenarios import Scenario, ScenarioStore  # noqa: F401

__all__ = list(_naming_all) + [
    "PopulationDataError",
    "ScenarioError",
    "ScenarioNotFoundError",
    "UnappliedChangesError",
    "WorkforceModelError",
    "ParameterStore",
    "lookup_or_default",
    "generate_baseline",
    "generate_baseline_from_population",
    "load_population_csv",
    "ProjectionCell",
    "ProjectionTable",
    "project",
    "projection_changed",
    "parse_value",
    "resolve_baseline",
    "update_parameter",
    "Scenario",
    "ScenarioStore",
]
