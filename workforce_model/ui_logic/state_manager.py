"""
Scenario lifecycle state for the workforce planning dashboard.

All application state lives in one immutable `AppState` value. Every
transition (edit, apply, reset, load baseline, create, select, delete,
import) is a pure reducer `AppState -> AppState`: it either returns a complete
new state or raises, in which case the caller still holds the old state
untouched. `StateManager` wraps the reducers for UI frameworks: it keeps the
current state, an undo history and listener callbacks, and reports outcomes
as `(success, error_message)` tuples.

Lifecycle phases derived from the state:
    Baseline -> BaselineDirty -> (apply) -> Working
    Scenario(id) -> ScenarioDirty(id) -> (apply) -> Scenario(id)
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union
import logging

import pandas as pd

from ..baseline import generate_baseline, generate_baseline_from_population, load_population_csv
from ..errors import ScenarioError, ScenarioNotFoundError, UnappliedChangesError, WorkforceModelError
from ..naming import BASELINE_ID, BASELINE_NAME, WORKING_DESCRIPTION, WORKING_ID, WORKING_NAME, pending_change_key
from ..parameters import ParameterStore
from ..projection import ProjectionTable, project, projection_changed
from ..propagation import resolve_baseline, update_parameter
from ..scenarios import Scenario, ScenarioStore, new_scenario_id, unique_scenario_name

logger = logging.getLogger(__name__)


class LifecyclePhase(Enum):
    """Enumeration of lifecycle phases derived from `AppState`."""
    BASELINE = "baseline"
    BASELINE_DIRTY = "baseline_dirty"
    WORKING = "working"
    WORKING_DIRTY = "working_dirty"
    SCENARIO = "scenario"
    SCENARIO_DIRTY = "scenario_dirty"


@dataclass(frozen=True)
class AppState:
    """Complete application state.

    - baseline: immutable global baseline store
    - baseline_projections: projections of `baseline`, computed once per baseline
    - editing: the store being edited in the current session
    - scenarios: saved scenarios plus the optional temporary "working" entry
    - active_id: "baseline", "working" or a saved scenario id
    - dirty: True when `editing` holds edits that have not been applied
    - pending_changes: keys of cells edited since the last apply/reset
    - inert_changes: the subset of pending keys whose edit left the
      projections unchanged (supply after the opening year, opening-year
      inflows); they are stored and propagated but have no visible effect
    - notice: non-fatal message left by the last transition (e.g. unknown id)
    """
    baseline: ParameterStore
    baseline_projections: ProjectionTable
    editing: ParameterStore
    scenarios: ScenarioStore = field(default_factory=ScenarioStore)
    active_id: str = BASELINE_ID
    dirty: bool = False
    pending_changes: FrozenSet[str] = frozenset()
    inert_changes: FrozenSet[str] = frozenset()
    notice: Optional[str] = None


def initial_state(baseline: Optional[ParameterStore] = None) -> AppState:
    """Fresh state on the given (or built-in) baseline."""
    baseline = baseline if baseline is not None else generate_baseline()
    return AppState(baseline=baseline, baseline_projections=project(baseline), editing=baseline)


def lifecycle_phase(state: AppState) -> LifecyclePhase:
    if state.active_id == BASELINE_ID:
        return LifecyclePhase.BASELINE_DIRTY if state.dirty else LifecyclePhase.BASELINE
    if state.active_id == WORKING_ID:
        return LifecyclePhase.WORKING_DIRTY if state.dirty else LifecyclePhase.WORKING
    return LifecyclePhase.SCENARIO_DIRTY if state.dirty else LifecyclePhase.SCENARIO


def _clean(state: AppState, **changes) -> AppState:
    # Every non-edit transition clears the dirty flag, pending keys and notice
    changes.setdefault("dirty", False)
    changes.setdefault("pending_changes", frozenset())
    changes.setdefault("inert_changes", frozenset())
    changes.setdefault("notice", None)
    return replace(state, **changes)


# ----- Reducers -----


def edit_parameter(state: AppState, kind: str, year: int, category: str, value: object) -> AppState:
    """Apply one edit (with forward propagation) to the editing store.

    The reference is the active saved scenario, else the global baseline.
    While "working" is active that means the global baseline, so an edit
    there recomputes its propagated cells from baseline values and replaces
    whatever an earlier applied edit had written to the same cells.
    """
    reference = resolve_baseline(state.active_id, state.scenarios, state.baseline)
    editing = update_parameter(state.editing, kind, year, category, value, baseline=reference)
    key = pending_change_key(kind, year, category)
    inert = state.inert_changes - {key}
    if not projection_changed(state.editing, editing):
        logger.warning("Edit %s leaves the projections unchanged", key)
        inert = inert | {key}
    return replace(
        state,
        editing=editing,
        dirty=True,
        pending_changes=state.pending_changes | {key},
        inert_changes=inert,
        notice=None,
    )


def apply_changes(state: AppState) -> AppState:
    """Recompute projections from the editing store and commit them.

    On baseline the result lands in the temporary "working" scenario, which
    becomes active; otherwise the active scenario is overwritten in place.
    """
    if not state.dirty:
        raise ScenarioError("There are no unapplied changes to apply")

    if state.active_id == BASELINE_ID:
        working = Scenario.snapshot(
            WORKING_ID,
            WORKING_NAME,
            state.editing,
            description=WORKING_DESCRIPTION,
            is_temporary=True,
        )
        return _clean(state, scenarios=state.scenarios.with_scenario(working), active_id=WORKING_ID)

    target = state.scenarios.get(state.active_id)
    if target is None:
        raise ScenarioNotFoundError(f"Active scenario '{state.active_id}' no longer exists")
    return _clean(state, scenarios=state.scenarios.with_scenario(target.with_parameters(state.editing)))


def reset_changes(state: AppState) -> AppState:
    """Discard edits and reload the editing store from the active scenario.

    Resetting while "working" is active also discards the working scenario
    and returns to baseline.
    """
    if state.active_id == WORKING_ID:
        return _clean(
            state,
            editing=state.baseline,
            scenarios=state.scenarios.without_working(),
            active_id=BASELINE_ID,
        )
    scenario = state.scenarios.get(state.active_id)
    if state.active_id == BASELINE_ID or scenario is None:
        return _clean(state, editing=state.baseline, active_id=BASELINE_ID)
    return _clean(state, editing=scenario.parameters)


def load_baseline(state: AppState) -> AppState:
    """Unconditionally return to the baseline, dropping edits and "working"."""
    return _clean(
        state,
        editing=state.baseline,
        scenarios=state.scenarios.without_working(),
        active_id=BASELINE_ID,
    )


def create_scenario(state: AppState, name: str, description: str = "") -> AppState:
    """Save the editing store as a new named scenario and activate it."""
    remaining = state.scenarios.without_working()
    unique_name = unique_scenario_name(name, remaining.names())
    scenario_id = new_scenario_id(state.scenarios.keys())
    scenario = Scenario.snapshot(scenario_id, unique_name, state.editing, description=(description or "").strip())
    return _clean(state, scenarios=remaining.with_scenario(scenario), active_id=scenario_id)


def add_scenario(state: AppState, scenario: Scenario, activate: bool = False) -> AppState:
    """Insert an externally built scenario (e.g. loaded from a file).

    The id is regenerated on collision and the name made unique, so an
    existing scenario is never overwritten.
    """
    if activate and state.dirty:
        raise UnappliedChangesError("Apply or reset the current changes before activating another scenario")
    scenario_id = scenario.id
    if scenario_id in state.scenarios or scenario_id in (BASELINE_ID, WORKING_ID):
        scenario_id = new_scenario_id(state.scenarios.keys())
    name = unique_scenario_name(scenario.name, state.scenarios.without_working().names())
    scenario = replace(scenario, id=scenario_id, name=name, is_temporary=False)
    scenarios = state.scenarios.with_scenario(scenario)
    if not activate:
        return replace(state, scenarios=scenarios, notice=None)
    if state.active_id == WORKING_ID:
        scenarios = scenarios.without_working()
    return _clean(state, scenarios=scenarios, editing=scenario.parameters, active_id=scenario_id)


def select_scenario(state: AppState, scenario_id: str, confirm_discard: bool = False) -> AppState:
    """Switch the active scenario and load its parameters for editing.

    Raises UnappliedChangesError when edits would be lost and the caller has
    not confirmed. Unknown ids fall back to baseline and set `notice`.
    """
    if state.dirty and not confirm_discard:
        raise UnappliedChangesError(
            f"Switching to '{scenario_id}' would discard {len(state.pending_changes)} unapplied change(s)"
        )

    scenarios = state.scenarios
    if state.active_id == WORKING_ID and scenario_id != WORKING_ID:
        # Leaving the working scenario without saving discards it
        scenarios = scenarios.without_working()

    if scenario_id == BASELINE_ID:
        return _clean(state, scenarios=scenarios, editing=state.baseline, active_id=BASELINE_ID)

    target = scenarios.get(scenario_id)
    if target is None:
        notice = f"Scenario '{scenario_id}' not found; showing {BASELINE_NAME}"
        logger.warning(notice)
        return _clean(state, scenarios=scenarios, editing=state.baseline, active_id=BASELINE_ID, notice=notice)
    return _clean(state, scenarios=scenarios, editing=target.parameters, active_id=scenario_id)


def delete_scenario(state: AppState, scenario_id: str) -> AppState:
    """Remove a scenario; deleting the active one falls back to baseline."""
    if scenario_id == BASELINE_ID:
        raise ScenarioError("The baseline cannot be deleted")
    if scenario_id not in state.scenarios:
        notice = f"Scenario '{scenario_id}' not found; nothing was deleted"
        logger.warning(notice)
        return replace(state, notice=notice)

    scenarios = state.scenarios.without(scenario_id)
    if state.active_id == scenario_id:
        return _clean(state, scenarios=scenarios, editing=state.baseline, active_id=BASELINE_ID)
    return replace(state, scenarios=scenarios, notice=None)


def replace_baseline(state: AppState, baseline: ParameterStore) -> AppState:
    """Install a new global baseline; saved scenarios are kept, "working" is dropped."""
    return _clean(
        state,
        baseline=baseline,
        baseline_projections=project(baseline),
        editing=baseline,
        scenarios=state.scenarios.without_working(),
        active_id=BASELINE_ID,
    )


def import_population(state: AppState, rows: Union[pd.DataFrame, List[dict]]) -> AppState:
    """Derive a baseline from population rows and install it.

    Parsing and derivation complete before anything is replaced; a
    PopulationDataError propagates with the original state intact.
    """
    baseline = generate_baseline_from_population(rows)
    return replace_baseline(state, baseline)


# ----- Read helpers -----


def active_scenario(state: AppState) -> Optional[Scenario]:
    return state.scenarios.get(state.active_id)


def current_projections(state: AppState) -> ProjectionTable:
    """Projections of the active scenario (baseline projections on baseline)."""
    scenario = active_scenario(state)
    return scenario.projections if scenario is not None else state.baseline_projections


def baseline_projections(state: AppState) -> ProjectionTable:
    return state.baseline_projections


def editing_projections(state: AppState) -> ProjectionTable:
    """Live preview of the not-yet-applied editing store."""
    return project(state.editing)


def list_scenarios(state: AppState) -> List[Dict[str, object]]:
    """Lightweight listing for selectors: baseline first, then stored scenarios."""
    listing: List[Dict[str, object]] = [
        {"id": BASELINE_ID, "name": BASELINE_NAME, "description": "", "is_temporary": False, "active": state.active_id == BASELINE_ID}
    ]
    for scenario in state.scenarios.values():
        listing.append(
            {
                "id": scenario.id,
                "name": scenario.name,
                "description": scenario.description,
                "is_temporary": scenario.is_temporary,
                "active": state.active_id == scenario.id,
            }
        )
    return listing


def resolve_scenario(state: AppState, scenario_id: str) -> Tuple[str, ParameterStore, ProjectionTable]:
    """Return (name, parameters, projections) for "baseline" or a stored id.

    Raises ScenarioNotFoundError for unknown ids.
    """
    if scenario_id == BASELINE_ID:
        return BASELINE_NAME, state.baseline, state.baseline_projections
    scenario = state.scenarios.get(scenario_id)
    if scenario is None:
        raise ScenarioNotFoundError(f"Scenario '{scenario_id}' not found")
    return scenario.name, scenario.parameters, scenario.projections


class StateManager:
    """
    Framework-agnostic holder of the current `AppState`.

    Each public transition delegates to the matching reducer. The state
    reference is swapped only after the reducer returns, so a failed
    transition leaves no partial changes. Outcomes are reported as
    `(success, error_message)`; a referential fallback (unknown scenario id)
    completes the fallback and reports `(False, notice)`.
    """

    def __init__(self, baseline: Optional[ParameterStore] = None):
        """Initialize the state manager on the given or built-in baseline."""
        self._state = initial_state(baseline)
        self._listeners: Dict[str, List[Callable]] = {}
        self._history: List[AppState] = []
        self._max_history = 50

    def get_state(self) -> AppState:
        """Get the current application state."""
        return self._state

    def set_state(self, new_state: AppState) -> None:
        """Set the entire application state and notify listeners."""
        old_state = self._state
        self._state = new_state

        self._history.append(old_state)
        if len(self._history) > self._max_history:
            self._history.pop(0)

        self._notify_listeners("state_changed", old_state, new_state)

    def _dispatch(self, action: str, reducer: Callable[..., AppState], *args, **kwargs) -> Tuple[bool, Optional[str]]:
        try:
            new_state = reducer(self._state, *args, **kwargs)
        except (WorkforceModelError, ValueError) as e:
            error_msg = f"{action} failed: {e}"
            logger.error(error_msg)
            return False, error_msg
        self.set_state(new_state)
        logger.info("%s -> active=%s phase=%s", action, new_state.active_id, lifecycle_phase(new_state).value)
        if new_state.notice:
            return False, new_state.notice
        return True, None

    # ----- Transitions -----
    def edit_parameter(self, kind: str, year: int, category: str, value: object) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Edit", edit_parameter, kind, year, category, value)

    def apply_changes(self) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Apply", apply_changes)

    def reset_changes(self) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Reset", reset_changes)

    def load_baseline(self) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Load baseline", load_baseline)

    def create_scenario(self, name: str, description: str = "") -> Tuple[bool, Optional[str]]:
        return self._dispatch("Create scenario", create_scenario, name, description)

    def add_scenario(self, scenario: Scenario, activate: bool = False) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Add scenario", add_scenario, scenario, activate)

    def select_scenario(self, scenario_id: str, confirm_discard: bool = False) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Select scenario", select_scenario, scenario_id, confirm_discard)

    def delete_scenario(self, scenario_id: str) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Delete scenario", delete_scenario, scenario_id)

    def import_population(self, rows: Union[pd.DataFrame, List[dict]]) -> Tuple[bool, Optional[str]]:
        return self._dispatch("Import population", import_population, rows)

    def import_population_csv(self, path: Union[Path, str]) -> Tuple[bool, Optional[str]]:
        """Parse a population CSV, then install the derived baseline."""
        try:
            rows = load_population_csv(path)
        except WorkforceModelError as e:
            error_msg = f"Import population failed: {e}"
            logger.error(error_msg)
            return False, error_msg
        return self.import_population(rows)

    # ----- Read helpers -----
    def current_projections(self) -> ProjectionTable:
        return current_projections(self._state)

    def editing_projections(self) -> ProjectionTable:
        return editing_projections(self._state)

    def list_scenarios(self) -> List[Dict[str, object]]:
        return list_scenarios(self._state)

    def phase(self) -> LifecyclePhase:
        return lifecycle_phase(self._state)

    def inert_changes(self) -> List[str]:
        """Pending edit keys that did not change the projections, sorted."""
        return sorted(self._state.inert_changes)

    # ----- Listeners and history -----
    def add_listener(self, event: str, callback: Callable) -> None:
        """Add a listener for state change events."""
        if event not in self._listeners:
            self._listeners[event] = []
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Callable) -> None:
        """Remove a listener for state change events."""
        if event in self._listeners and callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _notify_listeners(self, event: str, *args, **kwargs) -> None:
        """Notify all listeners for a specific event."""
        if event in self._listeners:
            for callback in self._listeners[event]:
                try:
                    callback(*args, **kwargs)
                except Exception as e:
                    logger.error(f"Error in state listener callback: {e}")

    def undo(self) -> bool:
        """Undo the last state change if possible."""
        if self._history:
            previous_state = self._history.pop()
            self._state = previous_state
            self._notify_listeners("state_changed", self._state, self._state)
            return True
        return False

    def can_undo(self) -> bool:
        """Check if undo is possible."""
        return len(self._history) > 0
