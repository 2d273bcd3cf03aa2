"""
Tests for the scenario lifecycle (AppState reducers and StateManager).

Every transition either completes or leaves the previous state untouched;
these tests exercise the phases Baseline, BaselineDirty, Working,
Scenario and ScenarioDirty and the fallbacks for unknown ids.
"""

import pytest

from workforce_model.errors import ScenarioError, UnappliedChangesError
from workforce_model.naming import EDUCATIONAL_INFLOW, RETIREMENT_RATE, SUPPLY
from workforce_model.ui_logic import LifecyclePhase, StateManager
from workforce_model.ui_logic import state_manager as sm


def _edit_retirement(manager: StateManager, value=0.10):
    ok, error = manager.edit_parameter(RETIREMENT_RATE, 2024, "Physicians", value)
    assert ok, error


class TestInitialState:
    def test_starts_on_baseline(self):
        manager = StateManager()
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert not state.dirty
        assert state.editing is state.baseline
        assert manager.phase() == LifecyclePhase.BASELINE
        assert manager.current_projections().cell(2024, "Physicians").supply == 2500

    def test_list_scenarios_baseline_first(self):
        listing = StateManager().list_scenarios()
        assert listing[0]["id"] == "baseline"
        assert listing[0]["active"] is True


class TestEditApplyReset:
    def test_edit_marks_dirty_without_touching_baseline(self):
        manager = StateManager()
        _edit_retirement(manager)
        state = manager.get_state()
        assert state.dirty
        assert state.pending_changes == frozenset({"retirementRate|2024|Physicians"})
        assert manager.phase() == LifecyclePhase.BASELINE_DIRTY
        assert state.baseline.get_value(RETIREMENT_RATE, 2024, "Physicians") == 0.06
        assert state.editing.get_value(RETIREMENT_RATE, 2030, "Physicians") == 0.10

    def test_editing_preview_reflects_edit(self):
        manager = StateManager()
        _edit_retirement(manager)
        assert manager.editing_projections().cell(2025, "Physicians").supply == 2025
        assert manager.current_projections().cell(2025, "Physicians").supply == 2125

    def test_apply_on_baseline_creates_working(self):
        manager = StateManager()
        _edit_retirement(manager)
        ok, error = manager.apply_changes()
        assert ok, error

        state = manager.get_state()
        assert state.active_id == "working"
        assert not state.dirty
        working = state.scenarios["working"]
        assert working.is_temporary
        assert working.name == "Working Changes"
        assert working.projections.cell(2025, "Physicians").supply == 2025
        assert state.baseline_projections.cell(2025, "Physicians").supply == 2125
        assert manager.phase() == LifecyclePhase.WORKING

    def test_apply_without_changes_fails(self):
        manager = StateManager()
        before = manager.get_state()
        ok, error = manager.apply_changes()
        assert not ok
        assert "no unapplied changes" in error
        assert manager.get_state() is before
        with pytest.raises(ScenarioError):
            sm.apply_changes(before)

    def test_reset_restores_baseline(self):
        manager = StateManager()
        _edit_retirement(manager)
        assert manager.reset_changes() == (True, None)
        state = manager.get_state()
        assert state.editing is state.baseline
        assert not state.dirty
        assert state.pending_changes == frozenset()

    def test_reset_from_working_discards_it(self):
        manager = StateManager()
        _edit_retirement(manager)
        manager.apply_changes()
        manager.reset_changes()
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert "working" not in state.scenarios

    def test_load_baseline_drops_working_and_edits(self):
        manager = StateManager()
        _edit_retirement(manager)
        manager.apply_changes()
        _edit_retirement(manager, 0.2)
        assert manager.load_baseline() == (True, None)
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert not state.dirty
        assert "working" not in state.scenarios


class TestNamedScenarios:
    def test_create_from_working(self):
        manager = StateManager()
        _edit_retirement(manager)
        manager.apply_changes()
        ok, error = manager.create_scenario("Plan A", "higher retirement")
        assert ok, error

        state = manager.get_state()
        assert "working" not in state.scenarios
        scenario = state.scenarios[state.active_id]
        assert scenario.name == "Plan A"
        assert scenario.description == "higher retirement"
        assert not scenario.is_temporary
        assert scenario.projections.cell(2025, "Physicians").supply == 2025
        assert manager.phase() == LifecyclePhase.SCENARIO

    def test_duplicate_names_get_suffix(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        manager.create_scenario("Plan A")
        scenarios = manager.get_state().scenarios
        assert [s.name for s in scenarios.values()] == ["Plan A", "Plan A (2)"]
        assert len(set(scenarios)) == 2

    def test_apply_overwrites_active_scenario_in_place(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        scenario_id = manager.get_state().active_id
        _edit_retirement(manager)
        assert manager.phase() == LifecyclePhase.SCENARIO_DIRTY
        manager.apply_changes()

        state = manager.get_state()
        assert state.active_id == scenario_id
        assert list(state.scenarios) == [scenario_id]
        assert state.scenarios[scenario_id].projections.cell(2025, "Physicians").supply == 2025
        assert state.baseline.get_value(RETIREMENT_RATE, 2024, "Physicians") == 0.06

    def test_scenarios_are_isolated(self):
        manager = StateManager()
        manager.create_scenario("A")
        a_id = manager.get_state().active_id
        manager.create_scenario("B")
        b_id = manager.get_state().active_id
        manager.edit_parameter(SUPPLY, 2024, "Physicians", 4000)
        manager.apply_changes()

        state = manager.get_state()
        assert state.scenarios[b_id].parameters.get_value(SUPPLY, 2024, "Physicians") == 4000
        assert state.scenarios[a_id].parameters.get_value(SUPPLY, 2024, "Physicians") == 2500

    def test_edits_in_scenario_propagate_against_scenario(self):
        manager = StateManager()
        manager.edit_parameter(SUPPLY, 2026, "Physicians", 5100)
        manager.create_scenario("Doubled")
        manager.edit_parameter(SUPPLY, 2026, "Physicians", 2550)
        editing = manager.get_state().editing
        # Reference 2027 value is the scenario's 5150, halved
        assert editing.get_value(SUPPLY, 2027, "Physicians") == 2575


class TestSelectAndDelete:
    def test_select_with_unapplied_changes_requires_confirmation(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        scenario_id = manager.get_state().active_id
        manager.select_scenario("baseline")
        _edit_retirement(manager)
        before = manager.get_state()

        ok, error = manager.select_scenario(scenario_id)
        assert not ok
        assert "unapplied" in error
        assert manager.get_state() is before
        with pytest.raises(UnappliedChangesError):
            sm.select_scenario(before, scenario_id)

        ok, _ = manager.select_scenario(scenario_id, confirm_discard=True)
        assert ok
        state = manager.get_state()
        assert state.active_id == scenario_id
        assert not state.dirty
        assert state.editing is state.scenarios[scenario_id].parameters

    def test_select_unknown_falls_back_with_notice(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        ok, notice = manager.select_scenario("scn-missing")
        assert not ok
        assert "not found" in notice
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert state.editing is state.baseline
        assert state.notice == notice
        assert sm.baseline_projections(state) is state.baseline_projections

    def test_leaving_working_discards_it(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        scenario_id = manager.get_state().active_id
        manager.select_scenario("baseline")
        _edit_retirement(manager)
        manager.apply_changes()
        manager.select_scenario(scenario_id)
        assert "working" not in manager.get_state().scenarios

    def test_delete_rules(self):
        manager = StateManager()
        manager.create_scenario("A")
        a_id = manager.get_state().active_id
        manager.create_scenario("B")
        b_id = manager.get_state().active_id

        ok, error = manager.delete_scenario("baseline")
        assert not ok and "cannot be deleted" in error

        ok, notice = manager.delete_scenario("scn-missing")
        assert not ok and "not found" in notice
        assert manager.get_state().active_id == b_id

        assert manager.delete_scenario(a_id) == (True, None)
        assert manager.get_state().active_id == b_id

        assert manager.delete_scenario(b_id) == (True, None)
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert len(state.scenarios) == 0


class TestPopulationImport:
    def test_bad_rows_leave_state_intact(self):
        manager = StateManager()
        manager.create_scenario("Plan A")
        before = manager.get_state()
        ok, error = manager.import_population([{"Year": 2024, "Age_Group": "0-18"}])
        assert not ok
        assert "missing required columns" in error
        assert manager.get_state() is before

    def test_missing_csv_reported(self, tmp_path):
        manager = StateManager()
        ok, error = manager.import_population_csv(tmp_path / "missing.csv")
        assert not ok and "not found" in error

    def test_import_replaces_baseline_and_keeps_scenarios(self, population_rows):
        manager = StateManager()
        manager.create_scenario("Plan A")
        ok, error = manager.import_population(population_rows)
        assert ok, error
        state = manager.get_state()
        assert state.active_id == "baseline"
        assert state.baseline.get_value(SUPPLY, 2024, "Physicians") == pytest.approx(1250)
        assert state.baseline_projections.cell(2024, "Physicians").supply == 1250
        assert [s.name for s in state.scenarios.values()] == ["Plan A"]


class TestHistoryAndListeners:
    def test_undo(self):
        manager = StateManager()
        assert not manager.can_undo()
        _edit_retirement(manager)
        assert manager.undo()
        assert not manager.get_state().dirty

    def test_listener_receives_transitions(self):
        manager = StateManager()
        seen = []
        callback = lambda old, new: seen.append((old.active_id, new.active_id))  # noqa: E731
        manager.add_listener("state_changed", callback)
        _edit_retirement(manager)
        manager.apply_changes()
        assert seen[-1] == ("baseline", "working")
        manager.remove_listener("state_changed", callback)
        manager.load_baseline()
        assert len(seen) == 2


def _physician_supply(table):
    return [table.cell(year, "Physicians").supply for year in table.years]


class TestEditsWithoutProjectionEffect:
    def test_later_supply_edit_is_flagged(self):
        manager = StateManager()
        ok, error = manager.edit_parameter(SUPPLY, 2026, "Physicians", 5100)
        assert ok, error
        assert manager.inert_changes() == ["supply|2026|Physicians"]
        assert manager.get_state().editing.get_value(SUPPLY, 2034, "Physicians") == 5500

        manager.apply_changes()
        state = manager.get_state()
        assert state.inert_changes == frozenset()
        assert _physician_supply(manager.current_projections()) == _physician_supply(state.baseline_projections)

    def test_opening_year_inflow_edit_is_flagged(self):
        manager = StateManager()
        manager.edit_parameter(EDUCATIONAL_INFLOW, 2024, "Physicians", 600)
        assert manager.inert_changes() == ["educationalInflow|2024|Physicians"]
        assert _physician_supply(manager.editing_projections()) == _physician_supply(manager.current_projections())

    def test_effective_edits_are_not_flagged(self):
        manager = StateManager()
        manager.edit_parameter(EDUCATIONAL_INFLOW, 2026, "Physicians", 600)
        _edit_retirement(manager)
        assert manager.inert_changes() == []
        assert manager.editing_projections().cell(2026, "Physicians").supply > manager.current_projections().cell(2026, "Physicians").supply

    def test_re_editing_a_cell_replaces_its_flag(self):
        manager = StateManager()
        manager.edit_parameter(EDUCATIONAL_INFLOW, 2024, "Physicians", 600)
        manager.edit_parameter(SUPPLY, 2024, "Physicians", 3000)
        assert manager.inert_changes() == ["educationalInflow|2024|Physicians"]
        manager.reset_changes()
        assert manager.inert_changes() == []


class TestWorkingScenarioReference:
    def test_inflow_edit_in_working_rebuilds_supply_from_baseline(self):
        manager = StateManager()
        manager.edit_parameter(SUPPLY, 2026, "Physicians", 5100)
        manager.apply_changes()
        assert manager.get_state().editing.get_value(SUPPLY, 2027, "Physicians") == 5150

        baseline = manager.get_state().baseline
        inflow = baseline.get_value(EDUCATIONAL_INFLOW, 2026, "Physicians")
        manager.edit_parameter(EDUCATIONAL_INFLOW, 2026, "Physicians", inflow + 50)
        editing = manager.get_state().editing
        # Propagated against the baseline, so the applied 5150 is replaced
        assert editing.get_value(SUPPLY, 2027, "Physicians") == pytest.approx(
            baseline.get_value(SUPPLY, 2027, "Physicians") + 50
        )
        assert editing.get_value(SUPPLY, 2026, "Physicians") == 5100
