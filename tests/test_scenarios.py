from __future__ import annotations

from datetime import datetime

import pytest

from workforce_model.naming import SUPPLY
from workforce_model.scenarios import Scenario, ScenarioStore, new_scenario_id, unique_scenario_name


def _scenario(baseline, scenario_id: str, name: str) -> Scenario:
    return Scenario.snapshot(scenario_id, name, baseline)


def test_snapshot_computes_projections(baseline):
    scenario = _scenario(baseline, "scn-a", "Plan A")
    assert scenario.projections.cell(2024, "Physicians").supply == 2500
    assert scenario.parameters is baseline


def test_with_parameters_recomputes(baseline):
    scenario = _scenario(baseline, "scn-a", "Plan A")
    updated = scenario.with_parameters(baseline.with_value(SUPPLY, 2024, "Physicians", 3000))
    assert updated.id == scenario.id and updated.name == scenario.name
    assert updated.projections.cell(2024, "Physicians").supply == 3000
    assert scenario.projections.cell(2024, "Physicians").supply == 2500


def test_dict_round_trip(baseline):
    scenario = Scenario.snapshot("scn-a", "Plan A", baseline, description="desc", created_at=datetime(2025, 3, 1, 12, 0))
    restored = Scenario.from_dict(scenario.to_dict())
    assert restored.id == "scn-a"
    assert restored.created_at == datetime(2025, 3, 1, 12, 0)
    assert restored.parameters.to_dict() == baseline.to_dict()
    assert restored.projections.to_dict() == scenario.projections.to_dict()


def test_from_dict_requires_parameters():
    with pytest.raises(ValueError):
        Scenario.from_dict({"name": "x"})


def test_store_rejects_baseline_id(baseline):
    with pytest.raises(ValueError):
        ScenarioStore([_scenario(baseline, "baseline", "Baseline")])


def test_store_is_ordered_and_immutable(baseline):
    a, b = _scenario(baseline, "scn-a", "A"), _scenario(baseline, "scn-b", "B")
    store = ScenarioStore([a])
    bigger = store.with_scenario(b)
    assert list(store) == ["scn-a"]
    assert list(bigger) == ["scn-a", "scn-b"]

    renamed = Scenario.snapshot("scn-a", "A2", baseline)
    replaced = bigger.with_scenario(renamed)
    assert list(replaced) == ["scn-a", "scn-b"]
    assert replaced["scn-a"].name == "A2"
    assert bigger["scn-a"].name == "A"

    assert list(replaced.without("scn-a")) == ["scn-b"]
    assert replaced.without("missing") is replaced


def test_saved_excludes_working(baseline):
    store = ScenarioStore([_scenario(baseline, "working", "Working Changes"), _scenario(baseline, "scn-a", "A")])
    assert [s.id for s in store.saved()] == ["scn-a"]
    assert list(store.without_working()) == ["scn-a"]


def test_unique_scenario_name():
    assert unique_scenario_name("Plan A", []) == "Plan A"
    assert unique_scenario_name("Plan A", ["Plan A"]) == "Plan A (2)"
    assert unique_scenario_name("Plan A", ["Plan A", "Plan A (2)"]) == "Plan A (3)"
    assert unique_scenario_name("   ", []) == "Unnamed Scenario"


def test_new_scenario_id_avoids_reserved_and_existing():
    ids = {new_scenario_id(["scn-1"]) for _ in range(20)}
    assert all(i.startswith("scn-") for i in ids)
    assert not ids & {"baseline", "working", "scn-1"}
