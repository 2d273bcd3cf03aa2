from __future__ import annotations

"""
Tests for the immutable ParameterStore.

Checks value semantics (no edit can leak through a shared reference),
structural sharing of untouched branches, coercion on construction and the
missing-value policy of `lookup_or_default`.
"""

import math

import pytest

from workforce_model.naming import ATTRITION_RATE, RETIREMENT_RATE, SUPPLY
from workforce_model.parameters import ParameterStore, lookup_or_default


def test_construction_coerces_years_and_values():
    store = ParameterStore({SUPPLY: {"2024": {"Physicians": "2500"}}})
    assert store.get_value(SUPPLY, 2024, "Physicians") == 2500.0
    assert isinstance(store[SUPPLY][2024]["Physicians"], float)
    assert store.years_for(SUPPLY) == [2024]


def test_non_numeric_value_rejected():
    with pytest.raises(ValueError):
        ParameterStore({SUPPLY: {2024: {"Physicians": "lots"}}})


def test_nested_levels_are_read_only(baseline):
    with pytest.raises(TypeError):
        baseline[SUPPLY][2024]["Physicians"] = 1.0  # type: ignore[index]
    with pytest.raises(TypeError):
        baseline[SUPPLY][2024] = {}  # type: ignore[index]


def test_with_value_leaves_original_unchanged(baseline):
    edited = baseline.with_value(SUPPLY, 2026, "Physicians", 9999)
    assert edited.get_value(SUPPLY, 2026, "Physicians") == 9999.0
    assert baseline.get_value(SUPPLY, 2026, "Physicians") == pytest.approx(2550.0)


def test_with_values_shares_untouched_branches(baseline):
    edited = baseline.with_values([(SUPPLY, 2026, "Physicians", 1.0)])
    assert edited[RETIREMENT_RATE] is baseline[RETIREMENT_RATE]
    assert edited[SUPPLY][2025] is baseline[SUPPLY][2025]
    assert edited[SUPPLY][2026] is not baseline[SUPPLY][2026]


def test_with_values_empty_returns_same_store(baseline):
    assert baseline.with_values([]) is baseline


def test_to_dict_is_a_fresh_copy(baseline):
    plain = baseline.to_dict()
    plain[SUPPLY][2024]["Physicians"] = -1
    assert baseline.get_value(SUPPLY, 2024, "Physicians") == 2500.0


def test_frame_round_trip_preserves_values(baseline):
    frame = baseline.to_frame()
    assert list(frame.columns) == ["Kind", "Year", "Category", "Value"]
    restored = ParameterStore.from_frame(frame)
    assert restored.to_dict() == baseline.to_dict()


def test_lookup_or_default_missing_levels(baseline):
    assert lookup_or_default(baseline, "unknownKind", 2024, "Physicians", 7.0) == 7.0
    assert lookup_or_default(baseline, SUPPLY, 2099, "Physicians", 3.0) == 3.0
    assert lookup_or_default(baseline, SUPPLY, 2024, "Dentists", 0.0) == 0.0
    assert lookup_or_default(None, SUPPLY, 2024, "Physicians", 5.0) == 5.0


def test_lookup_or_default_treats_nan_as_missing(baseline):
    store = baseline.with_value(ATTRITION_RATE, 2024, "Physicians", math.nan)
    assert lookup_or_default(store, ATTRITION_RATE, 2024, "Physicians", 0.15) == 0.15

