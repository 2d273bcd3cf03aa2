from __future__ import annotations

import streamlit as st
import pandas as pd

from .base_component import BaseComponent
from workforce_model.naming import (
    DEMAND_KINDS,
    INFLOW_KINDS,
    SUPPLY,
    WORKFORCE_KINDS,
    YEARS,
    categories_for,
    is_fraction_kind,
    parameter_label,
)
from workforce_model.analysis import parameter_changes
from workforce_model.parameters import ParameterStore, lookup_or_default
from workforce_model.ui_logic import LifecyclePhase


def parameter_frame(store: ParameterStore, kind: str) -> pd.DataFrame:
    """Year x category grid of one parameter kind."""
    cats = list(categories_for(kind))
    df = pd.DataFrame(index=list(YEARS), columns=cats, dtype=float)
    for year in YEARS:
        for cat in cats:
            df.at[year, cat] = lookup_or_default(store, kind, year, cat, 0.0)
    df.index.name = "Year"
    return df


def changed_cells(before: pd.DataFrame, after: pd.DataFrame) -> list[tuple[int, str, object]]:
    """Cells whose value differs between two grids of the same shape, row-major."""
    changes: list[tuple[int, str, object]] = []
    for year in before.index:
        for cat in before.columns:
            old, new = before.at[year, cat], after.at[year, cat]
            if pd.isna(old) and pd.isna(new):
                continue
            if pd.isna(new) or pd.isna(old) or float(old) != float(new):
                changes.append((int(year), str(cat), new))
    return changes


def format_change_key(key: str) -> str:
    """'supply|2026|Physicians' -> 'Supply 2026 (Physicians)'."""
    kind, year, category = key.split("|", 2)
    return f"{parameter_label(kind)} {year} ({category})"


def projection_note(kind: str) -> str | None:
    """Which rows of a grid the projection engine never reads, if any."""
    if kind == SUPPLY:
        return f"Only the {YEARS[0]} row seeds the projection; later rows are the reference series that supply edits rescale."
    if kind in INFLOW_KINDS:
        return f"The {YEARS[0]} row is not read by the projection; supply is rolled forward with inflows from {YEARS[1]} on."
    return None


class ParametersTab(BaseComponent):
    """Editable grids for the workforce or demand parameter kinds.

    Each edit is sent through `StateManager.edit_parameter`, so forward
    propagation and dirty tracking happen in the state layer. Apply and
    Reset buttons commit or discard the pending edits.
    """

    def __init__(self, manager, kinds: tuple[str, ...], title: str, key_prefix: str) -> None:
        super().__init__(manager)
        self.kinds = kinds
        self.title = title
        self.key_prefix = key_prefix

    def render(self) -> None:
        st.header(self.title)
        state = self.manager.get_state()
        if state.dirty:
            st.info(f"{len(state.pending_changes)} pending change(s). Apply to save them to the active scenario.")
        inert = self.manager.inert_changes()
        if inert:
            st.warning(
                "These edits are stored but do not change the projections: "
                + ", ".join(format_change_key(key) for key in inert)
            )

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Apply changes", key=f"{self.key_prefix}_apply", disabled=not state.dirty):
                if self.report(self.manager.apply_changes(), "Changes applied."):
                    self._bump_editor_version()
                    st.rerun()
        with col2:
            if st.button("Reset changes", key=f"{self.key_prefix}_reset", disabled=not state.dirty):
                if self.report(self.manager.reset_changes(), "Changes discarded."):
                    self._bump_editor_version()
                    st.rerun()

        tabs = st.tabs([parameter_label(kind) for kind in self.kinds])
        for tab, kind in zip(tabs, self.kinds):
            with tab:
                self._render_kind(kind)

    def _editor_version(self) -> int:
        # Editors are re-keyed after every transition so stale deltas are not replayed
        return int(st.session_state.get("param_editor_version", 0))

    def _bump_editor_version(self) -> None:
        st.session_state["param_editor_version"] = self._editor_version() + 1

    def _render_kind(self, kind: str) -> None:
        if is_fraction_kind(kind):
            st.caption("Fractions, e.g. 0.05 = 5%. Edits are copied to all later years.")
        else:
            st.caption("FTE counts. Edits adjust later years according to the propagation rules.")
        note = projection_note(kind)
        if note:
            st.caption(note)

        current = parameter_frame(self.manager.get_state().editing, kind)
        edited = st.data_editor(
            current,
            use_container_width=True,
            num_rows="fixed",
            key=f"{self.key_prefix}_{kind}_{self._editor_version()}",
        )
        with st.expander("Compare with baseline"):
            year = st.selectbox("Year", options=list(YEARS), key=f"{self.key_prefix}_{kind}_compare_year")
            state = self.manager.get_state()
            st.dataframe(
                parameter_changes(state.editing, state.baseline, kind, year, categories_for(kind)),
                hide_index=True,
                use_container_width=True,
            )

        changes = changed_cells(current, edited)
        if not changes:
            return
        for year, cat, value in changes:
            self.report(self.manager.edit_parameter(kind, year, cat, value))
        self._bump_editor_version()
        st.rerun()


def render_workforce_parameters_tab(manager) -> None:
    ParametersTab(manager, WORKFORCE_KINDS, "Workforce Parameters", "wf").render()


def render_demand_parameters_tab(manager) -> None:
    ParametersTab(manager, DEMAND_KINDS, "Demand Parameters", "dm").render()


def phase_caption(phase: LifecyclePhase) -> str:
    return {
        LifecyclePhase.BASELINE: "Viewing the baseline",
        LifecyclePhase.BASELINE_DIRTY: "Editing the baseline (unapplied changes)",
        LifecyclePhase.WORKING: "Viewing working changes (not saved as a scenario)",
        LifecyclePhase.WORKING_DIRTY: "Editing working changes (unapplied changes)",
        LifecyclePhase.SCENARIO: "Viewing a saved scenario",
        LifecyclePhase.SCENARIO_DIRTY: "Editing a saved scenario (unapplied changes)",
    }[phase]


__all__ = [
    "ParametersTab",
    "changed_cells",
    "format_change_key",
    "parameter_frame",
    "phase_caption",
    "projection_note",
    "render_demand_parameters_tab",
    "render_workforce_parameters_tab",
]
