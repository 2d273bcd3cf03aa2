from __future__ import annotations

import streamlit as st
import pandas as pd

from .base_component import BaseComponent
from workforce_model.naming import BASELINE_ID
from workforce_model.ui_logic import ScenarioManager


class ScenariosTab(BaseComponent):
    """Scenario lifecycle: create, switch, delete, save/load files and
    rebuild the baseline from population data."""

    def __init__(self, manager, scenario_manager: ScenarioManager) -> None:
        super().__init__(manager)
        self.scenario_manager = scenario_manager

    def render(self) -> None:
        st.header("Scenarios")
        self._render_selector()
        st.divider()
        self._render_create()
        st.divider()
        self._render_files()
        st.divider()
        self._render_population_import()

    def _render_selector(self) -> None:
        state = self.manager.get_state()
        listing = self.manager.list_scenarios()
        ids = [entry["id"] for entry in listing]
        labels = {entry["id"]: str(entry["name"]) for entry in listing}
        index = ids.index(state.active_id) if state.active_id in ids else 0

        selected = st.selectbox("Active scenario", options=ids, index=index, format_func=lambda i: labels[i], key="scn_select")
        confirm = False
        if state.dirty:
            confirm = st.checkbox("Discard unapplied changes when switching", value=False, key="scn_confirm_discard")
        if selected != state.active_id:
            if st.button("Switch", key="scn_switch"):
                if self.report(self.manager.select_scenario(selected, confirm_discard=confirm)):
                    st.rerun()

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Load baseline", key="scn_load_baseline"):
                if self.report(self.manager.load_baseline()):
                    st.rerun()
        with col2:
            deletable = state.active_id != BASELINE_ID
            if st.button("Delete active scenario", key="scn_delete", disabled=not deletable):
                if self.report(self.manager.delete_scenario(state.active_id)):
                    st.rerun()

    def _render_create(self) -> None:
        st.subheader("Save as scenario")
        name = st.text_input("Name", value="", key="scn_new_name")
        description = st.text_area("Description", value="", key="scn_new_desc")
        if st.button("Create scenario", key="scn_create"):
            if self.report(self.manager.create_scenario(name, description), "Scenario created."):
                st.rerun()

    def _render_files(self) -> None:
        st.subheader("Scenario files")
        state = self.manager.get_state()
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Save active scenario to file", key="scn_save_file"):
                ok, error, path = self.scenario_manager.save_scenario(state.active_id, overwrite=True)
                if ok:
                    st.success(f"Saved to {path}")
                else:
                    st.warning(error)
        with col2:
            files = [p.name for p in self.scenario_manager.list_available_scenarios()]
            if files:
                chosen = st.selectbox("Scenario file", options=files, key="scn_file_choice")
                if st.button("Load file", key="scn_load_file"):
                    if self.report(self.scenario_manager.load_scenario_into_state(chosen, activate=True), "Scenario loaded."):
                        st.rerun()
            else:
                st.info(f"No scenario files in {self.scenario_manager.scenarios_dir}")

    def _render_population_import(self) -> None:
        st.subheader("Population data")
        st.caption("CSV columns: Year, Gender, Age_Group, Projected_Population. Replaces the baseline.")
        upload = st.file_uploader("Population CSV", type=["csv"], key="scn_population_csv")
        if upload is not None and st.button("Import population data", key="scn_import_population"):
            try:
                frame = pd.read_csv(upload)
            except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
                st.error(f"Could not parse population CSV: {e}")
                return
            if self.report(self.manager.import_population(frame), "Baseline regenerated from population data."):
                st.rerun()


def render_scenarios_tab(manager, scenario_manager: ScenarioManager) -> None:
    ScenariosTab(manager, scenario_manager).render()
