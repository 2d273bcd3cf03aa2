from __future__ import annotations

import streamlit as st
import pandas as pd
import plotly.express as px

from .base_component import BaseComponent
from workforce_model.analysis import (
    ALL_OCCUPATIONS,
    compare_to_baseline,
    filter_occupations,
    insights,
    toggle_occupation,
    year_over_year,
)
from workforce_model.naming import BASELINE_ID, OCCUPATIONS, YEARS
from workforce_model.projection import ProjectionTable


def totals_long(table: ProjectionTable) -> pd.DataFrame:
    """Year/Series/FTE rows for the total supply and demand lines."""
    totals = table.totals()
    return totals.melt(
        id_vars="Year",
        value_vars=["Total Supply", "Total Demand"],
        var_name="Series",
        value_name="FTE",
    )


OCCUPATION_FILTER_KEY = "results_occupations"


def _on_occupations_change() -> None:
    # Replay each added or removed pick through the toggle rules
    previous = st.session_state.get(f"{OCCUPATION_FILTER_KEY}_prev", [ALL_OCCUPATIONS])
    current = st.session_state[OCCUPATION_FILTER_KEY]
    selection = list(previous)
    for occ in [o for o in current if o not in previous] + [o for o in previous if o not in current]:
        selection = toggle_occupation(selection, occ)
    st.session_state[OCCUPATION_FILTER_KEY] = selection
    st.session_state[f"{OCCUPATION_FILTER_KEY}_prev"] = selection


class ResultsTab(BaseComponent):
    """Projected supply, demand and gap for the active scenario.

    With unapplied edits the tab shows the live preview of the editing store
    next to the applied projections. The occupation filter narrows every
    panel below the totals chart.
    """

    def render(self) -> None:
        st.header("Projections")
        state = self.manager.get_state()

        applied = self.manager.current_projections()
        table = applied
        if state.dirty:
            preview = st.toggle("Preview unapplied changes", value=True, key="results_preview")
            if preview:
                table = self.manager.editing_projections()
                st.caption("Preview of unapplied changes; apply them to keep the result.")

        fig = px.line(totals_long(table), x="Year", y="FTE", color="Series", markers=True, title="Total Supply vs Demand")
        st.plotly_chart(fig, use_container_width=True)

        st.session_state.setdefault(OCCUPATION_FILTER_KEY, [ALL_OCCUPATIONS])
        selected = st.multiselect(
            "Occupations",
            options=[ALL_OCCUPATIONS] + list(OCCUPATIONS),
            key=OCCUPATION_FILTER_KEY,
            on_change=_on_occupations_change,
        )
        occupations = filter_occupations(selected)
        frame = table.to_frame()
        subset = frame[frame["Occupation"].isin(occupations)]

        gap_fig = px.line(subset, x="Year", y="Gap", color="Occupation", markers=True, title="Gap (Demand - Supply)")
        st.plotly_chart(gap_fig, use_container_width=True)

        self._render_insights(table, occupations)
        self._render_year_over_year(table, occupations)
        if state.active_id != BASELINE_ID or state.dirty:
            self._render_comparison(table, state.baseline_projections, occupations)

        st.subheader("Projection table")
        st.dataframe(subset, hide_index=True, use_container_width=True)

    def _render_insights(self, table: ProjectionTable, occupations: list[str]) -> None:
        st.subheader("Workforce insights")
        found = insights(table, occupations)
        if not found:
            st.write("No critical insights for selected occupations.")
        for insight in found:
            if insight.level == "critical":
                st.error(insight.message)
            else:
                st.warning(insight.message)

    def _render_year_over_year(self, table: ProjectionTable, occupations: list[str]) -> None:
        st.subheader("Year-over-year gap")
        year = st.select_slider("Year", options=list(YEARS), value=YEARS[len(YEARS) // 2], key="results_yoy_year")
        st.dataframe(year_over_year(table, year, occupations), hide_index=True, use_container_width=True)

    def _render_comparison(self, table: ProjectionTable, baseline: ProjectionTable, occupations: list[str]) -> None:
        st.subheader("Compared with baseline")
        comparison = compare_to_baseline(table, baseline, occupations)
        gap_change = comparison.groupby("Year", as_index=False)["Gap Change"].sum()
        st.plotly_chart(
            px.bar(gap_change, x="Year", y="Gap Change", title="Gap change vs baseline (negative = smaller shortage)"),
            use_container_width=True,
        )
        with st.expander("Details"):
            st.dataframe(comparison, hide_index=True, use_container_width=True)


def render_results_tab(manager) -> None:
    ResultsTab(manager).render()
