from __future__ import annotations

from typing import Callable, MutableMapping, Optional

import streamlit as st

from .base_component import BaseComponent
from workforce_model.errors import ScenarioNotFoundError
from workforce_model.export import build_export_frames, export_filename, export_scenario_bytes

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_CACHE_KEY = "export_cache"


def cached_export_bytes(
    cache: MutableMapping,
    state,
    scenario_id: str,
    build: Optional[Callable] = None,
) -> bytes:
    """Workbook bytes for (scenario_id, state), built at most once per state.

    States are immutable and replaced on every transition, so the state
    object itself identifies the content. Only the latest workbook is kept.
    """
    payload = cached_payload(cache, state, scenario_id)
    if payload is None:
        payload = (build or export_scenario_bytes)(state, scenario_id)
        cache[EXPORT_CACHE_KEY] = (scenario_id, state, payload)
    return payload


def cached_payload(cache: MutableMapping, state, scenario_id: str) -> Optional[bytes]:
    """Previously built bytes for (scenario_id, state), else None."""
    entry = cache.get(EXPORT_CACHE_KEY)
    if entry is not None and entry[0] == scenario_id and entry[1] is state:
        return entry[2]
    return None


class ExportTab(BaseComponent):
    """Download any scenario (or the baseline) as an XLSX workbook.

    The workbook is only written when the user asks for it.
    """

    def render(self) -> None:
        st.header("Export")
        state = self.manager.get_state()
        listing = self.manager.list_scenarios()
        ids = [entry["id"] for entry in listing]
        labels = {entry["id"]: str(entry["name"]) for entry in listing}
        index = ids.index(state.active_id) if state.active_id in ids else 0
        scenario_id = st.selectbox("Scenario", options=ids, index=index, format_func=lambda i: labels[i], key="export_choice")

        try:
            frames = build_export_frames(state, scenario_id)
        except ScenarioNotFoundError as e:
            st.warning(str(e))
            return

        st.caption("Sheets: " + ", ".join(frames))
        payload = cached_payload(st.session_state, state, scenario_id)
        if payload is None and st.button("Prepare XLSX", key="export_prepare"):
            payload = cached_export_bytes(st.session_state, state, scenario_id)
        if payload is not None:
            st.download_button(
                "Download XLSX",
                data=payload,
                file_name=export_filename(labels[scenario_id]),
                mime=XLSX_MIME,
                key="export_download",
            )
        with st.expander("Summary"):
            st.dataframe(frames["Summary"], hide_index=True, use_container_width=True)


def render_export_tab(manager) -> None:
    ExportTab(manager).render()
