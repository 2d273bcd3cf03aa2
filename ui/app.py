"""
Workforce Planning dashboard.

Streamlit front end over `StateManager`: parameter editing with forward
propagation, scenario lifecycle, projections and XLSX export.
"""

from pathlib import Path
import sys
import streamlit as st

# Ensure project root is on sys.path to enable workforce_model imports
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from workforce_model.io_paths import LOGS_DIR, SCENARIOS_DIR
from workforce_model.ui_logic import ScenarioManager, StateManager
from workforce_model.utils_logging import configure_logging
from ui.components.parameters_tab import (
    phase_caption,
    render_demand_parameters_tab,
    render_workforce_parameters_tab,
)
from ui.components.results_tab import render_results_tab
from ui.components.scenarios_tab import render_scenarios_tab
from ui.components.export_tab import render_export_tab


st.set_page_config(page_title="Workforce Planning", page_icon="🩺", layout="wide", initial_sidebar_state="collapsed")


def main() -> None:
    # Initialize state once per browser session
    if "state_manager" not in st.session_state:
        configure_logging(LOGS_DIR)
        st.session_state["state_manager"] = StateManager()
    manager: StateManager = st.session_state["state_manager"]
    scenario_manager = ScenarioManager(SCENARIOS_DIR, manager)

    state = manager.get_state()
    active = next((s["name"] for s in manager.list_scenarios() if s["id"] == state.active_id), state.active_id)

    st.title("🩺 Workforce Planning")
    st.caption(f"Active: {active} · {phase_caption(manager.phase())}")

    tabs = st.tabs([
        "Workforce Parameters",
        "Demand Parameters",
        "Projections",
        "Scenarios",
        "Export",
    ])

    with tabs[0]:
        render_workforce_parameters_tab(manager)
    with tabs[1]:
        render_demand_parameters_tab(manager)
    with tabs[2]:
        render_results_tab(manager)
    with tabs[3]:
        render_scenarios_tab(manager, scenario_manager)
    with tabs[4]:
        render_export_tab(manager)


if __name__ == "__main__":
    main()
