"""
Framework-agnostic application logic for the workforce planning dashboard.

Core principles:
- No UI framework imports or dependencies
- One immutable application state, changed only through pure reducers
- Errors reported to the UI as (success, error_message) tuples
"""

from .state_manager import AppState, LifecyclePhase, StateManager
from .scenario_manager import ScenarioManager

__all__ = [
    "AppState",
    "LifecyclePhase",
    "StateManager",
    "ScenarioManager",
]
