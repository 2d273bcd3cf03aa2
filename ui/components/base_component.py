from __future__ import annotations

"""Base component class for the workforce planning dashboard.

All tabs inherit from `BaseComponent` and implement `render()`. Components
receive the `StateManager` (and any other collaborators they need) through
their constructor; they never hold parameter data themselves.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import streamlit as st

from workforce_model.ui_logic import StateManager


@dataclass
class BaseComponent:
    """Base class for all UI components.

    Attributes:
        manager: State manager holding the current `AppState`
    """

    manager: StateManager

    def render(self) -> None:
        """Draw the component's widgets. Subclasses must override."""
        raise NotImplementedError("Subclasses must implement render()")

    def report(self, outcome: Tuple[bool, Optional[str]], success: str = "") -> bool:
        """Surface a `(success, error)` outcome from the state manager."""
        ok, message = outcome
        if ok:
            if success:
                st.success(success)
        elif message:
            st.warning(message)
        return ok
