"""UI components package for the workforce planning dashboard.

Each tab defines a class inheriting from `BaseComponent` with a `render()`
method, plus a `render_*_tab` helper used by `ui/app.py`.
"""

from .base_component import BaseComponent  # re-export for convenience

__all__ = [
    "BaseComponent",
]
