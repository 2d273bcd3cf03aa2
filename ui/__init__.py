"""UI package for the Workforce Planning Streamlit dashboard.

Having this file ensures `ui` is treated as a proper Python package in
all execution contexts (Streamlit, pytest, CLI), so `ui.*` modules can be
imported from within `ui/app.py`.
"""
