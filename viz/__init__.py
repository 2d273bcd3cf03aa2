"""Plotting helpers for projection outputs."""
