from __future__ import annotations

"""Centralized path utilities for the project.

Absolute `Path` objects for the directories the CLI, dashboard and
scenario persistence read from and write to.
"""

from pathlib import Path


# The `workforce_model` package sits one level below the project root
PROJECT_ROOT = Path(__file__).resolve().parents[1]

INPUTS_DIR = PROJECT_ROOT / "Inputs"
SCENARIOS_DIR = PROJECT_ROOT / "scenarios"
OUTPUT_DIR = PROJECT_ROOT / "output"
LOGS_DIR = PROJECT_ROOT / "logs"
