"""
Pytest configuration for ensuring the project root is on sys.path.

This allows test modules to import the in-repo package layout like:
    from workforce_model.projection import project

Without relying on external environment variables.
"""

import os
import sys

import pytest

# Insert the repository root (one directory up from tests/) at the
# beginning of sys.path to prioritize local modules over site-packages.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture
def baseline():
    from workforce_model.baseline import generate_baseline

    return generate_baseline()


@pytest.fixture
def population_rows():
    """Two years of population data: every age group grows 2%."""
    rows = []
    for year, factor in ((2024, 1.0), (2025, 1.02)):
        for group, total in (("0-18", 100000), ("19-64", 300000), ("65-84", 80000), ("85+", 20000)):
            rows.append({"Year": year, "Gender": "Male", "Age_Group": group, "Projected_Population": total * 0.5 * factor})
            rows.append({"Year": year, "Gender": "Female", "Age_Group": group, "Projected_Population": total * 0.5 * factor})
    return rows


@pytest.fixture
def full_horizon_population_rows():
    """Population for every year 2024-2034, each age group growing 2% a year."""
    rows = []
    for offset in range(11):
        factor = 1.02 ** offset
        for group, total in (("0-18", 100000), ("19-64", 300000), ("65-84", 80000), ("85+", 20000)):
            for gender in ("Male", "Female"):
                rows.append(
                    {
                        "Year": 2024 + offset,
                        "Gender": gender,
                        "Age_Group": group,
                        "Projected_Population": total * 0.5 * factor,
                    }
                )
    return rows
