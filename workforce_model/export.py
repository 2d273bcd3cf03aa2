from __future__ import annotations

"""
Spreadsheet export of a scenario (or the baseline).

The workbook holds:
- `Summary`: Year, Total Supply, Total Demand, Total Gap
- `Projections`: Year, Occupation, Supply, Demand, Gap
- one sheet per workforce parameter kind: Year x occupation matrix
- `Demand Parameters`: Year, Parameter, Category, Value

Building the frames is a pure read over `AppState`; writing uses
`pandas.ExcelWriter` with the openpyxl engine. Nothing here mutates a store.
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Union

import logging
import pandas as pd

from .io_paths import OUTPUT_DIR
from .naming import DEMAND_KINDS, OCCUPATIONS, WORKFORCE_KINDS, YEARS, parameter_label, safe_filename
from .parameters import ParameterStore, lookup_or_default
from .ui_logic.state_manager import AppState, resolve_scenario

log = logging.getLogger(__name__)

# Excel caps sheet names at 31 characters
MAX_SHEET_NAME = 31


def _workforce_sheet(parameters: ParameterStore, kind: str) -> pd.DataFrame:
    rows = []
    for year in YEARS:
        row: Dict[str, object] = {"Year": year}
        for occ in OCCUPATIONS:
            row[occ] = lookup_or_default(parameters, kind, year, occ, 0.0)
        rows.append(row)
    return pd.DataFrame(rows, columns=["Year", *OCCUPATIONS])


def _demand_sheet(parameters: ParameterStore) -> pd.DataFrame:
    rows = []
    for year in YEARS:
        for kind in DEMAND_KINDS:
            for category, value in parameters.get(kind, {}).get(year, {}).items():
                rows.append({"Year": year, "Parameter": parameter_label(kind), "Category": category, "Value": value})
    return pd.DataFrame(rows, columns=["Year", "Parameter", "Category", "Value"])


def build_export_frames(state: AppState, scenario_id: str) -> Dict[str, pd.DataFrame]:
    """Return sheet name -> DataFrame for `scenario_id` in workbook order.

    Raises ScenarioNotFoundError for unknown ids.
    """
    _, parameters, projections = resolve_scenario(state, scenario_id)
    frames: Dict[str, pd.DataFrame] = {
        "Summary": projections.totals(),
        "Projections": projections.to_frame(),
    }
    for kind in WORKFORCE_KINDS:
        frames[parameter_label(kind)[:MAX_SHEET_NAME]] = _workforce_sheet(parameters, kind)
    frames["Demand Parameters"] = _demand_sheet(parameters)
    return frames


def export_filename(name: str, on: Optional[date] = None) -> str:
    """`<Name>_Export_<YYYY-MM-DD>.xlsx` with non-alphanumerics replaced."""
    on = on or date.today()
    return f"{safe_filename(name)}_Export_{on.isoformat()}.xlsx"


def write_workbook(frames: Dict[str, pd.DataFrame], target: Union[Path, BytesIO]) -> None:
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, index=False, sheet_name=sheet_name)


def export_scenario_to_excel(
    state: AppState,
    scenario_id: str,
    path: Optional[Union[Path, str]] = None,
    output_dir: Path = OUTPUT_DIR,
) -> Path:
    """Write the scenario workbook and return its path.

    When `path` is omitted the file is written to `output_dir` using
    `export_filename`.
    """
    name, _, _ = resolve_scenario(state, scenario_id)
    frames = build_export_frames(state, scenario_id)
    if path is None:
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / export_filename(name)
    else:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
    write_workbook(frames, target)
    log.info("Exported scenario '%s' (%s) to %s", name, scenario_id, target)
    return target


def export_scenario_bytes(state: AppState, scenario_id: str) -> bytes:
    """Workbook as bytes, for download buttons."""
    buf = BytesIO()
    write_workbook(build_export_frames(state, scenario_id), buf)
    return buf.getvalue()
