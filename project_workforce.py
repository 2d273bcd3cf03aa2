#!/usr/bin/env python3
from __future__ import annotations

"""
Command-line runner for the workforce projection engine.

Responsibilities:
- Configure logging to both console and `logs/run.log`
- Build the baseline (built-in constants, or `--population-csv`)
- Optionally load a saved scenario file (`--scenario` path or `--preset` name)
- Optionally apply parameter edits (`--edit KIND:YEAR:CATEGORY=VALUE`) with
  the same propagation rules as the dashboard, then apply them
- Validate the resulting projection table (gap identity, non-negativity,
  completeness)

Outputs:
- Projections CSV (`output/workforce_projections.csv` by default)
- Optional XLSX workbook of the active scenario (`--export-xlsx`)
- Optional PNG plots under `output/plots/` (`--visualize`)
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from workforce_model.io_paths import INPUTS_DIR, LOGS_DIR, OUTPUT_DIR, SCENARIOS_DIR
from workforce_model.naming import YEARS, OCCUPATIONS
from workforce_model.ui_logic import ScenarioManager, StateManager
from workforce_model.utils_logging import configure_logging
from workforce_model.validation import validate_projection_table

DEFAULT_OUTPUT_CSV = OUTPUT_DIR / "workforce_projections.csv"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for the runner.

    At most one of `--scenario` or `--preset` may be provided; without
    either, the baseline is projected.
    """
    p = argparse.ArgumentParser(description="Workforce Planning – Supply/Demand Projection Runner")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--scenario", type=str, help="Path to a scenario YAML/JSON file")
    group.add_argument(
        "--preset",
        type=str,
        help="Scenario preset name (resolves to a file under 'scenarios/')",
    )
    p.add_argument("--population-csv", type=str, help="Population CSV (Year,Gender,Age_Group,Projected_Population) to derive the baseline from")
    p.add_argument(
        "--edit",
        action="append",
        default=[],
        metavar="KIND:YEAR:CATEGORY=VALUE",
        help="Parameter edit applied with forward propagation, e.g. 'retirementRate:2024:Physicians=0.10'. Repeatable.",
    )
    p.add_argument("--output", type=str, help=f"Projections CSV path (default: {DEFAULT_OUTPUT_CSV})")
    p.add_argument("--export-xlsx", type=str, nargs="?", const="", help="Export the active scenario workbook (optional path)")
    p.add_argument(
        "--visualize",
        action="store_true",
        help="Generate plots from the produced CSV and save under output/plots/",
    )
    p.add_argument("--debug", action="store_true")
    return p.parse_args(argv)


def _resolve_scenario_path(scenario: str | None, preset: str | None) -> Path | None:
    """Resolve the scenario file path from either an explicit path or a preset name."""
    if scenario:
        return Path(scenario)
    if preset:
        for ext in (".yaml", ".yml", ".json"):
            path = SCENARIOS_DIR / f"{preset}{ext}"
            if path.exists():
                return path
        available = sorted(p.stem for p in SCENARIOS_DIR.glob("*.y*ml")) + sorted(p.stem for p in SCENARIOS_DIR.glob("*.json"))
        raise FileNotFoundError(
            f"Preset '{preset}' not found under {SCENARIOS_DIR}. Available presets: {', '.join(available) or '(none)'}"
        )
    return None


def _resolve_population_path(name: str) -> Path:
    """Explicit paths win; bare file names are also looked up under `Inputs/`."""
    path = Path(name)
    if not path.exists() and (INPUTS_DIR / path).exists():
        return INPUTS_DIR / path
    return path


def parse_edit(text: str) -> Tuple[str, int, str, str]:
    """Split `KIND:YEAR:CATEGORY=VALUE` into its parts.

    The category may itself contain colons; only the first two are separators.
    """
    if "=" not in text:
        raise ValueError(f"Edit '{text}' must look like KIND:YEAR:CATEGORY=VALUE")
    target, value = text.rsplit("=", 1)
    parts = target.split(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Edit '{text}' must look like KIND:YEAR:CATEGORY=VALUE")
    kind, year, category = (part.strip() for part in parts)
    try:
        year_int = int(year)
    except ValueError as exc:
        raise ValueError(f"Edit '{text}' has a non-integer year '{year}'") from exc
    return kind, year_int, category, value.strip()


def run(args: argparse.Namespace, log: logging.Logger) -> Path:
    """Execute one projection run and return the CSV path."""
    manager = StateManager()

    if args.population_csv:
        population_csv = _resolve_population_path(args.population_csv)
        ok, error = manager.import_population_csv(population_csv)
        if not ok:
            raise ValueError(error)
        log.info("Baseline derived from population data in %s", population_csv)

    scenario_path = _resolve_scenario_path(args.scenario, args.preset)
    if scenario_path is not None:
        scenarios = ScenarioManager(scenario_path.parent, manager)
        ok, error = scenarios.load_scenario_into_state(scenario_path.name, activate=True)
        if not ok:
            raise ValueError(error)
        log.info("Loaded scenario from %s", scenario_path)

    if args.edit:
        for edit_text in args.edit:
            kind, year, category, value = parse_edit(edit_text)
            ok, error = manager.edit_parameter(kind, year, category, value)
            if not ok:
                raise ValueError(error)
        for key in manager.inert_changes():
            log.warning("Edit %s is stored but does not change the projections", key)
        ok, error = manager.apply_changes()
        if not ok:
            raise ValueError(error)
        log.info("Applied %d edit(s)", len(args.edit))

    state = manager.get_state()
    projections = manager.current_projections()
    validate_projection_table(projections, years=YEARS, occupations=OCCUPATIONS, log=log)

    output_csv = Path(args.output) if args.output else DEFAULT_OUTPUT_CSV
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    projections.to_frame().to_csv(output_csv, index=False)
    log.info("Projections for '%s' written to %s", state.active_id, output_csv)

    totals = projections.totals()
    for row in totals.itertuples(index=False):
        log.info("%d: supply %d, demand %d, gap %d", row[0], row[1], row[2], row[3])

    if args.export_xlsx is not None:
        from workforce_model.export import export_scenario_to_excel

        xlsx_path = export_scenario_to_excel(state, state.active_id, path=args.export_xlsx or None)
        log.info("Workbook written to %s", xlsx_path)

    return output_csv


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(LOGS_DIR, debug=args.debug)
    log = logging.getLogger("runner")

    try:
        output_csv = run(args, log)
    except (ValueError, FileNotFoundError) as e:
        log.error("Projection run failed: %s", e)
        return 2

    if args.visualize:
        from viz.plots import generate_all_plots_from_csv

        paths = generate_all_plots_from_csv(output_csv)
        log.info("Visualization complete: %d plots saved under %s", len(paths), paths[0].parent if paths else "-")

    print("OK: workforce projection completed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
