"""
Framework-agnostic scenario persistence for the workforce planning dashboard.

This module saves scenario snapshots to YAML/JSON files and loads them back
into the `StateManager`. Files hold parameters only; projections are always
recomputed on load so a file can never carry numbers that disagree with its
parameters.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any
import logging
import yaml
import json

from ..errors import ScenarioNotFoundError
from ..naming import BASELINE_ID, PARAMETER_KINDS, YEARS, safe_filename
from ..scenarios import Scenario
from .state_manager import StateManager, resolve_scenario

logger = logging.getLogger(__name__)

SCENARIO_SUFFIXES = (".yaml", ".yml", ".json")


class ScenarioManager:
    """
    Framework-agnostic scenario file management.

    This class handles:
    - Saving the baseline or any stored scenario to a YAML/JSON file
    - Loading scenario files and adding them to the state
    - Scenario file validation
    - Listing, summarizing and deleting scenario files
    """

    def __init__(self, scenarios_dir: Path, state_manager: StateManager):
        """Initialize the scenario manager.

        Args:
            scenarios_dir: Directory containing scenario files
            state_manager: State manager holding the scenarios to persist
        """
        self.scenarios_dir = Path(scenarios_dir)
        self.state_manager = state_manager
        self.scenarios_dir.mkdir(parents=True, exist_ok=True)

    def list_available_scenarios(self) -> List[Path]:
        """List all scenario files in the scenarios directory, sorted."""
        scenario_files: List[Path] = []
        for suffix in SCENARIO_SUFFIXES:
            scenario_files.extend(self.scenarios_dir.glob(f"*{suffix}"))
        return sorted(scenario_files)

    def _find_file(self, name: str) -> Optional[Path]:
        candidate = self.scenarios_dir / name
        if candidate.suffix.lower() in SCENARIO_SUFFIXES and candidate.exists():
            return candidate
        for ext in SCENARIO_SUFFIXES:
            file_path = self.scenarios_dir / f"{name}{ext}"
            if file_path.exists():
                return file_path
        return None

    def _read_file(self, file_path: Path) -> Dict[str, Any]:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("Invalid scenario file: root must be a dictionary")
        return data

    def load_scenario(self, name: str) -> Tuple[bool, Optional[str], Optional[Scenario]]:
        """Load and validate a scenario file by name (with or without extension).

        Returns:
            Tuple of (success, error_message, scenario)
        """
        file_path = self._find_file(name)
        if file_path is None:
            return False, f"Scenario '{name}' not found", None
        try:
            data = self._read_file(file_path)
            valid, error = self.validate_scenario_data(data)
            if not valid:
                return False, f"Invalid scenario file {file_path.name}: {error}", None
            return True, None, Scenario.from_dict(data)
        except yaml.YAMLError as e:
            error_msg = f"YAML parsing error in {file_path}: {e}"
        except json.JSONDecodeError as e:
            error_msg = f"JSON parsing error in {file_path}: {e}"
        except (OSError, ValueError) as e:
            error_msg = f"Error reading {file_path}: {e}"
        logger.error(error_msg)
        return False, error_msg, None

    def save_scenario(
        self,
        scenario_id: str,
        filename: Optional[str] = None,
        overwrite: bool = False,
    ) -> Tuple[bool, Optional[str], Optional[Path]]:
        """Save the baseline or a stored scenario to a file.

        Args:
            scenario_id: "baseline" or an id present in the scenario store
            filename: Target file name; defaults to the sanitized scenario name
            overwrite: Whether to overwrite existing files

        Returns:
            Tuple of (success, error_message, file_path)
        """
        state = self.state_manager.get_state()
        try:
            name, parameters, _ = resolve_scenario(state, scenario_id)
        except ScenarioNotFoundError as e:
            return False, str(e), None

        scenario = state.scenarios.get(scenario_id)
        if scenario is not None:
            payload = scenario.to_dict()
        else:
            payload = {
                "id": BASELINE_ID,
                "name": name,
                "description": "",
                "is_temporary": False,
                "parameters": parameters.to_dict(),
            }

        filename = filename or safe_filename(name)
        if not filename.endswith(SCENARIO_SUFFIXES):
            filename = f"{filename}.yaml"
        file_path = self.scenarios_dir / filename

        if file_path.exists() and not overwrite:
            return False, f"File {filename} already exists. Use overwrite=True to overwrite.", None

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if file_path.suffix.lower() in (".yaml", ".yml"):
                    yaml.safe_dump(payload, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
                else:
                    json.dump(payload, f, indent=2, sort_keys=False)
        except OSError as e:
            error_msg = f"Error saving scenario to {filename}: {e}"
            logger.error(error_msg)
            return False, error_msg, None

        logger.info(f"Scenario '{name}' saved to {file_path}")
        return True, None, file_path

    def load_scenario_into_state(self, name: str, activate: bool = True) -> Tuple[bool, Optional[str]]:
        """Load a scenario file and add it to the state manager's store."""
        success, error, scenario = self.load_scenario(name)
        if not success or scenario is None:
            return False, error
        ok, error = self.state_manager.add_scenario(scenario, activate=activate)
        if ok:
            logger.info(f"Loaded scenario '{name}' into state")
        return ok, error

    def delete_scenario_file(self, name: str) -> Tuple[bool, Optional[str]]:
        """Delete a scenario file by name."""
        file_path = self._find_file(name)
        if file_path is None:
            return False, f"Scenario '{name}' not found"
        try:
            file_path.unlink()
        except OSError as e:
            error_msg = f"Error deleting scenario '{name}': {e}"
            logger.error(error_msg)
            return False, error_msg
        logger.info(f"Deleted scenario {file_path}")
        return True, None

    def validate_scenario_data(self, scenario_data: Dict) -> Tuple[bool, Optional[str]]:
        """Validate the structure of a scenario dictionary.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(scenario_data, dict):
            return False, "Scenario data must be a dictionary"

        if "name" in scenario_data and not isinstance(scenario_data["name"], str):
            return False, "Scenario name must be a string"

        parameters = scenario_data.get("parameters")
        if not isinstance(parameters, dict):
            return False, "Scenario must have a 'parameters' dictionary"

        for kind, years in parameters.items():
            if kind not in PARAMETER_KINDS:
                return False, f"Unknown parameter kind '{kind}'"
            if not isinstance(years, dict):
                return False, f"Parameters for '{kind}' must be a dictionary of year -> values"
            for year, values in years.items():
                try:
                    y = int(year)
                except (ValueError, TypeError):
                    return False, f"Year '{year}' for '{kind}' must be an integer"
                if y not in YEARS:
                    return False, f"Year {y} for '{kind}' is outside {YEARS[0]}-{YEARS[-1]}"
                if not isinstance(values, dict):
                    return False, f"Values for {kind}[{y}] must be a dictionary"
                for category, value in values.items():
                    try:
                        float(value)
                    except (ValueError, TypeError):
                        return False, f"Value for {kind}[{y}]['{category}'] must be a number"

        return True, None

    def get_scenario_summary(self) -> Dict[str, Any]:
        """Summarize all scenario files without loading them into state."""
        summary: Dict[str, Any] = {"total_scenarios": 0, "scenarios": []}
        for scenario_path in self.list_available_scenarios():
            success, error, scenario = self.load_scenario(scenario_path.name)
            if not success or scenario is None:
                logger.warning(f"Skipping scenario file {scenario_path.name}: {error}")
                continue
            summary["scenarios"].append(
                {
                    "name": scenario.name,
                    "path": str(scenario_path),
                    "description": scenario.description,
                    "created_at": scenario.created_at.isoformat(),
                    "parameter_kinds": len(scenario.parameters),
                }
            )
        summary["total_scenarios"] = len(summary["scenarios"])
        return summary
