from __future__ import annotations

"""
Scenario snapshots and the Scenario Store.

A `Scenario` pairs a `ParameterStore` with the `ProjectionTable` computed from
it. Both are immutable, so a scenario is a plain value: it can be shared with
the editing session or the dashboard without any risk of being changed
through another reference.

The `ScenarioStore` is an insertion-ordered, immutable mapping of id ->
Scenario. `"baseline"` is never stored in it; `"working"` is stored only
while applied-but-unsaved edits exist.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional
import uuid

from .naming import BASELINE_ID, RESERVED_SCENARIO_IDS, UNNAMED_SCENARIO, WORKING_ID
from .parameters import ParameterStore
from .projection import ProjectionTable, project


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    parameters: ParameterStore
    projections: ProjectionTable
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    is_temporary: bool = False

    @classmethod
    def snapshot(
        cls,
        scenario_id: str,
        name: str,
        parameters: ParameterStore,
        *,
        description: str = "",
        is_temporary: bool = False,
        created_at: Optional[datetime] = None,
    ) -> "Scenario":
        """Capture `parameters` together with freshly computed projections."""
        return cls(
            id=scenario_id,
            name=name,
            parameters=parameters,
            projections=project(parameters),
            description=description,
            created_at=created_at or datetime.now(),
            is_temporary=is_temporary,
        )

    def with_parameters(self, parameters: ParameterStore) -> "Scenario":
        """Same id/name/metadata, new parameters and recomputed projections."""
        return replace(self, parameters=parameters, projections=project(parameters))

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by scenario files (projections are recomputed on load)."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
            "is_temporary": bool(self.is_temporary),
            "parameters": self.parameters.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        if not isinstance(data, Mapping):
            raise ValueError("Scenario data must be a mapping")
        if "parameters" not in data or not isinstance(data["parameters"], Mapping):
            raise ValueError("Scenario data must contain a 'parameters' mapping")
        scenario_id = str(data.get("id") or "").strip() or new_scenario_id(())
        created_raw = data.get("created_at")
        if isinstance(created_raw, datetime):
            created_at = created_raw
        elif created_raw:
            try:
                created_at = datetime.fromisoformat(str(created_raw))
            except ValueError as exc:
                raise ValueError(f"Invalid created_at timestamp: {created_raw!r}") from exc
        else:
            created_at = datetime.now()
        return cls.snapshot(
            scenario_id,
            str(data.get("name") or UNNAMED_SCENARIO),
            ParameterStore.from_dict(data["parameters"]),
            description=str(data.get("description") or ""),
            is_temporary=bool(data.get("is_temporary", False)),
            created_at=created_at,
        )


class ScenarioStore(Mapping[str, Scenario]):
    """Immutable, insertion-ordered mapping of scenario id -> Scenario."""

    __slots__ = ("_items",)

    def __init__(self, scenarios: Iterable[Scenario] = ()) -> None:
        items: Dict[str, Scenario] = {}
        for scenario in scenarios:
            if scenario.id == BASELINE_ID:
                raise ValueError("The 'baseline' id is reserved and cannot be stored as a scenario")
            items[scenario.id] = scenario
        self._items: Mapping[str, Scenario] = MappingProxyType(items)

    def __getitem__(self, scenario_id: str) -> Scenario:
        return self._items[scenario_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ScenarioStore({list(self._items)})"

    def with_scenario(self, scenario: Scenario) -> "ScenarioStore":
        """Add or replace (keeping its position) a scenario."""
        if scenario.id in self._items:
            return ScenarioStore(scenario if s.id == scenario.id else s for s in self._items.values())
        return ScenarioStore(list(self._items.values()) + [scenario])

    def without(self, scenario_id: str) -> "ScenarioStore":
        if scenario_id not in self._items:
            return self
        return ScenarioStore(s for s in self._items.values() if s.id != scenario_id)

    def without_working(self) -> "ScenarioStore":
        return self.without(WORKING_ID)

    def names(self) -> List[str]:
        return [s.name for s in self._items.values()]

    def saved(self) -> List[Scenario]:
        """Scenarios other than the temporary working one, in creation order."""
        return [s for s in self._items.values() if s.id != WORKING_ID]


def new_scenario_id(existing: Iterable[str]) -> str:
    """Return a short random id not present in `existing` nor reserved."""
    taken = set(existing) | set(RESERVED_SCENARIO_IDS)
    while True:
        candidate = f"scn-{uuid.uuid4().hex[:10]}"
        if candidate not in taken:
            return candidate


def unique_scenario_name(name: str, existing_names: Iterable[str]) -> str:
    """Suffix ` (2)`, ` (3)`, ... until `name` no longer collides.

    Blank names become "Unnamed Scenario" before the collision check.
    """
    base = (name or "").strip() or UNNAMED_SCENARIO
    taken = set(existing_names)
    if base not in taken:
        return base
    counter = 2
    while f"{base} ({counter})" in taken:
        counter += 1
    return f"{base} ({counter})"
