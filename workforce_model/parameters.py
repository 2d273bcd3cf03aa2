from __future__ import annotations

"""
Parameter Store: the canonical, immutable container of editable inputs.

Layout: parameter kind -> year -> category key -> float value.

Value semantics
- A `ParameterStore` can never be mutated after construction. Every nested
  level is exposed through a read-only mapping whose backing dict is private
  to the store, so handing the same store to the baseline, the editing
  session and any number of scenarios cannot leak an edit between them.
- `with_value(...)` returns a new store that shares every untouched branch
  with the original (structural sharing) and rebuilds only the touched kind
  and year levels.
- Plain nested dicts are produced on demand by `to_dict()` for persistence
  and export; they are always fresh copies.

All lookups used by the projection engine go through `lookup_or_default`,
which is the only place the missing-value policy lives.
"""

import math
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from .naming import PARAMETER_KINDS

FRAME_COLUMNS = ["Kind", "Year", "Category", "Value"]

YearMap = Mapping[str, float]
KindMap = Mapping[int, YearMap]


def _freeze_year(values: Mapping[str, object], where: str) -> YearMap:
    frozen: Dict[str, float] = {}
    for category, value in values.items():
        try:
            frozen[str(category)] = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Non-numeric value for {where}['{category}'] = {value!r}") from exc
    return MappingProxyType(frozen)


def _freeze_kind(years: Mapping[object, Mapping[str, object]], kind: str) -> KindMap:
    frozen: Dict[int, YearMap] = {}
    for year, values in years.items():
        try:
            y = int(year)  # type: ignore[call-overload]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid year {year!r} for parameter kind '{kind}'") from exc
        if not isinstance(values, Mapping):
            raise ValueError(f"Parameters for {kind}[{y}] must be a mapping of category -> value")
        frozen[y] = _freeze_year(values, f"{kind}[{y}]")
    return MappingProxyType(frozen)


class ParameterStore(Mapping[str, KindMap]):
    """Immutable nested mapping of kind -> year -> category -> value."""

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Mapping[object, Mapping[str, object]]]] = None) -> None:
        frozen: Dict[str, KindMap] = {}
        for kind, years in (data or {}).items():
            if not isinstance(years, Mapping):
                raise ValueError(f"Parameters for kind '{kind}' must be a mapping of year -> values")
            frozen[str(kind)] = _freeze_kind(years, str(kind))
        self._data: Mapping[str, KindMap] = MappingProxyType(frozen)

    @classmethod
    def _from_frozen(cls, frozen: Dict[str, KindMap]) -> "ParameterStore":
        # Internal constructor: branches are already read-only and may be shared.
        store = cls.__new__(cls)
        store._data = MappingProxyType(frozen)
        return store

    # ----- Mapping protocol -----
    def __getitem__(self, kind: str) -> KindMap:
        return self._data[kind]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        cells = sum(len(v) for years in self._data.values() for v in years.values())
        return f"ParameterStore(kinds={len(self._data)}, cells={cells})"

    # ----- Accessors -----
    def get_value(self, kind: str, year: int, category: str) -> Optional[float]:
        """Return the stored value or None when the triple is absent."""
        return self._data.get(kind, {}).get(int(year), {}).get(category)

    def years_for(self, kind: str) -> List[int]:
        return sorted(self._data.get(kind, {}).keys())

    def categories(self, kind: str, year: int) -> List[str]:
        return list(self._data.get(kind, {}).get(int(year), {}).keys())

    # ----- Functional updates -----
    def with_value(self, kind: str, year: int, category: str, value: float) -> "ParameterStore":
        """Return a new store with one cell replaced; this store is unchanged."""
        return self.with_values([(kind, year, category, value)])

    def with_values(self, updates: Iterable[Tuple[str, int, str, float]]) -> "ParameterStore":
        """Return a new store with several cells replaced in one pass."""
        kinds: Dict[str, Dict[int, Dict[str, float]]] = {}
        for kind, year, category, value in updates:
            y = int(year)
            by_year = kinds.setdefault(kind, {})
            if y not in by_year:
                by_year[y] = dict(self._data.get(kind, {}).get(y, {}))
            by_year[y][str(category)] = float(value)

        if not kinds:
            return self

        frozen: Dict[str, KindMap] = dict(self._data)
        for kind, touched_years in kinds.items():
            years: Dict[int, YearMap] = dict(self._data.get(kind, {}))
            for y, values in touched_years.items():
                years[y] = MappingProxyType(values)
            frozen[kind] = MappingProxyType(years)
        return ParameterStore._from_frozen(frozen)

    # ----- Conversions -----
    def to_dict(self) -> Dict[str, Dict[int, Dict[str, float]]]:
        """Return a fresh plain nested dict; callers may mutate it freely."""
        return {
            kind: {year: dict(values) for year, values in years.items()}
            for kind, years in self._data.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[object, Mapping[str, object]]]) -> "ParameterStore":
        """Build a store from plain nested dicts (e.g. parsed YAML/JSON).

        Year keys may be strings; values are coerced to float. Raises
        ValueError on non-numeric values.
        """
        return cls(data)

    def to_frame(self) -> pd.DataFrame:
        """Long DataFrame with columns [Kind, Year, Category, Value] in canonical kind order."""
        order = {kind: idx for idx, kind in enumerate(PARAMETER_KINDS)}
        rows = [
            {"Kind": kind, "Year": year, "Category": category, "Value": value}
            for kind in sorted(self._data, key=lambda k: order.get(k, len(order)))
            for year in sorted(self._data[kind])
            for category, value in self._data[kind][year].items()
        ]
        return pd.DataFrame(rows, columns=FRAME_COLUMNS)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "ParameterStore":
        missing = [c for c in FRAME_COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"Parameter frame missing required columns: {missing}")
        data: Dict[str, Dict[int, Dict[str, object]]] = {}
        for row in frame.itertuples(index=False):
            data.setdefault(str(row.Kind), {}).setdefault(int(row.Year), {})[str(row.Category)] = row.Value
        return cls(data)


def lookup_or_default(
    store: Optional[Mapping[str, Mapping[int, Mapping[str, float]]]],
    kind: str,
    year: int,
    category: str,
    fallback: float = 0.0,
) -> float:
    """Return `store[kind][year][category]` or `fallback` when any level is missing.

    NaN values count as missing. This accessor is the single place where the
    missing-data policy of the engine and the propagation rules is decided.
    """
    if store is None:
        return float(fallback)
    value = store.get(kind, {}).get(int(year), {}).get(category)
    if value is None:
        return float(fallback)
    value = float(value)
    if math.isnan(value):
        return float(fallback)
    return value
