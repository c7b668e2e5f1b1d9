"""In-memory record source.

Evaluates the same filters as the HTTP source over lists of dicts. Useful
for tests, examples and offline analysis of exported rows.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any, Optional

import pandas as pd

from salon_metrics.config import DEFAULT_TIMEZONE
from salon_metrics.exceptions import FetchFailure
from salon_metrics.source.base import RecordSource
from salon_metrics.window import to_timestamp


def _comparable(value: Any, tz: str = DEFAULT_TIMEZONE) -> Any:
    """Make timestamps (ISO strings or datetimes) comparable chronologically.

    Naive values are wall-clock times in tz, as in the normalized frames.
    """
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return value
    return to_timestamp(ts, tz)


class InMemoryRecordSource(RecordSource):
    """Record source over in-memory tables.

    Args:
        tables: Table name to list of row dicts.
        functions: Remote function name to a callable taking the params dict.
        tz: Timezone for naive timestamps in range filters.

    Example:
        >>> source = InMemoryRecordSource({"services": [{"id": "s1", "name": "Corte"}]})
        >>> source.select("services", eq={"id": "s1"})
        [{'id': 's1', 'name': 'Corte'}]
    """

    def __init__(
        self,
        tables: Optional[Mapping[str, list[dict[str, Any]]]] = None,
        functions: Optional[Mapping[str, Callable[[dict[str, Any]], Any]]] = None,
        tz: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.tz = tz
        self.tables: dict[str, list[dict[str, Any]]] = {k: list(v) for k, v in (tables or {}).items()}
        self.functions = dict(functions or {})
        self.calls: list[tuple[str, str]] = []

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: Optional[Mapping[str, Any]] = None,
        gte: Optional[Mapping[str, Any]] = None,
        lte: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        self.calls.append(("select", table))
        rows = self.tables.get(table, [])

        def keep(row: dict[str, Any]) -> bool:
            for col, value in (eq or {}).items():
                if row.get(col) != value:
                    return False
            for col, bound in (gte or {}).items():
                if row.get(col) is None or _comparable(row[col], self.tz) < _comparable(bound, self.tz):
                    return False
            for col, bound in (lte or {}).items():
                if row.get(col) is None or _comparable(row[col], self.tz) > _comparable(bound, self.tz):
                    return False
            return True

        matched = [r for r in rows if keep(r)]
        if order:
            # nulls last in either direction
            present = [r for r in matched if r.get(order) is not None]
            missing = [r for r in matched if r.get(order) is None]
            present.sort(key=lambda r: _comparable(r[order], self.tz), reverse=descending)
            matched = present + missing

        wanted = [c.strip() for c in columns.split(",")]
        if wanted == ["*"]:
            return copy.deepcopy(matched)
        return [{c: copy.deepcopy(r[c]) for c in wanted if c in r} for r in matched]

    def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        self.calls.append(("rpc", function))
        if function not in self.functions:
            raise FetchFailure(f"Remote function {function} is not available")
        return self.functions[function](dict(params))
