"""Record source interface.

The record source is the hosted backend that owns every table. The
aggregation engine only needs fetch-by-filter reads and remote function
calls, so implementations (HTTP, in-memory) provide exactly those.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional

from salon_metrics.exceptions import FetchFailure


class RecordSource(ABC):
    """Abstract base class for record sources.

    Filters are conjunctive: ``eq`` pins columns to values, ``gte`` and
    ``lte`` bound columns inclusively. Values are passed as the backend
    expects them (ISO strings for timestamps).
    """

    @abstractmethod
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
        """Return the rows of table matching every filter.

        Raises:
            FetchFailure: If the read fails.
        """
        pass

    @abstractmethod
    def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        """Call a remote function and return its decoded result.

        Raises:
            FetchFailure: If the call fails.
        """
        pass

    def maybe_single(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """Return the single row matching eq, or None when there is none.

        Raises:
            FetchFailure: If more than one row matches.
        """
        rows = self.select(table, columns, eq=eq)
        if len(rows) > 1:
            raise FetchFailure(f"Expected at most one {table} row for {dict(eq or {})}, got {len(rows)}")
        return rows[0] if rows else None
