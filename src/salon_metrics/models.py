"""Row shapes consumed by the aggregation engine.

Rows arrive from the record source as dicts keyed by the backend's column
names. The ``normalize_*`` functions turn them into typed DataFrames:

- sales: one row per sale (client_id, service_id, amount, sale_date, ...)
- clients: one row per roster entry (id, name, birth_date, created_at,
  last_service_date)
- appointments: one row per appointment (status, appointment_date)

Null or missing amounts become 0. Timestamps become tz-aware values in the
report timezone; values that cannot be parsed become NaT and are logged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

import pandas as pd

from salon_metrics.config import DEFAULT_TIMEZONE
from salon_metrics.exceptions import DataQualityError
from salon_metrics.window import to_timestamp

logger = logging.getLogger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]

SALE_COLUMNS = [
    "id",
    "client_id",
    "service_id",
    "amount",
    "sale_date",
    "payment_method",
    "notes",
]
CLIENT_COLUMNS = ["id", "name", "birth_date", "created_at", "last_service_date"]
APPOINTMENT_COLUMNS = ["id", "status", "appointment_date"]


@dataclass(frozen=True)
class Goal:
    """Monthly revenue target.

    Attributes:
        month: Calendar month (1-12).
        year: Calendar year.
        target_amount: Revenue target for the month.
        current_amount: Running amount tracked by the backend; None when unset.
    """

    month: int
    year: int
    target_amount: float
    current_amount: Optional[float] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | None, month: int, year: int) -> Optional[Goal]:
        """Build a Goal from a goals row, or None when there is no row."""
        if row is None:
            return None
        current = row.get("current_amount")
        return cls(
            month=int(row.get("month") or month),
            year=int(row.get("year") or year),
            target_amount=_to_amount(row.get("target_amount")),
            current_amount=None if current is None else _to_amount(current),
        )

    @property
    def current_or_zero(self) -> float:
        return self.current_amount if self.current_amount is not None else 0.0


def _to_amount(value: Any) -> float:
    """Coerce a currency value to float, treating null/garbage as 0."""
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if pd.isna(amount) else amount


def _frame(rows: Rows, columns: list[str], required: tuple[str, ...], kind: str) -> pd.DataFrame:
    """Build a DataFrame with every expected column present."""
    df = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))

    if not df.empty:
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise DataQualityError(f"{kind} rows are missing required columns: {missing}")

    for col in columns:
        if col not in df.columns:
            df[col] = None
    return df.reset_index(drop=True)


def to_local_series(values: pd.Series, tz: str = DEFAULT_TIMEZONE) -> pd.Series:
    """Convert a column of timestamps (ISO strings, datetimes) to tz-aware values in tz."""
    bad = 0

    def convert(v: Any) -> pd.Timestamp:
        nonlocal bad
        if v is None or (not isinstance(v, str) and pd.isna(v)):
            return pd.NaT
        try:
            return to_timestamp(v, tz)
        except (TypeError, ValueError):
            bad += 1
            return pd.NaT

    converted = pd.Series(
        [convert(v) for v in values],
        index=values.index,
        dtype=f"datetime64[ns, {tz}]",
    )
    if bad:
        logger.warning("Dropped %d unparseable timestamp(s) in column %s", bad, values.name)
    return converted


def _to_date(v: Any) -> Optional[date]:
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return None
    try:
        return pd.Timestamp(v).date()
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable date %r", v)
        return None


def normalize_sales(rows: Rows, tz: str = DEFAULT_TIMEZONE) -> pd.DataFrame:
    """Typed sales frame; amount is float with nulls as 0."""
    df = _frame(rows, SALE_COLUMNS, ("amount",), "sales")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype(float)
    df["sale_date"] = to_local_series(df["sale_date"], tz)
    return df


def normalize_clients(rows: Rows, tz: str = DEFAULT_TIMEZONE) -> pd.DataFrame:
    """Typed client roster; roster order is preserved."""
    df = _frame(rows, CLIENT_COLUMNS, ("id",), "clients")
    df["created_at"] = to_local_series(df["created_at"], tz)
    df["last_service_date"] = to_local_series(df["last_service_date"], tz)
    df["birth_date"] = pd.Series([_to_date(v) for v in df["birth_date"]], index=df.index, dtype=object)
    return df


def normalize_appointments(rows: Rows, tz: str = DEFAULT_TIMEZONE) -> pd.DataFrame:
    """Typed appointments frame; status is lower-cased with nulls as ''."""
    df = _frame(rows, APPOINTMENT_COLUMNS, (), "appointments")
    df["status"] = df["status"].fillna("").astype(str).str.lower()
    df["appointment_date"] = to_local_series(df["appointment_date"], tz)
    return df


def service_names(rows: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Map service id to display name."""
    return {str(r["id"]): r.get("name") or "" for r in rows if r.get("id") is not None}
