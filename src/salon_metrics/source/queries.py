"""Typed reads against the record source.

Every read is scoped by ``establishment_id`` equality; window-bound reads
add an inclusive ``>= start AND <= end`` range on the table's date column.
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from salon_metrics.config import DEFAULT_INACTIVE_DAYS_THRESHOLD, DEFAULT_TIMEZONE
from salon_metrics.models import (
    Goal,
    normalize_appointments,
    normalize_clients,
    normalize_sales,
    service_names,
)
from salon_metrics.source.base import RecordSource
from salon_metrics.window import ReportWindow

logger = logging.getLogger(__name__)

SALE_SELECT = "id, client_id, service_id, amount, sale_date, payment_method, notes"
CLIENT_SELECT = "id, name, birth_date, created_at, last_service_date"


def _scope(establishment_id: str) -> dict[str, str]:
    if not establishment_id:
        raise ValueError("establishment_id is required")
    return {"establishment_id": establishment_id}


def fetch_sales(
    source: RecordSource,
    establishment_id: str,
    window: ReportWindow,
    columns: str = SALE_SELECT,
    tz: str = DEFAULT_TIMEZONE,
    newest_first: bool = False,
) -> pd.DataFrame:
    """Sales whose sale_date falls in the window."""
    rows = source.select(
        "sales",
        columns,
        eq=_scope(establishment_id),
        gte={"sale_date": window.start.isoformat()},
        lte={"sale_date": window.end.isoformat()},
        order="sale_date" if newest_first else None,
        descending=newest_first,
    )
    logger.debug("Fetched %d sales for %s (%s - %s)", len(rows), establishment_id, window.start, window.end)
    return normalize_sales(rows, tz)


def fetch_clients(
    source: RecordSource,
    establishment_id: str,
    columns: str = CLIENT_SELECT,
    tz: str = DEFAULT_TIMEZONE,
) -> pd.DataFrame:
    """Full client roster (not time-filtered)."""
    rows = source.select("clients", columns, eq=_scope(establishment_id))
    return normalize_clients(rows, tz)


def fetch_services(source: RecordSource, establishment_id: str) -> dict[str, str]:
    """Service id to display name."""
    return service_names(source.select("services", "id, name", eq=_scope(establishment_id)))


def fetch_appointments(
    source: RecordSource,
    establishment_id: str,
    window: ReportWindow,
    tz: str = DEFAULT_TIMEZONE,
) -> pd.DataFrame:
    """Appointments whose appointment_date falls in the window."""
    rows = source.select(
        "appointments",
        "id, status, appointment_date",
        eq=_scope(establishment_id),
        gte={"appointment_date": window.start.isoformat()},
        lte={"appointment_date": window.end.isoformat()},
    )
    return normalize_appointments(rows, tz)


def fetch_goal(
    source: RecordSource,
    establishment_id: str,
    month: int,
    year: int,
) -> Optional[Goal]:
    """Goal for (month, year), or None when none was set."""
    row = source.maybe_single(
        "goals",
        "month, year, target_amount, current_amount",
        eq={**_scope(establishment_id), "month": month, "year": year},
    )
    return Goal.from_row(row, month, year)


def fetch_inactive_days_threshold(source: RecordSource, establishment_id: str) -> int:
    """Inactivity threshold from settings, defaulting to 20 days."""
    row = source.maybe_single("settings", "inactive_days_threshold", eq=_scope(establishment_id))
    value = row.get("inactive_days_threshold") if row else None
    if value is None:
        return DEFAULT_INACTIVE_DAYS_THRESHOLD
    return int(value)
