"""Operational facet: service mix, busy hours, cancellations and visit spacing.

Ties between services (most/least sold) and between hours resolve to the
first-encountered row in sale order.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import pandas as pd

from salon_metrics.config import BUSY_HOURS_N
from salon_metrics.metrics.common import group_by_service, sort_asc, sort_desc

CANCELED_STATUS = "canceled"
NO_SHOW_STATUS = "no_show"

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class ServiceCount:
    service_id: Optional[str]
    name: str
    qty: int


@dataclass(frozen=True)
class HourCount:
    hour: int
    count: int


@dataclass(frozen=True)
class OperationMetrics:
    most_sold: Optional[ServiceCount]
    least_sold: Optional[ServiceCount]
    busy_hours: list[HourCount] = field(default_factory=list)
    canceled: int = 0
    no_shows: int = 0
    avg_days_between_visits: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _service_count(row: pd.Series) -> ServiceCount:
    sid = row["service_id"]
    return ServiceCount(
        service_id=None if pd.isna(sid) else str(sid),
        name=row["service_name"],
        qty=int(row["qty"]),
    )


def busy_hours(sales: pd.DataFrame, limit: int = BUSY_HOURS_N) -> list[HourCount]:
    """Sale counts per local hour of day, busiest first."""
    hours = sales["sale_date"].dropna().dt.hour
    if hours.empty:
        return []
    counts = hours.groupby(hours, sort=False).size().rename("count").rename_axis("hour").reset_index()
    top = sort_desc(counts, "count").head(limit)
    return [HourCount(hour=int(h), count=int(c)) for h, c in zip(top["hour"], top["count"])]


def visit_gaps(sales: pd.DataFrame) -> list[float]:
    """Days between consecutive sales of the same client, for every client with 2+ sales."""
    gaps: list[float] = []
    if sales.empty:
        return gaps
    for _, dates in sales.groupby("client_id", sort=False, dropna=False)["sale_date"]:
        ordered = dates.dropna().sort_values()
        if len(ordered) < 2:
            continue
        deltas = ordered.diff().dropna().dt.total_seconds() / SECONDS_PER_DAY
        gaps.extend(float(d) for d in deltas)
    return gaps


def count_status(appointments: pd.DataFrame, status: str) -> int:
    """Appointments whose lower-cased status equals status exactly."""
    if appointments.empty:
        return 0
    return int((appointments["status"].str.lower() == status).sum())


def compute_operation_metrics(
    sales: pd.DataFrame,
    appointments: pd.DataFrame,
    services: dict[str, str],
) -> OperationMetrics:
    """Reduce window sales and appointments to operational metrics.

    The average gap between visits pools every gap from every client
    (it is not an average of per-client averages).
    """
    by_service = group_by_service(sales, services)
    if by_service.empty:
        most = least = None
    else:
        most = _service_count(sort_desc(by_service, "qty").iloc[0])
        least = _service_count(sort_asc(by_service, "qty").iloc[0])

    gaps = visit_gaps(sales)
    avg_gap = math.fsum(gaps) / len(gaps) if gaps else 0.0

    return OperationMetrics(
        most_sold=most,
        least_sold=least,
        busy_hours=busy_hours(sales),
        canceled=count_status(appointments, CANCELED_STATUS),
        no_shows=count_status(appointments, NO_SHOW_STATUS),
        avg_days_between_visits=avg_gap,
    )
