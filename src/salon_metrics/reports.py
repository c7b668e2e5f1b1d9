"""Report builders: revenue detail, services summary and the dashboard card set."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

import pandas as pd

from salon_metrics.metrics.common import (
    goal_progress,
    group_by_service,
    inactive_mask,
    lookup_name,
    sort_desc,
    sum_amount,
)
from salon_metrics.metrics.finance import ServiceRevenue
from salon_metrics.models import Goal


def _optional_str(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


@dataclass(frozen=True)
class RevenueRow:
    sale_id: Optional[str]
    sale_date: Optional[datetime]
    client_name: str
    service_name: str
    amount: float
    payment_method: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class RevenueReport:
    rows: list[RevenueRow] = field(default_factory=list)
    total: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ServicesReport:
    rows: list[ServiceRevenue] = field(default_factory=list)
    grand_total: float = 0.0
    total_qty: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DashboardSummary:
    """Headline numbers for the establishment's home screen.

    Attributes:
        monthly_revenue: Revenue from the first day of the month until now.
        total_clients: Roster size.
        inactive_clients: Clients inactive at now.
        today_appointments: Appointments scheduled for today.
        goal_progress_pct: Progress of this month's goal (0 without a goal).
        goal_target: Target of this month's goal (0 without a goal).
        goal_current: Running amount of this month's goal (0 without a goal).
    """

    monthly_revenue: float
    total_clients: int
    inactive_clients: int
    today_appointments: int
    goal_progress_pct: float
    goal_target: float
    goal_current: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_revenue_report(
    sales: pd.DataFrame,
    clients: pd.DataFrame,
    services: dict[str, str],
) -> RevenueReport:
    """Sale-by-sale revenue detail, newest first, with client and service names."""
    names = {str(k): v for k, v in zip(clients["id"], clients["name"]) if isinstance(v, str)}
    ordered = sort_desc(sales, "sale_date")

    rows = []
    for r in ordered.itertuples(index=False):
        rows.append(
            RevenueRow(
                sale_id=_optional_str(r.id),
                sale_date=None if pd.isna(r.sale_date) else r.sale_date.to_pydatetime(),
                client_name=lookup_name(names, r.client_id),
                service_name=lookup_name(services, r.service_id),
                amount=float(r.amount),
                payment_method=_optional_str(r.payment_method),
                notes=_optional_str(r.notes),
            )
        )
    return RevenueReport(rows=rows, total=sum_amount(sales))


def build_services_report(sales: pd.DataFrame, services: dict[str, str]) -> ServicesReport:
    """Quantity and revenue per service, highest revenue first."""
    grouped = sort_desc(group_by_service(sales, services), "total")
    rows = [
        ServiceRevenue(
            service_id=_optional_str(r.service_id),
            service_name=r.service_name,
            qty=int(r.qty),
            total=float(r.total),
        )
        for r in grouped.itertuples(index=False)
    ]
    return ServicesReport(
        rows=rows,
        grand_total=sum_amount(sales),
        total_qty=int(sum(r.qty for r in rows)),
    )


def build_dashboard_summary(
    month_sales: pd.DataFrame,
    clients: pd.DataFrame,
    today_appointments: pd.DataFrame,
    goal: Optional[Goal],
    threshold_days: int,
    now: pd.Timestamp,
) -> DashboardSummary:
    """Headline numbers from month-to-date sales, the roster and today's agenda."""
    progress, _ = goal_progress(goal)
    return DashboardSummary(
        monthly_revenue=sum_amount(month_sales),
        total_clients=len(clients),
        inactive_clients=int(inactive_mask(clients, now, threshold_days).sum()),
        today_appointments=len(today_appointments),
        goal_progress_pct=progress if progress is not None else 0.0,
        goal_target=goal.target_amount if goal is not None else 0.0,
        goal_current=goal.current_or_zero if goal is not None else 0.0,
    )
