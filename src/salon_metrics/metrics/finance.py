"""Financial facet: revenue, growth, ticket values, goal and projection."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import pandas as pd

from salon_metrics.metrics.common import (
    goal_progress,
    group_by_service,
    safe_ratio,
    sort_desc,
    sum_amount,
    unique_client_count,
)
from salon_metrics.models import Goal
from salon_metrics.window import ReportWindow, days_in_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceRevenue:
    service_id: Optional[str]
    service_name: str
    qty: int
    total: float


@dataclass(frozen=True)
class FinanceMetrics:
    """Financial metrics for one report window.

    Attributes:
        total: Revenue in the window.
        prior_total: Revenue in the preceding window of equal length.
        growth_pct: Change vs. the prior window in percent; None when the
            prior total is 0.
        unique_client_count: Distinct clients with a sale in the window.
        sales_count: Number of sales (services rendered) in the window.
        ticket_per_client: total / unique_client_count (0 with no clients).
        ticket_per_service: total / sales_count (0 with no sales).
        per_service_breakdown: Revenue per service, highest first.
        goal_target: Target of the month's goal, when one applies.
        goal_current: Running amount of the month's goal, when one applies.
        goal_progress_pct: current / target in percent, clamped to [0, 100].
        remaining_to_goal: target - current, never negative.
        projection: Month-end revenue estimate for the current month.
    """

    total: float
    prior_total: float
    growth_pct: Optional[float]
    unique_client_count: int
    sales_count: int
    ticket_per_client: float
    ticket_per_service: float
    per_service_breakdown: list[ServiceRevenue] = field(default_factory=list)
    goal_target: Optional[float] = None
    goal_current: Optional[float] = None
    goal_progress_pct: Optional[float] = None
    remaining_to_goal: Optional[float] = None
    projection: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def growth_pct(total: float, prior_total: float) -> Optional[float]:
    """Percentage change vs. the prior total; None when the prior total is 0."""
    if prior_total <= 0:
        return None
    return (total - prior_total) / prior_total * 100


def project_month(
    window: ReportWindow,
    now: pd.Timestamp,
    total: float,
    goal: Optional[Goal],
) -> Optional[float]:
    """Linear month-end projection from the daily average so far.

    Only defined when the window is the current calendar month. The base
    is the goal's running amount when the goal tracks one, else the
    window's revenue.
    """
    if not window.is_current_month(now):
        return None
    if now.tzinfo is not None:
        now = now.tz_convert(window.start.tz)
    days_elapsed = now.day
    if days_elapsed <= 0:
        return None
    base = goal.current_amount if goal is not None and goal.current_amount is not None else total
    return base / days_elapsed * days_in_month(now.year, now.month)


def compute_finance_metrics(
    sales: pd.DataFrame,
    prior_sales: pd.DataFrame,
    services: dict[str, str],
    goal: Optional[Goal],
    window: ReportWindow,
    now: pd.Timestamp,
) -> FinanceMetrics:
    """Reduce window and prior-window sales to financial metrics.

    Goal fields and the projection are suppressed when the window spans
    more than one calendar month.

    Args:
        sales: Normalized sales in the window.
        prior_sales: Normalized sales in ``window.prior()``.
        services: Service id to display name.
        goal: Goal for the window's month, or None.
        window: The report window.
        now: Current instant (drives the projection).

    Returns:
        FinanceMetrics for the window.

    Examples:
        >>> m = compute_finance_metrics(sales, prior, {}, None, window, now)
        >>> m.total, m.growth_pct
        (150.0, 50.0)
    """
    if not window.is_single_month and goal is not None:
        logger.debug("Window %s - %s spans several months; ignoring goal", window.start, window.end)
        goal = None

    total = sum_amount(sales)
    prior_total = sum_amount(prior_sales)
    clients = unique_client_count(sales)
    count = len(sales)

    breakdown = sort_desc(group_by_service(sales, services), "total")
    rows = [
        ServiceRevenue(
            service_id=None if pd.isna(r.service_id) else str(r.service_id),
            service_name=r.service_name,
            qty=int(r.qty),
            total=float(r.total),
        )
        for r in breakdown.itertuples(index=False)
    ]

    progress, remaining = goal_progress(goal)

    return FinanceMetrics(
        total=total,
        prior_total=prior_total,
        growth_pct=growth_pct(total, prior_total),
        unique_client_count=clients,
        sales_count=count,
        ticket_per_client=safe_ratio(total, clients),
        ticket_per_service=safe_ratio(total, count),
        per_service_breakdown=rows,
        goal_target=goal.target_amount if goal is not None else None,
        goal_current=goal.current_or_zero if goal is not None else None,
        goal_progress_pct=progress,
        remaining_to_goal=remaining,
        projection=project_month(window, now, total, goal),
    )
