"""Insights facet: cross-facet estimates built on the window's sales.

``potential_lost_value`` is the number of clients inactive at ``now``
multiplied by the ticket per client over the window.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional

import numpy as np
import pandas as pd

from salon_metrics.metrics.common import (
    goal_progress,
    group_by_service,
    inactive_mask,
    safe_ratio,
    sort_desc,
    sum_amount,
    unique_client_count,
)
from salon_metrics.models import Goal
from salon_metrics.window import ReportWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceContribution:
    service_id: Optional[str]
    name: str
    total: float


@dataclass(frozen=True)
class InsightsMetrics:
    avg_ticket_per_service: float
    ticket_per_client: float
    remaining_to_goal: Optional[float]
    services_needed_for_goal: Optional[int]
    top_contributing_service: Optional[ServiceContribution]
    inactive_client_count: int
    potential_lost_value: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def services_needed(remaining: Optional[float], avg_ticket: float) -> Optional[int]:
    """Services at the average ticket still needed to reach the goal."""
    if remaining is None or avg_ticket <= 0:
        return None
    return int(np.ceil(remaining / avg_ticket))


def compute_insights(
    sales: pd.DataFrame,
    services: dict[str, str],
    goal: Optional[Goal],
    clients: pd.DataFrame,
    threshold_days: int,
    window: ReportWindow,
    now: pd.Timestamp,
) -> InsightsMetrics:
    """Derive goal pacing, top service and lost-value estimates.

    Args:
        sales: Normalized sales in the window.
        services: Service id to display name.
        goal: Goal for the window's month, or None.
        clients: Normalized full roster snapshot (not window-filtered).
        threshold_days: Inactivity threshold in days.
        window: The report window.
        now: Current instant (drives inactivity).
    """
    if not window.is_single_month:
        goal = None

    total = sum_amount(sales)
    avg_ticket = safe_ratio(total, len(sales))
    ticket_client = safe_ratio(total, unique_client_count(sales))

    _, remaining = goal_progress(goal)

    by_service = sort_desc(group_by_service(sales, services), "total")
    top = None
    if not by_service.empty:
        row = by_service.iloc[0]
        top = ServiceContribution(
            service_id=None if pd.isna(row["service_id"]) else str(row["service_id"]),
            name=row["service_name"],
            total=float(row["total"]),
        )

    inactive_count = int(inactive_mask(clients, now, threshold_days).sum())
    logger.debug(
        "Insights: %d inactive clients x ticket %.2f over %s - %s",
        inactive_count,
        ticket_client,
        window.start,
        window.end,
    )

    return InsightsMetrics(
        avg_ticket_per_service=avg_ticket,
        ticket_per_client=ticket_client,
        remaining_to_goal=remaining,
        services_needed_for_goal=services_needed(remaining, avg_ticket),
        top_contributing_service=top,
        inactive_client_count=inactive_count,
        potential_lost_value=inactive_count * ticket_client,
    )
