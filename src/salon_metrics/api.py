"""Public API: load a facet's rows from the record source and aggregate them.

Each loader:
- reads what its facet needs, scoped by establishment_id,
- runs the pure aggregator with an explicit ``now``,
- raises a single FetchFailure naming the facet if any read fails
  (no partial results, no retries at this layer).

Example:
    >>> from salon_metrics import SourceConfig
    >>> from salon_metrics.api import get_metrics
    >>> from salon_metrics.source import PostgrestSource
    >>>
    >>> source = PostgrestSource(SourceConfig.from_env())
    >>> finance = get_metrics("finance", source, "est-1", "2025-03-01", "2025-03-31")
    >>> finance.total
    12450.0
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Optional, TypeVar

import pandas as pd

from salon_metrics.config import DEFAULT_TIMEZONE
from salon_metrics.exceptions import DataQualityError, FetchFailure
from salon_metrics.metrics import (
    ClientMetrics,
    FinanceMetrics,
    InsightsMetrics,
    OperationMetrics,
    compute_client_metrics,
    compute_finance_metrics,
    compute_insights,
    compute_operation_metrics,
)
from salon_metrics.reports import (
    DashboardSummary,
    RevenueReport,
    ServicesReport,
    build_dashboard_summary,
    build_revenue_report,
    build_services_report,
)
from salon_metrics.source.base import RecordSource
from salon_metrics.source.queries import (
    fetch_appointments,
    fetch_clients,
    fetch_goal,
    fetch_inactive_days_threshold,
    fetch_sales,
    fetch_services,
)
from salon_metrics.window import ReportWindow, TimeLike, to_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def _facet(name: str) -> Iterator[None]:
    """Turn any read or row-shape failure into one FetchFailure for the facet."""
    try:
        yield
    except FetchFailure as e:
        logger.error("Failed to load %s: %s", name, e)
        raise FetchFailure(f"Failed to load {name}: {e}", facet=name, status_code=e.status_code) from e
    except DataQualityError as e:
        logger.error("Failed to load %s: %s", name, e)
        raise FetchFailure(f"Failed to load {name}: {e}", facet=name) from e


def resolve_now(now: Optional[TimeLike], tz: str = DEFAULT_TIMEZONE) -> pd.Timestamp:
    """The explicit now, or the current instant in tz."""
    if now is None:
        return pd.Timestamp.now(tz=tz)
    return to_timestamp(now, tz)


def resolve_window(start: TimeLike, end: TimeLike, tz: str = DEFAULT_TIMEZONE) -> ReportWindow:
    """Window from two bounds; plain dates (or YYYY-MM-DD strings) cover whole days."""

    def is_day(v: TimeLike) -> bool:
        if isinstance(v, str):
            return len(v.strip()) == 10
        return isinstance(v, date) and not isinstance(v, datetime)

    if is_day(start) and is_day(end):
        return ReportWindow.from_dates(start, end, tz)
    return ReportWindow.from_bounds(start, end, tz)


def get_finance_metrics(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> FinanceMetrics:
    """Financial metrics for the window, compared with the preceding window."""
    window = resolve_window(start, end, tz)
    current = resolve_now(now, tz)
    with _facet("finance"):
        sales = fetch_sales(source, establishment_id, window, "id, client_id, service_id, amount, sale_date", tz)
        prior = fetch_sales(source, establishment_id, window.prior(), "amount", tz)
        services = fetch_services(source, establishment_id)
        goal = fetch_goal(source, establishment_id, window.month, window.year) if window.is_single_month else None
        result = compute_finance_metrics(sales, prior, services, goal, window, current)
    logger.info("Finance metrics for %s: total=%.2f over %d sales", establishment_id, result.total, result.sales_count)
    return result


def get_client_metrics(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> ClientMetrics:
    """Client metrics: roster activity at now plus window acquisition and retention."""
    window = resolve_window(start, end, tz)
    current = resolve_now(now, tz)
    with _facet("clients"):
        threshold = fetch_inactive_days_threshold(source, establishment_id)
        clients = fetch_clients(source, establishment_id, tz=tz)
        sales = fetch_sales(source, establishment_id, window, "client_id, sale_date, amount", tz)
        result = compute_client_metrics(clients, sales, window, threshold, current)
    logger.info(
        "Client metrics for %s: %d active, %d inactive",
        establishment_id,
        result.active_count,
        result.inactive_count,
    )
    return result


def get_operation_metrics(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> OperationMetrics:
    """Operational metrics: service mix, busy hours, cancellations, visit spacing."""
    window = resolve_window(start, end, tz)
    with _facet("operations"):
        sales = fetch_sales(source, establishment_id, window, "service_id, sale_date, amount, client_id", tz)
        services = fetch_services(source, establishment_id)
        appointments = fetch_appointments(source, establishment_id, window, tz)
        result = compute_operation_metrics(sales, appointments, services)
    logger.info("Operation metrics for %s over %d sales", establishment_id, len(sales))
    return result


def get_insights(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> InsightsMetrics:
    """Insights: goal pacing, top service and potential lost value."""
    window = resolve_window(start, end, tz)
    current = resolve_now(now, tz)
    with _facet("insights"):
        sales = fetch_sales(source, establishment_id, window, "service_id, client_id, amount", tz)
        services = fetch_services(source, establishment_id)
        goal = fetch_goal(source, establishment_id, window.month, window.year) if window.is_single_month else None
        threshold = fetch_inactive_days_threshold(source, establishment_id)
        clients = fetch_clients(source, establishment_id, "id, last_service_date", tz)
        result = compute_insights(sales, services, goal, clients, threshold, window, current)
    logger.info("Insights for %s: %d inactive clients", establishment_id, result.inactive_client_count)
    return result


FACETS: dict[str, Callable[..., Any]] = {
    "finance": get_finance_metrics,
    "clients": get_client_metrics,
    "operations": get_operation_metrics,
    "insights": get_insights,
}


def get_metrics(
    facet: str,
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> Any:
    """Load one facet by name.

    Raises:
        ValueError: If facet is not "finance", "clients", "operations" or "insights".
    """
    if facet not in FACETS:
        raise ValueError(f"Invalid facet '{facet}'. Must be one of: {', '.join(FACETS)}.")
    return FACETS[facet](source, establishment_id, start, end, now=now, tz=tz)


def get_revenue_report(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    tz: str = DEFAULT_TIMEZONE,
) -> RevenueReport:
    """Sale-by-sale revenue detail for the window."""
    window = resolve_window(start, end, tz)
    with _facet("revenue report"):
        sales = fetch_sales(source, establishment_id, window, tz=tz, newest_first=True)
        clients = fetch_clients(source, establishment_id, "id, name", tz)
        services = fetch_services(source, establishment_id)
        return build_revenue_report(sales, clients, services)


def get_services_report(
    source: RecordSource,
    establishment_id: str,
    start: TimeLike,
    end: TimeLike,
    *,
    tz: str = DEFAULT_TIMEZONE,
) -> ServicesReport:
    """Quantity and revenue per service for the window."""
    window = resolve_window(start, end, tz)
    with _facet("services report"):
        sales = fetch_sales(source, establishment_id, window, "service_id, amount", tz)
        services = fetch_services(source, establishment_id)
        return build_services_report(sales, services)


def get_dashboard_summary(
    source: RecordSource,
    establishment_id: str,
    *,
    now: Optional[TimeLike] = None,
    tz: str = DEFAULT_TIMEZONE,
) -> DashboardSummary:
    """Month-to-date revenue, roster activity, today's agenda and goal progress."""
    current = resolve_now(now, tz)
    with _facet("dashboard"):
        month_sales = fetch_sales(source, establishment_id, ReportWindow.month_to_date(current), "amount", tz)
        clients = fetch_clients(source, establishment_id, "id, last_service_date", tz)
        goal = fetch_goal(source, establishment_id, current.month, current.year)
        today = fetch_appointments(source, establishment_id, ReportWindow.day_of(current), tz)
        threshold = fetch_inactive_days_threshold(source, establishment_id)
        return build_dashboard_summary(month_sales, clients, today, goal, threshold, current)


class LatestWindowGuard:
    """Keep only the newest of overlapping metric requests.

    When the caller changes the selected window while a previous load is
    still in flight, the older result must not replace the newer one.

    Example:
        >>> guard = LatestWindowGuard()
        >>> metrics = guard.run(get_finance_metrics, source, "est-1", start, end)
        >>> if metrics is not None:
        ...     render(metrics)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def issue(self) -> int:
        """Register a new request and return its ticket."""
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest

    def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        """Call fn; return its result, or None if a newer request was issued meanwhile."""
        ticket = self.issue()
        result = fn(*args, **kwargs)
        if not self.is_current(ticket):
            logger.debug("Discarding stale result for request %d", ticket)
            return None
        return result
