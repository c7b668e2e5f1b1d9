"""Aggregation engine.

Pure functions that reduce fetched row sets to per-facet metrics:

- finance: revenue, growth, ticket values, goal progress, projection
- clients: activity, new/recurring clients, retention, birthdays, top clients
- operations: service mix, busy hours, cancellations, visit spacing
- insights: goal pacing, top service, potential lost value

Every function takes the current instant as an explicit ``now`` argument.

Example:
    >>> from salon_metrics.metrics import compute_finance_metrics
    >>> from salon_metrics.models import normalize_sales
    >>> from salon_metrics.window import ReportWindow
    >>>
    >>> window = ReportWindow.from_dates("2025-03-01", "2025-03-31")
    >>> sales = normalize_sales([{"client_id": "c1", "amount": 100, "sale_date": "2025-03-02"}])
    >>> compute_finance_metrics(sales, normalize_sales([]), {}, None, window, window.end).total
    100.0
"""

from salon_metrics.metrics.clients import (
    ClientMetrics,
    ClientStatus,
    classify_client,
    compute_client_metrics,
    list_inactive_clients,
)
from salon_metrics.metrics.finance import FinanceMetrics, compute_finance_metrics
from salon_metrics.metrics.insights import InsightsMetrics, compute_insights
from salon_metrics.metrics.operations import OperationMetrics, compute_operation_metrics

__all__ = [
    "ClientMetrics",
    "ClientStatus",
    "FinanceMetrics",
    "InsightsMetrics",
    "OperationMetrics",
    "classify_client",
    "compute_client_metrics",
    "compute_finance_metrics",
    "compute_insights",
    "compute_operation_metrics",
    "list_inactive_clients",
]
