"""Salon Metrics - period-based reporting for salons and barbershops.

This package reads an establishment's sales, clients, services,
appointments and goals from a hosted record source and reduces them to
per-period metrics:

- **finance**: revenue, growth vs. the prior period, ticket values,
  goal progress and month-end projection
- **clients**: activity, new and recurring clients, retention, birthdays,
  top clients
- **operations**: service mix, busy hours, cancellations, visit spacing
- **insights**: goal pacing, top service, potential lost value

Module Structure:
    salon_metrics.api: Facet and report loaders (fetch + aggregate)
    salon_metrics.metrics: Pure aggregation functions per facet
    salon_metrics.reports: Revenue, services and dashboard reports
    salon_metrics.booking: Public booking catalog, slots and creation
    salon_metrics.source: Record source interface and implementations
    salon_metrics.window: Report windows and calendar helpers

Quick Start:
    >>> from salon_metrics import SourceConfig, get_metrics
    >>> from salon_metrics.source import PostgrestSource
    >>>
    >>> source = PostgrestSource(SourceConfig.from_env())
    >>> finance = get_metrics("finance", source, "est-1", "2025-03-01", "2025-03-31")
    >>> print(finance.total, finance.growth_pct)
"""

__version__ = "0.1.0"

from salon_metrics.api import (
    LatestWindowGuard,
    get_client_metrics,
    get_dashboard_summary,
    get_finance_metrics,
    get_insights,
    get_metrics,
    get_operation_metrics,
    get_revenue_report,
    get_services_report,
)
from salon_metrics.config import SourceConfig
from salon_metrics.exceptions import (
    BookingError,
    ConfigError,
    DataQualityError,
    FetchFailure,
    SalonMetricsError,
)
from salon_metrics.window import ReportWindow

__all__ = [
    "BookingError",
    "ConfigError",
    "DataQualityError",
    "FetchFailure",
    "LatestWindowGuard",
    "ReportWindow",
    "SalonMetricsError",
    "SourceConfig",
    "__version__",
    "get_client_metrics",
    "get_dashboard_summary",
    "get_finance_metrics",
    "get_insights",
    "get_metrics",
    "get_operation_metrics",
    "get_revenue_report",
    "get_services_report",
]
