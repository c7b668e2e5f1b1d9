"""Output formatters for metric results."""

from salon_metrics.formatters.console import (
    FORMATTERS,
    format_brl,
    format_clients_for_console,
    format_dashboard_for_console,
    format_finance_for_console,
    format_insights_for_console,
    format_operations_for_console,
    format_pct,
)

__all__ = [
    "FORMATTERS",
    "format_brl",
    "format_clients_for_console",
    "format_dashboard_for_console",
    "format_finance_for_console",
    "format_insights_for_console",
    "format_operations_for_console",
    "format_pct",
]
