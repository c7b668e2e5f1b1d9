"""Tests for the insights facet."""

import pandas as pd
import pytest

from salon_metrics.metrics import compute_insights
from salon_metrics.metrics.insights import services_needed
from salon_metrics.models import Goal, normalize_clients, normalize_sales
from salon_metrics.source.queries import fetch_clients, fetch_sales, fetch_services
from salon_metrics.window import ReportWindow

GOAL = Goal(month=3, year=2025, target_amount=1000, current_amount=500)


@pytest.mark.parametrize(
    "remaining, avg, expected",
    [(500, 100, 5), (450, 100, 5), (0, 100, 0), (500, 0, None), (None, 100, None)],
)
def test_services_needed(remaining, avg, expected) -> None:
    assert services_needed(remaining, avg) == expected


def test_full_window(source, march: ReportWindow, now: pd.Timestamp) -> None:
    sales = fetch_sales(source, "est-1", march)
    clients = fetch_clients(source, "est-1")

    m = compute_insights(sales, fetch_services(source, "est-1"), GOAL, clients, 20, march, now)

    assert m.avg_ticket_per_service == 100
    assert m.ticket_per_client == 250
    assert m.remaining_to_goal == 500
    assert m.services_needed_for_goal == 5
    assert m.top_contributing_service.name == "Corte"
    assert m.top_contributing_service.total == 250
    assert m.inactive_client_count == 2
    # inactive now x window ticket per client
    assert m.potential_lost_value == 500


def test_no_goal_outside_single_month(now: pd.Timestamp) -> None:
    window = ReportWindow.from_dates("2025-02-15", "2025-03-15")
    sales = normalize_sales([{"client_id": "c1", "amount": 100}])

    m = compute_insights(sales, {}, GOAL, normalize_clients([]), 20, window, now)

    assert m.remaining_to_goal is None
    assert m.services_needed_for_goal is None


def test_empty_window(march: ReportWindow, now: pd.Timestamp) -> None:
    clients = normalize_clients([{"id": "c1", "last_service_date": None}])

    m = compute_insights(normalize_sales([]), {}, None, clients, 20, march, now)

    assert m.avg_ticket_per_service == 0
    assert m.ticket_per_client == 0
    assert m.top_contributing_service is None
    assert m.inactive_client_count == 1
    assert m.potential_lost_value == 0
