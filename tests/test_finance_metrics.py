"""Tests for the financial facet."""

import math
import random

import pandas as pd
import pytest

from salon_metrics.metrics import compute_finance_metrics
from salon_metrics.metrics.finance import growth_pct
from salon_metrics.models import Goal, normalize_sales
from salon_metrics.source.queries import fetch_sales, fetch_services
from salon_metrics.window import ReportWindow

SERVICES = {"s1": "Corte", "s2": "Barba"}


@pytest.fixture
def april_now() -> pd.Timestamp:
    return pd.Timestamp("2025-04-02 10:00").tz_localize("America/Sao_Paulo")


def test_total_and_growth(march: ReportWindow, april_now: pd.Timestamp) -> None:
    """Two sales of 100 and 50 against a prior total of 100 grow 50%."""
    sales = normalize_sales([{"amount": 100}, {"amount": 50}])
    prior = normalize_sales([{"amount": 100}])

    m = compute_finance_metrics(sales, prior, {}, None, march, april_now)

    assert m.total == 150
    assert m.prior_total == 100
    assert m.growth_pct == pytest.approx(50, abs=1e-9)


def test_growth_is_none_without_prior_revenue() -> None:
    assert growth_pct(150, 0) is None
    assert growth_pct(0, 0) is None
    assert growth_pct(50, 100) == pytest.approx(-50)


def test_goal_progress_is_clamped(march: ReportWindow, april_now: pd.Timestamp) -> None:
    """A goal exceeded by its running amount reports 100% and nothing remaining."""
    goal = Goal(month=3, year=2025, target_amount=1000, current_amount=1200)

    m = compute_finance_metrics(normalize_sales([]), normalize_sales([]), {}, goal, march, april_now)

    assert m.goal_progress_pct == 100
    assert m.remaining_to_goal == 0
    assert m.goal_target == 1000
    assert m.goal_current == 1200


def test_goal_with_zero_target_has_no_progress(march: ReportWindow, april_now: pd.Timestamp) -> None:
    goal = Goal(month=3, year=2025, target_amount=0, current_amount=10)
    m = compute_finance_metrics(normalize_sales([]), normalize_sales([]), {}, goal, march, april_now)
    assert m.goal_progress_pct is None
    assert m.remaining_to_goal == 0


def test_window_across_months_drops_goal_and_projection() -> None:
    window = ReportWindow.from_dates("2025-03-15", "2025-04-10")
    now = pd.Timestamp("2025-03-20 12:00").tz_localize("America/Sao_Paulo")
    goal = Goal(month=3, year=2025, target_amount=1000, current_amount=300)

    m = compute_finance_metrics(normalize_sales([{"amount": 80}]), normalize_sales([]), {}, goal, window, now)

    assert m.goal_target is None
    assert m.goal_current is None
    assert m.goal_progress_pct is None
    assert m.remaining_to_goal is None
    assert m.projection is None


def test_empty_window_has_zero_ratios(march: ReportWindow, april_now: pd.Timestamp) -> None:
    m = compute_finance_metrics(normalize_sales([]), normalize_sales([]), {}, None, march, april_now)
    assert m.total == 0
    assert m.sales_count == 0
    assert m.unique_client_count == 0
    assert m.ticket_per_client == 0
    assert m.ticket_per_service == 0
    assert m.per_service_breakdown == []
    assert m.growth_pct is None


def test_total_is_exact_regardless_of_order(march: ReportWindow, april_now: pd.Timestamp) -> None:
    amounts = [0.1, 0.2, 0.3, 1e10, 0.7, 19.99, 0.01] * 5
    shuffled = list(amounts)
    random.Random(7).shuffle(shuffled)

    a = compute_finance_metrics(
        normalize_sales([{"amount": x} for x in amounts]), normalize_sales([]), {}, None, march, april_now
    )
    b = compute_finance_metrics(
        normalize_sales([{"amount": x} for x in shuffled]), normalize_sales([]), {}, None, march, april_now
    )

    assert a.total == b.total == math.fsum(amounts)


class TestProjection:
    """Month-end projection for the current month."""

    def test_projection_uses_goal_running_amount(self, march: ReportWindow, now: pd.Timestamp) -> None:
        goal = Goal(month=3, year=2025, target_amount=1000, current_amount=450)
        m = compute_finance_metrics(normalize_sales([{"amount": 300}]), normalize_sales([]), {}, goal, march, now)
        assert m.projection == pytest.approx(450 / 15 * 31)

    def test_projection_falls_back_to_total(self, march: ReportWindow, now: pd.Timestamp) -> None:
        m = compute_finance_metrics(normalize_sales([{"amount": 300}]), normalize_sales([]), {}, None, march, now)
        assert m.projection == pytest.approx(300 / 15 * 31)

    def test_no_projection_for_past_month(self, march: ReportWindow, april_now: pd.Timestamp) -> None:
        m = compute_finance_metrics(
            normalize_sales([{"amount": 300}]), normalize_sales([]), {}, None, march, april_now
        )
        assert m.projection is None


def test_breakdown_and_tickets_from_source(source, march: ReportWindow, now: pd.Timestamp) -> None:
    sales = fetch_sales(source, "est-1", march)
    prior = fetch_sales(source, "est-1", march.prior())
    goal = Goal(month=3, year=2025, target_amount=1000, current_amount=500)

    m = compute_finance_metrics(sales, prior, fetch_services(source, "est-1"), goal, march, now)

    assert m.total == 500
    assert m.prior_total == 250
    assert m.growth_pct == pytest.approx(100)
    assert m.unique_client_count == 2
    assert m.sales_count == 5
    assert m.ticket_per_client == 250
    assert m.ticket_per_service == 100
    assert [(s.service_name, s.qty, s.total) for s in m.per_service_breakdown] == [
        ("Corte", 3, 250.0),
        ("Coloracao", 1, 200.0),
        ("Barba", 1, 50.0),
    ]
    assert m.goal_progress_pct == 50
    assert m.remaining_to_goal == 500


def test_unknown_service_uses_placeholder(march: ReportWindow, april_now: pd.Timestamp) -> None:
    sales = normalize_sales([{"amount": 10, "service_id": "gone"}, {"amount": 20, "service_id": "s1"}])
    m = compute_finance_metrics(sales, normalize_sales([]), SERVICES, None, march, april_now)
    assert [s.service_name for s in m.per_service_breakdown] == ["Corte", "-"]


def test_compute_is_idempotent(source, march: ReportWindow, now: pd.Timestamp) -> None:
    sales = fetch_sales(source, "est-1", march)
    prior = fetch_sales(source, "est-1", march.prior())
    services = fetch_services(source, "est-1")

    first = compute_finance_metrics(sales, prior, services, None, march, now)
    second = compute_finance_metrics(sales, prior, services, None, march, now)

    assert first.to_dict() == second.to_dict()
