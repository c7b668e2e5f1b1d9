"""Shared fixtures: one establishment's March 2025 data.

Roster (now = 2025-03-15 12:00 local, threshold 20 days -> cutoff 2025-02-23):
- c1 Ana: active, birthday in March
- c2 Bruno: active, created in March
- c3 Carla: inactive (last service in January), birthday in March
- c4 Diego: never served (inactive)

March sales total 500.00 across Corte (3x, 250), Coloracao (1x, 200)
and Barba (1x, 50). The prior window holds one 250.00 sale.
"""

from __future__ import annotations

import pandas as pd
import pytest

from salon_metrics.config import DEFAULT_TIMEZONE
from salon_metrics.source import InMemoryRecordSource
from salon_metrics.window import ReportWindow

EST = "est-1"


@pytest.fixture
def now() -> pd.Timestamp:
    return pd.Timestamp("2025-03-15 12:00").tz_localize(DEFAULT_TIMEZONE)


@pytest.fixture
def march() -> ReportWindow:
    return ReportWindow.from_dates("2025-03-01", "2025-03-31")


@pytest.fixture
def tables() -> dict[str, list[dict]]:
    return {
        "services": [
            {"id": "s1", "name": "Corte", "establishment_id": EST},
            {"id": "s2", "name": "Barba", "establishment_id": EST},
            {"id": "s3", "name": "Coloracao", "establishment_id": EST},
        ],
        "clients": [
            {
                "id": "c1",
                "name": "Ana",
                "birth_date": "1990-03-10",
                "created_at": "2024-01-05T09:00:00",
                "last_service_date": "2025-03-14T16:00:00",
                "establishment_id": EST,
            },
            {
                "id": "c2",
                "name": "Bruno",
                "birth_date": "1985-07-02",
                "created_at": "2025-03-03T11:00:00",
                "last_service_date": "2025-03-10T14:30:00",
                "establishment_id": EST,
            },
            {
                "id": "c3",
                "name": "Carla",
                "birth_date": "1992-03-25",
                "created_at": "2024-06-01T10:00:00",
                "last_service_date": "2025-01-20T10:00:00",
                "establishment_id": EST,
            },
            {
                "id": "c4",
                "name": "Diego",
                "birth_date": None,
                "created_at": "2025-02-10T10:00:00",
                "last_service_date": None,
                "establishment_id": EST,
            },
        ],
        "sales": [
            {"id": "x0", "client_id": "c3", "service_id": "s1", "amount": 250, "sale_date": "2025-02-15T10:00:00",
             "payment_method": "pix", "notes": None, "establishment_id": EST},
            {"id": "x1", "client_id": "c1", "service_id": "s1", "amount": 100, "sale_date": "2025-03-02T10:15:00",
             "payment_method": "pix", "notes": None, "establishment_id": EST},
            {"id": "x2", "client_id": "c1", "service_id": "s2", "amount": 50, "sale_date": "2025-03-09T10:40:00",
             "payment_method": "cash", "notes": None, "establishment_id": EST},
            {"id": "x3", "client_id": "c2", "service_id": "s1", "amount": 80, "sale_date": "2025-03-10T14:00:00",
             "payment_method": "card", "notes": None, "establishment_id": EST},
            {"id": "x4", "client_id": "c2", "service_id": "s3", "amount": 200, "sale_date": "2025-03-10T14:30:00",
             "payment_method": "card", "notes": "retoque", "establishment_id": EST},
            {"id": "x5", "client_id": "c1", "service_id": "s1", "amount": 70, "sale_date": "2025-03-14T16:00:00",
             "payment_method": "pix", "notes": None, "establishment_id": EST},
            {"id": "y1", "client_id": "z9", "service_id": "s1", "amount": 999, "sale_date": "2025-03-05T10:00:00",
             "payment_method": "pix", "notes": None, "establishment_id": "est-2"},
        ],
        "appointments": [
            {"id": "a1", "status": "canceled", "appointment_date": "2025-03-05T10:00:00", "establishment_id": EST},
            {"id": "a2", "status": "no_show", "appointment_date": "2025-03-06T11:00:00", "establishment_id": EST},
            {"id": "a3", "status": "scheduled", "appointment_date": "2025-03-15T10:00:00", "establishment_id": EST},
            {"id": "a4", "status": "Canceled", "appointment_date": "2025-03-07T15:00:00", "establishment_id": EST},
        ],
        "goals": [
            {"month": 3, "year": 2025, "target_amount": 1000, "current_amount": 500, "establishment_id": EST},
        ],
        "settings": [
            {"inactive_days_threshold": 20, "establishment_id": EST},
        ],
    }


@pytest.fixture
def source(tables: dict[str, list[dict]]) -> InMemoryRecordSource:
    return InMemoryRecordSource(tables)
