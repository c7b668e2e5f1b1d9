"""Example: Computing salon metrics from exported rows

This example loads an establishment's rows from JSON exports (one file per
table) into the in-memory record source and prints every facet, the same
way the salon-metrics CLI does against the hosted backend.

Prerequisites:
- JSON exports under data/export/ named after the tables
  (sales.json, clients.json, services.json, appointments.json,
  goals.json, settings.json), each a list of row objects
- Without exports, a small synthetic month is used instead
"""

import json
from pathlib import Path

import pandas as pd

from salon_metrics import get_dashboard_summary, get_metrics
from salon_metrics.formatters import FORMATTERS, format_dashboard_for_console
from salon_metrics.source import InMemoryRecordSource

export_dir = Path("data/export")
establishment = "demo"

print("=" * 80)
print("Loading rows")
print("=" * 80)

if export_dir.exists():
    tables = {path.stem: json.loads(path.read_text(encoding="utf-8")) for path in export_dir.glob("*.json")}
    print(f"\nLoaded {len(tables)} tables from {export_dir}")
else:
    print(f"\nExport dir not found: {export_dir}")
    print("Using synthetic data for demonstration instead...")

    services = [("s1", "Corte", 45.0), ("s2", "Barba", 30.0), ("s3", "Escova", 60.0)]
    clients = ["Ana", "Bruno", "Carla", "Diego", "Elisa"]
    sales = []
    for i, day in enumerate(pd.date_range("2025-03-01", "2025-03-14", freq="D")):
        sid, _, price = services[i % len(services)]
        sales.append(
            {
                "id": f"x{i}",
                "establishment_id": establishment,
                "client_id": f"c{i % len(clients)}",
                "service_id": sid,
                "amount": price,
                "sale_date": (day + pd.Timedelta(hours=9 + i % 8)).isoformat(),
                "payment_method": "pix",
                "notes": None,
            }
        )
    tables = {
        "services": [{"id": sid, "name": name, "establishment_id": establishment} for sid, name, _ in services],
        "clients": [
            {
                "id": f"c{i}",
                "name": name,
                "birth_date": f"1990-0{i % 3 + 2}-15",
                "created_at": "2024-11-01T10:00:00",
                "last_service_date": "2025-03-10T10:00:00" if i < 3 else "2025-01-05T10:00:00",
                "establishment_id": establishment,
            }
            for i, name in enumerate(clients)
        ],
        "sales": sales,
        "appointments": [
            {"id": "a1", "status": "canceled", "appointment_date": "2025-03-04T10:00:00", "establishment_id": establishment},
        ],
        "goals": [
            {"month": 3, "year": 2025, "target_amount": 2000, "current_amount": None, "establishment_id": establishment},
        ],
        "settings": [],
    }

source = InMemoryRecordSource(tables)
now = pd.Timestamp("2025-03-15 12:00")

for facet, formatter in FORMATTERS.items():
    print("\n")
    metrics = get_metrics(facet, source, establishment, "2025-03-01", "2025-03-31", now=now)
    print(formatter(metrics))

print("\n")
print(format_dashboard_for_console(get_dashboard_summary(source, establishment, now=now)))
