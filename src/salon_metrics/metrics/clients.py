"""Client facet: activity, acquisition, retention, birthdays and top clients."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional

import numpy as np
import pandas as pd

from salon_metrics.config import (
    DEFAULT_ATTENTION_DAYS,
    DEFAULT_INACTIVE_DAYS_THRESHOLD,
    TOP_N,
)
from salon_metrics.metrics.common import (
    group_by_client,
    inactive_mask,
    lookup_name,
    safe_ratio,
    sort_desc,
)
from salon_metrics.window import ReportWindow


@dataclass(frozen=True)
class ClientRef:
    id: str
    name: str


@dataclass(frozen=True)
class ClientRevenue:
    id: Optional[str]
    name: str
    total: float


@dataclass(frozen=True)
class ClientMetrics:
    """Client metrics for one report window.

    Activity counts are evaluated against the whole roster at ``now``;
    every other field is evaluated over the window.
    """

    active_count: int
    inactive_count: int
    new_clients_count: int
    unique_clients_count: int
    recurring_clients_count: int
    retention_rate: float
    ticket_per_client: float
    birthdays: list[ClientRef] = field(default_factory=list)
    top_clients: list[ClientRevenue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ClientStatus:
    """Status badge of a single client.

    Attributes:
        status: "new" (never served), "inactive", "attention" or "active".
        days_since_last_service: Whole days since the last service, None
            for new clients.
    """

    status: str
    days_since_last_service: Optional[int] = None


def classify_client(
    last_service_date: Optional[pd.Timestamp],
    now: pd.Timestamp,
    inactive_days: int = DEFAULT_INACTIVE_DAYS_THRESHOLD,
    attention_days: int = DEFAULT_ATTENTION_DAYS,
) -> ClientStatus:
    """Classify a client by the days elapsed since their last service.

    Examples:
        >>> classify_client(None, now).status
        'new'
    """
    if last_service_date is None or pd.isna(last_service_date):
        return ClientStatus(status="new")

    elapsed = now - last_service_date
    days = math.floor(elapsed.total_seconds() / 86400)
    if days > inactive_days:
        status = "inactive"
    elif days > attention_days:
        status = "attention"
    else:
        status = "active"
    return ClientStatus(status=status, days_since_last_service=days)


def list_inactive_clients(
    clients: pd.DataFrame,
    now: pd.Timestamp,
    threshold_days: int = DEFAULT_INACTIVE_DAYS_THRESHOLD,
) -> pd.DataFrame:
    """Roster rows that are inactive at now, most recently created first."""
    inactive = clients[inactive_mask(clients, now, threshold_days)]
    ordered = inactive.assign(_order=range(len(inactive)))
    ordered = ordered.sort_values(
        ["created_at", "_order"], ascending=[False, True], na_position="last"
    )
    return ordered.drop(columns="_order").reset_index(drop=True)


def _display(name: object) -> str:
    return name if isinstance(name, str) else ""


def _birthdays(clients: pd.DataFrame, month: int) -> list[ClientRef]:
    refs = []
    for row in clients.itertuples(index=False):
        if isinstance(row.birth_date, date) and row.birth_date.month == month:
            refs.append(ClientRef(id=str(row.id), name=_display(row.name)))
            if len(refs) == TOP_N:
                break
    return refs


def compute_client_metrics(
    clients: pd.DataFrame,
    sales: pd.DataFrame,
    window: ReportWindow,
    threshold_days: int,
    now: pd.Timestamp,
) -> ClientMetrics:
    """Reduce the roster and window sales to client metrics.

    Args:
        clients: Normalized full client roster (not time-filtered).
        sales: Normalized sales in the window.
        window: The report window.
        threshold_days: Inactivity threshold in days.
        now: Current instant (drives the inactivity cutoff).

    Returns:
        ClientMetrics for the window.
    """
    inactive = inactive_mask(clients, now, threshold_days)
    inactive_count = int(inactive.sum())
    active_count = int(len(clients) - inactive_count)

    created = clients["created_at"]
    new_clients = int(((created >= window.start) & (created <= window.end)).sum())

    per_client = group_by_client(sales)
    unique_clients = len(per_client)
    recurring = int(np.count_nonzero(per_client["qty"].to_numpy() >= 2))
    revenue = math.fsum(per_client["total"]) if unique_clients else 0.0

    names = {str(k): _display(v) for k, v in zip(clients["id"], clients["name"])}
    top = sort_desc(per_client, "total").head(TOP_N)
    top_clients = [
        ClientRevenue(
            id=None if pd.isna(r.client_id) else str(r.client_id),
            name=lookup_name(names, r.client_id),
            total=float(r.total),
        )
        for r in top.itertuples(index=False)
    ]

    return ClientMetrics(
        active_count=active_count,
        inactive_count=inactive_count,
        new_clients_count=new_clients,
        unique_clients_count=unique_clients,
        recurring_clients_count=recurring,
        retention_rate=safe_ratio(recurring, unique_clients) * 100,
        ticket_per_client=safe_ratio(revenue, unique_clients),
        birthdays=_birthdays(clients, window.month),
        top_clients=top_clients,
    )
