"""Shared reductions used by every facet and report.

Grouping keeps the first-encountered order of keys; sorts that follow use
that order as the tie-breaker so results never depend on sort stability.
"""

from __future__ import annotations

import math
from typing import Optional

import pandas as pd

from salon_metrics.config import PLACEHOLDER_NAME
from salon_metrics.models import Goal
from salon_metrics.window import inactivity_cutoff

SERVICE_GROUP_COLUMNS = ["service_id", "service_name", "qty", "total"]
CLIENT_GROUP_COLUMNS = ["client_id", "qty", "total"]


def sum_amount(sales: pd.DataFrame) -> float:
    """Exact (correctly rounded) sum of amounts, independent of row order."""
    return math.fsum(sales["amount"]) if not sales.empty else 0.0


def safe_ratio(numerator: float, denominator: float, default: Optional[float] = 0.0) -> Optional[float]:
    """numerator / denominator, or default when the denominator is not positive."""
    if not denominator or denominator <= 0:
        return default
    return numerator / denominator


def lookup_name(names: dict[str, str], key: object) -> str:
    """Display name for an id, or the placeholder dash when it does not resolve."""
    if key is None or (not isinstance(key, str) and pd.isna(key)):
        return PLACEHOLDER_NAME
    return names.get(str(key), PLACEHOLDER_NAME)


def sort_desc(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Sort descending by column; ties keep their current row order."""
    if df.empty:
        return df.reset_index(drop=True)
    ordered = df.assign(_order=range(len(df)))
    ordered = ordered.sort_values([column, "_order"], ascending=[False, True])
    return ordered.drop(columns="_order").reset_index(drop=True)


def sort_asc(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Sort ascending by column; ties keep their current row order."""
    if df.empty:
        return df.reset_index(drop=True)
    ordered = df.assign(_order=range(len(df)))
    ordered = ordered.sort_values([column, "_order"], ascending=[True, True])
    return ordered.drop(columns="_order").reset_index(drop=True)


def _group(sales: pd.DataFrame, key: str) -> pd.DataFrame:
    grouped = sales.groupby(key, sort=False, dropna=False).agg(
        qty=("amount", "size"),
        total=("amount", lambda s: math.fsum(s)),
    )
    grouped = grouped.reset_index()
    grouped["qty"] = grouped["qty"].astype(int)
    grouped["total"] = grouped["total"].astype(float)
    return grouped


def group_by_service(sales: pd.DataFrame, services: dict[str, str]) -> pd.DataFrame:
    """Sales count and revenue per service, in first-encountered order.

    Returns:
        DataFrame with columns: service_id, service_name, qty, total
    """
    if sales.empty:
        return pd.DataFrame(columns=SERVICE_GROUP_COLUMNS)
    grouped = _group(sales, "service_id")
    grouped["service_name"] = [lookup_name(services, k) for k in grouped["service_id"]]
    return grouped[SERVICE_GROUP_COLUMNS]


def group_by_client(sales: pd.DataFrame) -> pd.DataFrame:
    """Sales count and revenue per client, in first-encountered order.

    Returns:
        DataFrame with columns: client_id, qty, total
    """
    if sales.empty:
        return pd.DataFrame(columns=CLIENT_GROUP_COLUMNS)
    return _group(sales, "client_id")[CLIENT_GROUP_COLUMNS]


def unique_client_count(sales: pd.DataFrame) -> int:
    return int(sales["client_id"].nunique(dropna=False)) if not sales.empty else 0


def goal_progress(goal: Optional[Goal]) -> tuple[Optional[float], Optional[float]]:
    """Progress percentage and amount still missing for a goal.

    Progress is clamped to [0, 100] and only defined for a positive target;
    the remaining amount is never negative.

    Returns:
        (progress_pct, remaining), both None when there is no goal.
    """
    if goal is None:
        return None, None
    current = goal.current_or_zero
    remaining = max(0.0, goal.target_amount - current)
    if goal.target_amount > 0:
        pct = min(100.0, max(0.0, current / goal.target_amount * 100))
    else:
        pct = None
    return pct, remaining


def inactive_mask(clients: pd.DataFrame, now: pd.Timestamp, threshold_days: int) -> pd.Series:
    """True for clients never served or last served before the inactivity cutoff."""
    cutoff = inactivity_cutoff(now, threshold_days)
    last = clients["last_service_date"]
    return last.isna() | (last < cutoff)
