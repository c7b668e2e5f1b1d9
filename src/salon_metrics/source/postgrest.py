"""HTTP record source for a hosted PostgREST backend.

Tables are read with ``GET /rest/v1/<table>`` and remote functions are
called with ``POST /rest/v1/rpc/<function>``. Filters use PostgREST's
operator syntax::

    GET /rest/v1/sales?select=amount&establishment_id=eq.<id>
        &sale_date=gte.2025-03-01T00:00:00-03:00
        &sale_date=lte.2025-03-31T23:59:59.999999-03:00

Environment (see SourceConfig.from_env):
    SALON_SOURCE_URL, SALON_SOURCE_KEY, SALON_SOURCE_TIMEOUT, SALON_SOURCE_RETRIES
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from salon_metrics.config import SourceConfig
from salon_metrics.exceptions import FetchFailure
from salon_metrics.source.base import RecordSource

logger = logging.getLogger(__name__)


def make_session(timeout: float = 30.0, retries: int = 3) -> requests.Session:
    """Create a requests Session with retry logic and default timeout.

    Configures the session with:
    - Retry adapter for HTTP/HTTPS with exponential backoff
    - Retries on 429, 500, 502, 503, 504 status codes for GET, HEAD and
      OPTIONS only; RPC POSTs (bookings included) are sent once
    - Default timeout for all requests

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts.

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.5,  # 0.5, 1.0, 2.0, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def format_value(value: Any) -> str:
    """Render a filter value the way PostgREST expects it.

    Examples:
        >>> format_value(True)
        'true'
        >>> format_value(datetime(2025, 3, 1, 9, 30))
        '2025-03-01T09:30:00'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def build_params(
    columns: str,
    eq: Optional[Mapping[str, Any]] = None,
    gte: Optional[Mapping[str, Any]] = None,
    lte: Optional[Mapping[str, Any]] = None,
    order: Optional[str] = None,
    descending: bool = False,
) -> list[tuple[str, str]]:
    """Query-string pairs for a filtered select (a column may repeat)."""
    params: list[tuple[str, str]] = [("select", columns)]
    for col, value in (eq or {}).items():
        params.append((col, "is.null" if value is None else f"eq.{format_value(value)}"))
    for col, value in (gte or {}).items():
        params.append((col, f"gte.{format_value(value)}"))
    for col, value in (lte or {}).items():
        params.append((col, f"lte.{format_value(value)}"))
    if order:
        params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
    return params


def ensure_ok(resp: requests.Response, msg: str) -> None:
    """Raise FetchFailure if the HTTP response is not successful."""
    if not (200 <= resp.status_code < 300):
        raise FetchFailure(
            f"{msg}. HTTP {resp.status_code}: {resp.text[:400]}",
            status_code=resp.status_code,
        )


class PostgrestSource(RecordSource):
    """Record source backed by a PostgREST endpoint.

    Example:
        >>> from salon_metrics.config import SourceConfig
        >>> source = PostgrestSource(SourceConfig.from_env())
        >>> source.select("services", "id, name", eq={"establishment_id": "est-1"})
        [{'id': 'svc-1', 'name': 'Corte'}]
    """

    def __init__(self, config: SourceConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or make_session(config.timeout, config.retries)
        self.session.headers.update(
            {
                "apikey": config.api_key,
                "Authorization": f"Bearer {config.api_key}",
                "Accept": "application/json",
                "Accept-Profile": config.schema,
                "Content-Profile": config.schema,
            }
        )

    def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: Optional[Mapping[str, Any]] = None,
        gte: Optional[Mapping[str, Any]] = None,
        lte: Optional[Mapping[str, Any]] = None,
        order: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        url = f"{self.config.rest_url}/{table}"
        params = build_params(columns, eq, gte, lte, order, descending)
        logger.debug("GET %s %s", url, params)
        data = self._send("GET", url, f"Failed to read {table}", params=params)
        if not isinstance(data, list):
            raise FetchFailure(f"Unexpected payload reading {table}: {type(data).__name__}")
        return data

    def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        url = f"{self.config.rest_url}/rpc/{function}"
        logger.debug("POST %s", url)
        return self._send("POST", url, f"Remote function {function} failed", json=dict(params))

    def _send(self, method: str, url: str, msg: str, **kwargs: Any) -> Any:
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise FetchFailure(f"{msg}: {e}") from e

        ensure_ok(resp, msg)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise FetchFailure(f"{msg}: response is not JSON ({e})") from e
