"""Tests for the PostgREST record source against a mocked HTTP session."""

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from salon_metrics.config import SourceConfig
from salon_metrics.exceptions import FetchFailure
from salon_metrics.source.postgrest import PostgrestSource, build_params, format_value, make_session

CONFIG = SourceConfig(url="https://demo.supabase.co", api_key="anon-key")


def _response(status: int = 200, payload=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.content = b"" if payload is None else b"x"
    resp.json.return_value = payload
    return resp


@pytest.fixture
def session() -> MagicMock:
    s = MagicMock()
    s.headers = {}
    return s


def test_format_value() -> None:
    assert format_value(True) == "true"
    assert format_value(3) == "3"
    assert format_value(datetime(2025, 3, 1, 9, 30)) == "2025-03-01T09:30:00"


def test_build_params() -> None:
    params = build_params(
        "id, amount",
        eq={"establishment_id": "est-1", "deleted_at": None},
        gte={"sale_date": "2025-03-01T00:00:00-03:00"},
        lte={"sale_date": "2025-03-31T23:59:59-03:00"},
        order="sale_date",
        descending=True,
    )
    assert params == [
        ("select", "id, amount"),
        ("establishment_id", "eq.est-1"),
        ("deleted_at", "is.null"),
        ("sale_date", "gte.2025-03-01T00:00:00-03:00"),
        ("sale_date", "lte.2025-03-31T23:59:59-03:00"),
        ("order", "sale_date.desc"),
    ]


def test_headers_carry_key_and_schema(session: MagicMock) -> None:
    PostgrestSource(CONFIG, session=session)
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"
    assert session.headers["Accept-Profile"] == "public"


def test_select(session: MagicMock) -> None:
    session.request.return_value = _response(payload=[{"id": "s1", "name": "Corte"}])
    source = PostgrestSource(CONFIG, session=session)

    rows = source.select("services", "id, name", eq={"establishment_id": "est-1"})

    assert rows == [{"id": "s1", "name": "Corte"}]
    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == "https://demo.supabase.co/rest/v1/services"
    assert ("establishment_id", "eq.est-1") in session.request.call_args.kwargs["params"]


def test_rpc_posts_json(session: MagicMock) -> None:
    session.request.return_value = _response(payload={"booked": []})
    source = PostgrestSource(CONFIG, session=session)

    assert source.rpc("get_public_availability", {"establishment": "est-1"}) == {"booked": []}
    method, url = session.request.call_args.args
    assert method == "POST"
    assert url.endswith("/rest/v1/rpc/get_public_availability")
    assert session.request.call_args.kwargs["json"] == {"establishment": "est-1"}


def test_rpc_without_body_returns_none(session: MagicMock) -> None:
    session.request.return_value = _response(status=204)
    assert PostgrestSource(CONFIG, session=session).rpc("noop", {}) is None


def test_http_error_raises_fetch_failure(session: MagicMock) -> None:
    session.request.return_value = _response(status=500, text="boom")
    source = PostgrestSource(CONFIG, session=session)

    with pytest.raises(FetchFailure, match="HTTP 500: boom") as exc_info:
        source.select("sales")
    assert exc_info.value.status_code == 500


def test_connection_error_raises_fetch_failure(session: MagicMock) -> None:
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(FetchFailure, match="refused"):
        PostgrestSource(CONFIG, session=session).select("sales")


def test_non_list_select_payload_is_rejected(session: MagicMock) -> None:
    session.request.return_value = _response(payload={"message": "odd"})
    with pytest.raises(FetchFailure, match="Unexpected payload"):
        PostgrestSource(CONFIG, session=session).select("sales")


def test_make_session_mounts_retry_adapter() -> None:
    s = make_session(timeout=5, retries=2)
    adapter = s.get_adapter("https://demo.supabase.co")
    assert adapter.max_retries.total == 2
    assert 503 in adapter.max_retries.status_forcelist
    assert adapter.max_retries.is_retry("GET", 503)


def test_rpc_posts_are_not_retried() -> None:
    """A 5xx after the server inserted a booking must not replay the insert."""
    retry = make_session().get_adapter("https://demo.supabase.co").max_retries
    assert not retry.is_retry("POST", 503)
    assert not retry.is_retry("POST", 500)


@pytest.mark.live
@pytest.mark.skipif(
    not (os.environ.get("SALON_SOURCE_URL") and os.environ.get("SALON_SOURCE_KEY")),
    reason="SALON_SOURCE_URL/SALON_SOURCE_KEY not set",
)
def test_live_services_read() -> None:
    source = PostgrestSource(SourceConfig.from_env())
    rows = source.select("services", "id, name", eq={"establishment_id": os.environ.get("SALON_ESTABLISHMENT", "")})
    assert isinstance(rows, list)
