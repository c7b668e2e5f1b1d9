"""Tests for the public booking flow."""

from datetime import date, time

import pandas as pd
import pytest

from salon_metrics.booking import (
    BookingRequest,
    create_public_booking,
    day_slots,
    free_slots,
    get_booked_times,
    get_public_catalog,
)
from salon_metrics.exceptions import BookingError, FetchFailure
from salon_metrics.source import InMemoryRecordSource

DAY = date(2025, 3, 20)


def _local(text: str) -> pd.Timestamp:
    return pd.Timestamp(text).tz_localize("America/Sao_Paulo")


@pytest.fixture
def booking_source() -> InMemoryRecordSource:
    received: list[dict] = []

    def catalog(params: dict) -> dict:
        return {
            "services": [{"id": 1, "name": "Corte", "price": "45.00", "duration": 30}],
            "professionals": [{"id": "p1", "name": "Rafa"}],
        }

    def availability(params: dict) -> dict:
        return {"booked": ["2025-03-20T10:00:00-03:00", "2025-03-20T17:30:00-03:00", "garbage"]}

    def create(params: dict) -> str:
        received.append(params)
        return "appt-42"

    source = InMemoryRecordSource(
        functions={
            "get_public_catalog": catalog,
            "get_public_availability": availability,
            "create_public_booking": create,
        },
        tz="America/Sao_Paulo",
    )
    source.received = received  # type: ignore[attr-defined]
    return source


def test_day_slots_every_half_hour_inclusive() -> None:
    slots = day_slots(DAY, "America/Sao_Paulo")
    assert len(slots) == 19
    assert slots[0] == _local("2025-03-20 09:00")
    assert slots[-1] == _local("2025-03-20 18:00")


def test_day_slots_custom_hours() -> None:
    slots = day_slots(DAY, "America/Sao_Paulo", opening=time(10, 0), closing=time(11, 0), step_minutes=15)
    assert [s.strftime("%H:%M") for s in slots] == ["10:00", "10:15", "10:30", "10:45", "11:00"]


def test_free_slots_skip_booked_times(booking_source: InMemoryRecordSource) -> None:
    booked = get_booked_times(booking_source, "est-1", "p1", DAY, "America/Sao_Paulo")
    assert booked == [_local("2025-03-20 10:00"), _local("2025-03-20 17:30")]

    free = free_slots(DAY, booked, "America/Sao_Paulo")

    assert len(free) == 17
    assert _local("2025-03-20 10:00") not in free
    assert _local("2025-03-20 10:30") in free


def test_booking_on_another_day_does_not_block() -> None:
    free = free_slots(DAY, [_local("2025-03-21 10:00")], "America/Sao_Paulo")
    assert len(free) == 19


def test_public_catalog(booking_source: InMemoryRecordSource) -> None:
    catalog = get_public_catalog(booking_source, "est-1")

    assert len(catalog.services) == 1
    service = catalog.services[0]
    assert (service.id, service.name, service.price, service.duration) == ("1", "Corte", 45.0, 30)
    assert [p.name for p in catalog.professionals] == ["Rafa"]


def test_create_public_booking(booking_source: InMemoryRecordSource) -> None:
    request = BookingRequest(
        establishment_id="est-1",
        client_name=" Joana ",
        phone="11999990000",
        service_id="1",
        professional_id="p1",
        start_time="2025-03-20T10:30:00",
    )

    appointment_id = create_public_booking(booking_source, request, "America/Sao_Paulo")

    assert appointment_id == "appt-42"
    params = booking_source.received[0]  # type: ignore[attr-defined]
    assert params["establishment"] == "est-1"
    assert params["client_name"] == "Joana"
    assert params["professional"] == "p1"
    assert params["start_time"] == "2025-03-20T10:30:00-03:00"
    assert params["notes"] is None


def test_incomplete_booking_makes_no_remote_call(booking_source: InMemoryRecordSource) -> None:
    request = BookingRequest(
        establishment_id="est-1",
        client_name="Joana",
        phone="  ",
        service_id="1",
        professional_id="",
        start_time="2025-03-20T10:30:00",
    )

    with pytest.raises(BookingError, match="phone, professional_id"):
        create_public_booking(booking_source, request)

    assert booking_source.calls == []


def test_unavailable_remote_function() -> None:
    with pytest.raises(FetchFailure):
        get_public_catalog(InMemoryRecordSource(), "est-1")
