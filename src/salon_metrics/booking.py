"""Public booking: catalog, availability slots and booking creation.

These calls go through the backend's public remote functions, so they work
without an establishment session:

- get_public_catalog(establishment) -> {"services": [...], "professionals": [...]}
- get_public_availability(establishment, professional, day) -> {"booked": [iso, ...]}
- create_public_booking(...) -> new appointment id
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Optional

import pandas as pd

from salon_metrics.config import DEFAULT_TIMEZONE
from salon_metrics.exceptions import BookingError
from salon_metrics.source.base import RecordSource
from salon_metrics.window import to_timestamp

logger = logging.getLogger(__name__)

OPENING_TIME = time(9, 0)
CLOSING_TIME = time(18, 0)
SLOT_MINUTES = 30


@dataclass(frozen=True)
class CatalogService:
    id: str
    name: str
    price: float = 0.0
    duration: int = 0


@dataclass(frozen=True)
class Professional:
    id: str
    name: str


@dataclass(frozen=True)
class Catalog:
    services: list[CatalogService] = field(default_factory=list)
    professionals: list[Professional] = field(default_factory=list)


@dataclass(frozen=True)
class BookingRequest:
    """Booking submitted from the public page.

    Attributes:
        establishment_id: Establishment receiving the booking.
        client_name: Name typed by the client.
        phone: Client phone number.
        service_id: Chosen service.
        professional_id: Chosen professional.
        start_time: Slot start (tz-aware or wall-clock in the report timezone).
        notes: Optional free text.
    """

    establishment_id: str
    client_name: str
    phone: str
    service_id: str
    professional_id: str
    start_time: Any
    notes: Optional[str] = None

    def validate(self) -> None:
        """Raise BookingError naming every missing field."""
        required = {
            "establishment_id": self.establishment_id,
            "client_name": self.client_name,
            "phone": self.phone,
            "service_id": self.service_id,
            "professional_id": self.professional_id,
            "start_time": self.start_time,
        }
        missing = [name for name, value in required.items() if value is None or str(value).strip() == ""]
        if missing:
            raise BookingError(f"Booking is missing required fields: {', '.join(missing)}")


def get_public_catalog(source: RecordSource, establishment_id: str) -> Catalog:
    """Active services and professionals offered on the public booking page."""
    data = source.rpc("get_public_catalog", {"establishment": establishment_id}) or {}
    services = [
        CatalogService(
            id=str(s["id"]),
            name=s.get("name") or "",
            price=float(s.get("price") or 0),
            duration=int(s.get("duration") or 0),
        )
        for s in data.get("services") or []
    ]
    professionals = [
        Professional(id=str(p["id"]), name=p.get("name") or "") for p in data.get("professionals") or []
    ]
    return Catalog(services=services, professionals=professionals)


def get_booked_times(
    source: RecordSource,
    establishment_id: str,
    professional_id: str,
    day: date,
    tz: str = DEFAULT_TIMEZONE,
) -> list[pd.Timestamp]:
    """Start times already booked for a professional on day."""
    data = source.rpc(
        "get_public_availability",
        {"establishment": establishment_id, "professional": professional_id, "day": day.isoformat()},
    ) or {}
    booked = []
    for value in data.get("booked") or []:
        try:
            booked.append(to_timestamp(value, tz))
        except (TypeError, ValueError):
            logger.warning("Ignoring unparseable booked time %r", value)
    return booked


def day_slots(
    day: date,
    tz: str = DEFAULT_TIMEZONE,
    opening: time = OPENING_TIME,
    closing: time = CLOSING_TIME,
    step_minutes: int = SLOT_MINUTES,
) -> list[pd.Timestamp]:
    """Slot start times from opening to closing (inclusive) every step_minutes."""
    start = to_timestamp(pd.Timestamp.combine(day, opening), tz)
    end = to_timestamp(pd.Timestamp.combine(day, closing), tz)
    step = pd.Timedelta(minutes=step_minutes)
    slots = []
    cur = start
    while cur <= end:
        slots.append(cur)
        cur = cur + step
    return slots


def free_slots(
    day: date,
    booked: list[pd.Timestamp],
    tz: str = DEFAULT_TIMEZONE,
    **slot_kwargs: Any,
) -> list[pd.Timestamp]:
    """Slots of day that no booking occupies (same day, hour and minute)."""
    taken = set()
    for b in booked:
        local = to_timestamp(b, tz)
        taken.add((local.date(), local.hour, local.minute))
    return [s for s in day_slots(day, tz, **slot_kwargs) if (s.date(), s.hour, s.minute) not in taken]


def create_public_booking(
    source: RecordSource,
    request: BookingRequest,
    tz: str = DEFAULT_TIMEZONE,
) -> str:
    """Create the booking and return the new appointment id.

    Raises:
        BookingError: If a required field is missing (no remote call is made).
        FetchFailure: If the remote call fails.
    """
    request.validate()
    start = to_timestamp(request.start_time, tz)
    result = source.rpc(
        "create_public_booking",
        {
            "establishment": request.establishment_id,
            "client_name": request.client_name.strip(),
            "phone": request.phone.strip(),
            "service": request.service_id,
            "professional": request.professional_id,
            "start_time": start.isoformat(),
            "notes": request.notes or None,
        },
    )
    logger.info("Created public booking %s for %s at %s", result, request.establishment_id, start)
    return str(result)
