"""Example: Public booking against the hosted backend

Lists the public catalog, shows free slots for the first professional on a
given day and, with --book, creates a booking in the first free slot.

Prerequisites:
- SALON_SOURCE_URL and SALON_SOURCE_KEY set (anon key is enough)
- The backend exposes get_public_catalog, get_public_availability and
  create_public_booking

Usage:
    python examples/public_booking_example.py est-1 2025-03-20
    python examples/public_booking_example.py est-1 2025-03-20 --book "Joana" 11999990000
"""

import sys

from salon_metrics import SourceConfig
from salon_metrics.booking import (
    BookingRequest,
    create_public_booking,
    free_slots,
    get_booked_times,
    get_public_catalog,
)
from salon_metrics.formatters import format_brl
from salon_metrics.source import PostgrestSource
from salon_metrics.window import parse_date

if len(sys.argv) < 3:
    print(__doc__)
    sys.exit(2)

establishment = sys.argv[1]
day = parse_date(sys.argv[2])

source = PostgrestSource(SourceConfig.from_env())
catalog = get_public_catalog(source, establishment)

print("=" * 80)
print("Services")
print("=" * 80)
for s in catalog.services:
    print(f"{s.name:<30} {s.duration:>4} min  {format_brl(s.price)}")

if not catalog.professionals or not catalog.services:
    print("\nNothing to book.")
    sys.exit(0)

professional = catalog.professionals[0]
booked = get_booked_times(source, establishment, professional.id, day)
free = free_slots(day, booked)

print(f"\nFree slots for {professional.name} on {day}:")
print(", ".join(s.strftime("%H:%M") for s in free) or "(none)")

if "--book" in sys.argv and free:
    i = sys.argv.index("--book")
    request = BookingRequest(
        establishment_id=establishment,
        client_name=sys.argv[i + 1],
        phone=sys.argv[i + 2],
        service_id=catalog.services[0].id,
        professional_id=professional.id,
        start_time=free[0],
    )
    appointment_id = create_public_booking(source, request)
    print(f"\nBooked {free[0]:%H:%M} ({appointment_id})")
