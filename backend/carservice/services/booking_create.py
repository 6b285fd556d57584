# backend/carservice/services/booking_create.py
"""
Booking creation protocol.

Runs inside one UnitOfWork (ledger lock taken on entry):

1. Resolve services → total duration and price
2. end_time = start_time + total duration
3. Re-run the availability engine; start_time must still be offered
4. Pick the first active bay free for [start_time, end_time)
5. Insert the pending booking with its bay
6. Attach line items with price/duration copied from the catalog
7. Return the booking (bay and line items loaded)

Any exception rolls the whole transaction back; no booking row ever
exists without its line items.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from ..database import UnitOfWork
from ..models.tables import Bookings as DBBookings
from .errors import NoBayAvailableError, PersistenceError, SlotUnavailableError, UnknownServiceError
from .events import emit_event
from .slots.availability import compute_available_slots, find_free_bay, load_snapshot
from .slots.config import minutes_to_db_time, minutes_to_time_str, time_str_to_minutes
from .slots.queries import get_active_bays, get_services, insert_booking

logger = logging.getLogger(__name__)


def create_booking(
    uow: UnitOfWork,
    *,
    user_id: int,
    vehicle_id: int,
    service_ids: list[int],
    booking_date: date,
    start_time: str,
    notes: str | None = None,
) -> DBBookings:
    """
    Create a pending booking for start_time on booking_date.

    Raises:
        UnknownServiceError: A service id is not in the catalog.
        SlotUnavailableError: start_time is not in the current availability.
        NoBayAvailableError: Every active bay is busy for the exact interval.
        PersistenceError: The store failed; nothing was written.
    """
    start_min = time_str_to_minutes(start_time)
    requested_slot = minutes_to_time_str(start_min)

    try:
        with uow as db:
            # Step 1: services
            services = get_services(db, service_ids)
            found = {service.id for service in services}
            missing = [sid for sid in dict.fromkeys(service_ids) if sid not in found]
            if missing:
                raise UnknownServiceError(missing)

            total_duration = sum(service.duration_minutes for service in services)
            total_price = sum((Decimal(service.price) for service in services), Decimal("0"))

            # Step 2: end time
            end_min = start_min + total_duration

            # Step 3: re-validate against the ledger as it is now
            snapshot = load_snapshot(db, booking_date)
            available = compute_available_slots(snapshot, total_duration)
            if requested_slot not in available:
                logger.info(
                    f"Slot rejected: date={booking_date} time={requested_slot} "
                    f"user_id={user_id}"
                )
                raise SlotUnavailableError(requested_slot)

            # Step 4: bay for the exact interval
            bay_id = find_free_bay(snapshot, start_min, end_min)
            if bay_id is None:
                logger.info(
                    f"No free bay: date={booking_date} "
                    f"{requested_slot}-{minutes_to_time_str(end_min)}"
                )
                raise NoBayAvailableError()
            bay = next(b for b in get_active_bays(db) if b.id == bay_id)

            # Steps 5-6: booking + line items
            booking = insert_booking(
                db,
                user_id=user_id,
                vehicle_id=vehicle_id,
                bay=bay,
                target_date=booking_date,
                start_time=minutes_to_db_time(start_min),
                end_time=minutes_to_db_time(end_min),
                total_price=total_price,
                services=services,
                notes=notes,
            )
    except SQLAlchemyError:
        logger.exception(f"Booking creation failed: date={booking_date} time={requested_slot}")
        raise PersistenceError("Failed to create booking.")

    logger.info(
        f"Booking created: booking_id={booking.id}, user_id={user_id}, "
        f"bay_id={booking.service_bay_id}, time={booking_date} {requested_slot}"
    )

    emit_event("booking_created", {
        "booking_id": booking.id,
        "user_id": user_id,
        "booking_date": booking.booking_date,
        "start_time": requested_slot,
    })

    return booking
