# backend/carservice/services/slots/queries.py
"""
Data-access functions consumed by the availability engine and the
booking protocol. Each call names its inputs explicitly; nothing here
walks the ORM relationship graph.
"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from ...models.tables import (
    BlockedDates as DBBlockedDates,
    BookingServices as DBBookingServices,
    Bookings as DBBookings,
    ServiceBays as DBServiceBays,
    Services as DBServices,
    WorkingHours as DBWorkingHours,
)
from .config import time_str_to_minutes
from .snapshot import DayHours, LedgerEntry

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


def get_services(db: Session, service_ids: list[int]) -> list[DBServices]:
    """Services for the given ids, in request order, duplicates collapsed."""
    unique_ids = list(dict.fromkeys(service_ids))
    if not unique_ids:
        return []

    rows = db.query(DBServices).filter(DBServices.id.in_(unique_ids)).all()
    by_id = {row.id: row for row in rows}
    return [by_id[sid] for sid in unique_ids if sid in by_id]


def get_working_hours(db: Session, weekday: int) -> DayHours | None:
    """Working hours for weekday (0 = Sunday), or None when not configured."""
    row = (
        db.query(DBWorkingHours)
        .filter(DBWorkingHours.day_of_week == weekday)
        .first()
    )
    if not row:
        return None

    if row.is_closed:
        return DayHours(open_min=0, close_min=0, is_closed=True)

    try:
        return DayHours(
            open_min=time_str_to_minutes(row.open_time),
            close_min=time_str_to_minutes(row.close_time),
        )
    except ValueError:
        logger.warning(f"Malformed working hours for weekday {weekday}, treating as closed")
        return DayHours(open_min=0, close_min=0, is_closed=True)


def is_date_blocked(db: Session, target_date: date) -> bool:
    return (
        db.query(DBBlockedDates.id)
        .filter(DBBlockedDates.date == target_date.isoformat())
        .first()
    ) is not None


def get_active_bays(db: Session) -> list[DBServiceBays]:
    """Active bays ordered by id."""
    return (
        db.query(DBServiceBays)
        .filter(DBServiceBays.is_active == 1)
        .order_by(DBServiceBays.id)
        .all()
    )


def get_ledger(db: Session, target_date: date) -> list[LedgerEntry]:
    """Non-cancelled bookings on target_date, ordered by start time."""
    rows = (
        db.query(
            DBBookings.id,
            DBBookings.start_time,
            DBBookings.end_time,
            DBBookings.service_bay_id,
        )
        .filter(
            DBBookings.booking_date == target_date.isoformat(),
            DBBookings.status != CANCELLED,
        )
        .order_by(DBBookings.start_time, DBBookings.id)
        .all()
    )

    return [
        LedgerEntry(
            booking_id=row.id,
            start_min=time_str_to_minutes(row.start_time),
            end_min=time_str_to_minutes(row.end_time),
            bay_id=row.service_bay_id,
        )
        for row in rows
    ]


def insert_booking(
    db: Session,
    *,
    user_id: int,
    vehicle_id: int,
    bay: DBServiceBays,
    target_date: date,
    start_time: str,
    end_time: str,
    total_price: Decimal,
    services: list[DBServices],
    notes: str | None = None,
) -> DBBookings:
    """
    Add a pending booking and its line items to the session.

    Price and duration are copied from the catalog rows at this moment.
    Nothing is committed here; the caller owns the transaction.
    """
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    booking = DBBookings(
        user_id=user_id,
        vehicle_id=vehicle_id,
        booking_date=target_date.isoformat(),
        start_time=start_time,
        end_time=end_time,
        total_price=total_price,
        status="pending",
        notes=notes,
        cancellation_reason=None,
        cancelled_at=None,
        created_at=now,
        updated_at=now,
    )
    booking.bay = bay
    booking.line_items = [
        DBBookingServices(
            service_id=service.id,
            price=service.price,
            duration_minutes=service.duration_minutes,
            created_at=now,
        )
        for service in services
    ]

    db.add(booking)
    db.flush()
    return booking
