# backend/carservice/services/booking_lifecycle.py
"""
Status transitions, rescheduling and bay reassignment for existing
bookings.

Bookings are never deleted; cancellation is a status change that also
releases the booking's interval from every availability calculation.
"""

import logging
from dataclasses import replace
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..database import UnitOfWork
from ..models.tables import Bookings as DBBookings, ServiceBays as DBServiceBays
from .errors import (
    BookingNotFoundError,
    BookingStateError,
    NoBayAvailableError,
    PersistenceError,
    SlotUnavailableError,
)
from .events import emit_event
from .slots.availability import bay_is_free, compute_available_slots, count_conflicts, find_free_bay, load_snapshot
from .slots.config import intervals_overlap, minutes_to_db_time, minutes_to_time_str, time_str_to_minutes
from .slots.queries import get_active_bays, get_ledger
from .slots.snapshot import CalendarSnapshot

logger = logging.getLogger(__name__)

BOOKING_STATUSES = (
    "pending",
    "confirmed",
    "in_progress",
    "completed",
    "cancelled",
    "no_show",
)

# Statuses a customer can no longer cancel from
NON_CANCELLABLE = ("completed", "cancelled")

ADMIN_CANCEL_REASON = "Cancelled by admin"


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _load_booking(db: Session, booking_id: int) -> DBBookings | None:
    return (
        db.query(DBBookings)
        .options(selectinload(DBBookings.line_items), selectinload(DBBookings.bay))
        .filter(DBBookings.id == booking_id)
        .first()
    )


def _booking_date(booking: DBBookings) -> date:
    return datetime.strptime(booking.booking_date, "%Y-%m-%d").date()


def _without_booking(snapshot: CalendarSnapshot, booking_id: int) -> CalendarSnapshot:
    return replace(
        snapshot,
        ledger=tuple(entry for entry in snapshot.ledger if entry.booking_id != booking_id),
    )


def _bay_snapshot(db: Session, booking_id: int, target_date: date) -> CalendarSnapshot:
    """Bay pool and ledger for target_date, without booking_id's own entry."""
    return CalendarSnapshot(
        target_date=target_date,
        is_blocked=False,
        hours=None,
        active_bay_ids=tuple(bay.id for bay in get_active_bays(db)),
        ledger=tuple(entry for entry in get_ledger(db, target_date) if entry.booking_id != booking_id),
    )


def _pick_bay(
    db: Session,
    snapshot: CalendarSnapshot,
    current_bay_id: int | None,
    start_min: int,
    end_min: int,
) -> DBServiceBays:
    """
    Bay for [start_min, end_min): the current one while it is still free,
    otherwise the first free active bay.

    Raises:
        NoBayAvailableError
    """
    if count_conflicts(snapshot.ledger, start_min, end_min) >= snapshot.active_bay_count:
        raise NoBayAvailableError()

    if bay_is_free(snapshot, current_bay_id, start_min, end_min):
        bay_id = current_bay_id
    else:
        bay_id = find_free_bay(snapshot, start_min, end_min)
        if bay_id is None:
            raise NoBayAvailableError()

    return next(bay for bay in get_active_bays(db) if bay.id == bay_id)


# ── Reads ────────────────────────────────────────────────────────────────


def get_booking(db: Session, booking_id: int, user_id: int | None = None) -> DBBookings:
    """
    Booking by id. When user_id is given, only that user's booking is visible.

    Raises:
        BookingNotFoundError
    """
    booking = _load_booking(db, booking_id)
    if not booking or (user_id is not None and booking.user_id != user_id):
        raise BookingNotFoundError(booking_id)
    return booking


def list_user_bookings(db: Session, user_id: int) -> list[DBBookings]:
    """User's bookings, newest date first, latest start first within a day."""
    return (
        db.query(DBBookings)
        .options(selectinload(DBBookings.line_items), selectinload(DBBookings.bay))
        .filter(DBBookings.user_id == user_id)
        .order_by(DBBookings.booking_date.desc(), DBBookings.start_time.desc())
        .all()
    )


def list_bookings(
    db: Session,
    status: str | None = None,
    booking_date: str | None = None,
    user_id: int | None = None,
    page: int = 1,
    per_page: int = 15,
) -> tuple[list[DBBookings], int]:
    """
    Admin listing with optional filters, one page at a time.

    Returns:
        (bookings on the requested page, total matching bookings)
    """
    query = db.query(DBBookings)
    if status:
        query = query.filter(DBBookings.status == status)
    if booking_date:
        query = query.filter(DBBookings.booking_date == booking_date)
    if user_id is not None:
        query = query.filter(DBBookings.user_id == user_id)

    total = query.count()
    bookings = (
        query
        .options(selectinload(DBBookings.line_items), selectinload(DBBookings.bay))
        .order_by(DBBookings.booking_date.desc(), DBBookings.start_time.desc(), DBBookings.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return bookings, total


# ── Writes ───────────────────────────────────────────────────────────────


def cancel_booking(
    uow: UnitOfWork,
    booking_id: int,
    user_id: int,
    reason: str,
) -> DBBookings:
    """
    Customer cancellation.

    Raises:
        BookingNotFoundError: Missing or owned by someone else.
        BookingStateError: Booking is completed or already cancelled.
    """
    try:
        with uow as db:
            booking = get_booking(db, booking_id, user_id=user_id)
            if booking.status in NON_CANCELLABLE:
                raise BookingStateError("This booking cannot be cancelled.")

            now = _now()
            booking.status = "cancelled"
            booking.cancellation_reason = reason
            booking.cancelled_at = now
            booking.updated_at = now
    except SQLAlchemyError:
        logger.exception(f"Cancel failed: booking_id={booking_id}")
        raise PersistenceError()

    logger.info(f"Booking cancelled: booking_id={booking_id}, user_id={user_id}")
    emit_event("booking_cancelled", {
        "booking_id": booking_id,
        "user_id": user_id,
        "reason": reason,
    })
    return booking


def reschedule_booking(
    uow: UnitOfWork,
    booking_id: int,
    user_id: int,
    *,
    booking_date: date | None = None,
    start_time: str | None = None,
    notes: str | None = None,
    update_notes: bool = False,
) -> DBBookings:
    """
    Customer change of date, start time and/or notes on a pending booking.

    A new date or start time must be in the current availability with the
    booking's own interval released. The booking keeps its bay when that
    bay is still free at the new time. Duration and line items never change.

    Raises:
        BookingNotFoundError: Missing or owned by someone else.
        BookingStateError: Booking is not pending.
        SlotUnavailableError: New start time is not offered.
        NoBayAvailableError: Every active bay is busy for the new interval.
    """
    try:
        with uow as db:
            booking = get_booking(db, booking_id, user_id=user_id)
            if booking.status != "pending":
                raise BookingStateError("Only pending bookings can be updated.")

            old_date = _booking_date(booking)
            old_start = time_str_to_minutes(booking.start_time)
            duration = time_str_to_minutes(booking.end_time) - old_start

            new_date = booking_date or old_date
            new_start = time_str_to_minutes(start_time) if start_time else old_start
            moved = (new_date, new_start) != (old_date, old_start)

            if moved:
                requested_slot = minutes_to_time_str(new_start)
                snapshot = _without_booking(load_snapshot(db, new_date), booking.id)
                if requested_slot not in compute_available_slots(snapshot, duration):
                    raise SlotUnavailableError(requested_slot)

                booking.bay = _pick_bay(db, snapshot, booking.service_bay_id, new_start, new_start + duration)
                booking.booking_date = new_date.isoformat()
                booking.start_time = minutes_to_db_time(new_start)
                booking.end_time = minutes_to_db_time(new_start + duration)

            if update_notes:
                booking.notes = notes
            booking.updated_at = _now()
    except SQLAlchemyError:
        logger.exception(f"Reschedule failed: booking_id={booking_id}")
        raise PersistenceError()

    if moved:
        logger.info(
            f"Booking rescheduled: booking_id={booking_id}, "
            f"{old_date} {minutes_to_time_str(old_start)} → {booking.booking_date} {requested_slot}, "
            f"bay_id={booking.service_bay_id}"
        )
        emit_event("booking_rescheduled", {
            "booking_id": booking_id,
            "user_id": user_id,
            "booking_date": booking.booking_date,
            "start_time": requested_slot,
        })
    return booking


def update_booking_status(
    uow: UnitOfWork,
    booking_id: int,
    status: str,
    reason: str | None = None,
) -> DBBookings:
    """
    Admin status change.

    Moving to "cancelled" stamps cancelled_at and records the reason
    (default: "Cancelled by admin"). Moving a cancelled booking back to a
    live status claims its interval again: the old bay if still free,
    otherwise another free bay.

    Raises:
        BookingStateError: Unknown status.
        BookingNotFoundError
        NoBayAvailableError: The interval was rebooked since cancellation.
    """
    if status not in BOOKING_STATUSES:
        raise BookingStateError(f"Unknown booking status: {status}")

    try:
        with uow as db:
            booking = get_booking(db, booking_id)
            previous = booking.status

            if previous == "cancelled" and status != "cancelled":
                start_min = time_str_to_minutes(booking.start_time)
                end_min = time_str_to_minutes(booking.end_time)
                snapshot = _bay_snapshot(db, booking.id, _booking_date(booking))
                booking.bay = _pick_bay(db, snapshot, booking.service_bay_id, start_min, end_min)
                booking.cancelled_at = None
                booking.cancellation_reason = None

            now = _now()
            booking.status = status
            booking.updated_at = now
            if status == "cancelled":
                booking.cancelled_at = now
                booking.cancellation_reason = reason or ADMIN_CANCEL_REASON
    except SQLAlchemyError:
        logger.exception(f"Status update failed: booking_id={booking_id}")
        raise PersistenceError()

    logger.info(f"Booking status changed: booking_id={booking_id}, {previous} → {status}")
    emit_event("booking_status_changed", {
        "booking_id": booking_id,
        "from": previous,
        "to": status,
    })
    return booking


def assign_bay(uow: UnitOfWork, booking_id: int, bay_id: int) -> DBBookings:
    """
    Admin bay reassignment.

    The target bay must be active and free for the booking's interval
    (the booking itself excluded).

    Raises:
        BookingNotFoundError
        BookingStateError: Booking is cancelled.
        NoBayAvailableError: Bay inactive, missing, or busy.
    """
    try:
        with uow as db:
            booking = get_booking(db, booking_id)
            if booking.status == "cancelled":
                raise BookingStateError("A cancelled booking cannot be assigned a bay.")

            bay = next((b for b in get_active_bays(db) if b.id == bay_id), None)
            if bay is None:
                raise NoBayAvailableError()

            start_min = time_str_to_minutes(booking.start_time)
            end_min = time_str_to_minutes(booking.end_time)
            booking_date = _booking_date(booking)
            for entry in get_ledger(db, booking_date):
                if entry.booking_id == booking.id or entry.bay_id != bay_id:
                    continue
                if intervals_overlap(entry.start_min, entry.end_min, start_min, end_min):
                    raise NoBayAvailableError()

            booking.bay = bay
            booking.updated_at = _now()
    except SQLAlchemyError:
        logger.exception(f"Bay assignment failed: booking_id={booking_id}")
        raise PersistenceError()

    logger.info(f"Booking bay assigned: booking_id={booking_id}, bay_id={bay_id}")
    return booking
