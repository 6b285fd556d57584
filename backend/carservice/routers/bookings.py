# backend/carservice/routers/bookings.py
"""
Customer booking endpoints.

POST  /bookings/check-availability  - slots for a date and set of services
POST  /bookings                     - create a booking (slot re-checked, bay assigned)
GET   /bookings                     - caller's bookings
GET   /bookings/{id}                - one of the caller's bookings
PATCH /bookings/{id}                - move a pending booking or edit its notes
POST  /bookings/{id}/cancel         - cancel with a reason
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker

from ..auth import get_current_user_id
from ..database import UnitOfWork, get_db, get_session_factory
from ..schemas.bookings import (
    AvailabilityRequest,
    AvailabilityResponse,
    BookingCancel,
    BookingCreate,
    BookingEnvelope,
    BookingRead,
    BookingUpdate,
)
from ..services.booking_create import create_booking
from ..services.booking_lifecycle import cancel_booking, get_booking, list_user_bookings, reschedule_booking
from ..services.slots import get_available_slots
from ..services.slots.queries import get_services

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _validate_booking_date(target_date: date) -> None:
    if target_date < date.today():
        raise HTTPException(
            status_code=422,
            detail="Date cannot be in the past",
        )


def _validate_service_ids(db: Session, service_ids: list[int]) -> None:
    """Every requested id must exist in the catalog and be active."""
    services = get_services(db, service_ids)
    active = {service.id for service in services if service.is_active}
    unknown = [sid for sid in dict.fromkeys(service_ids) if sid not in active]
    if unknown:
        raise HTTPException(
            status_code=422,
            detail=f"Service not found or inactive: {unknown}",
        )


@router.post("/check-availability", response_model=AvailabilityResponse)
def check_availability(
    data: AvailabilityRequest,
    db: Session = Depends(get_db),
    _user_id: int = Depends(get_current_user_id),
):
    _validate_booking_date(data.date)
    _validate_service_ids(db, data.service_ids)

    slots = get_available_slots(db, data.date, data.service_ids)
    return AvailabilityResponse(date=data.date, available_slots=slots)


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_booking_endpoint(
    data: BookingCreate,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
    user_id: int = Depends(get_current_user_id),
):
    _validate_booking_date(data.booking_date)
    _validate_service_ids(db, data.service_ids)
    # end the read transaction before taking the ledger lock
    db.rollback()

    booking = create_booking(
        UnitOfWork(session_factory),
        user_id=user_id,
        vehicle_id=data.vehicle_id,
        service_ids=data.service_ids,
        booking_date=data.booking_date,
        start_time=data.start_time,
        notes=data.notes,
    )
    return BookingEnvelope(
        message="Booking created successfully.",
        booking=BookingRead.model_validate(booking),
    )


@router.get("", response_model=dict[str, list[BookingRead]])
def list_bookings_endpoint(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    bookings = list_user_bookings(db, user_id)
    return {"bookings": [BookingRead.model_validate(b) for b in bookings]}


@router.get("/{id}", response_model=dict[str, BookingRead])
def get_booking_endpoint(
    id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    booking = get_booking(db, id, user_id=user_id)
    return {"booking": BookingRead.model_validate(booking)}


@router.patch("/{id}", response_model=BookingEnvelope)
def update_booking_endpoint(
    id: int,
    data: BookingUpdate,
    session_factory: sessionmaker = Depends(get_session_factory),
    user_id: int = Depends(get_current_user_id),
):
    if data.booking_date is not None:
        _validate_booking_date(data.booking_date)

    booking = reschedule_booking(
        UnitOfWork(session_factory),
        id,
        user_id=user_id,
        booking_date=data.booking_date,
        start_time=data.start_time,
        notes=data.notes,
        update_notes="notes" in data.model_fields_set,
    )
    return BookingEnvelope(
        message="Booking updated successfully.",
        booking=BookingRead.model_validate(booking),
    )


@router.post("/{id}/cancel", response_model=BookingEnvelope)
def cancel_booking_endpoint(
    id: int,
    data: BookingCancel,
    session_factory: sessionmaker = Depends(get_session_factory),
    user_id: int = Depends(get_current_user_id),
):
    booking = cancel_booking(
        UnitOfWork(session_factory),
        id,
        user_id=user_id,
        reason=data.cancellation_reason,
    )
    return BookingEnvelope(
        message="Booking cancelled successfully.",
        booking=BookingRead.model_validate(booking),
    )
