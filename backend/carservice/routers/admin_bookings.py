# backend/carservice/routers/admin_bookings.py
# Bookings are never deleted; admins change status or move them between bays.

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ..auth import require_admin
from ..database import UnitOfWork, get_db, get_session_factory
from ..schemas.bookings import (
    BookingBayAssign,
    BookingEnvelope,
    BookingPage,
    BookingRead,
    BookingStatusUpdate,
    PageMeta,
)
from ..services.booking_lifecycle import (
    assign_bay,
    get_booking,
    list_bookings,
    update_booking_status,
)

router = APIRouter(
    prefix="/admin/bookings",
    tags=["admin-bookings"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=BookingPage)
def list_bookings_endpoint(
    status: Optional[str] = None,
    date: Optional[str] = None,
    user_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
):
    bookings, total = list_bookings(
        db,
        status=status,
        booking_date=date,
        user_id=user_id,
        page=page,
        per_page=per_page,
    )
    return BookingPage(
        data=[BookingRead.model_validate(b) for b in bookings],
        meta=PageMeta(
            current_page=page,
            last_page=max(1, math.ceil(total / per_page)),
            per_page=per_page,
            total=total,
        ),
    )


@router.get("/{id}", response_model=dict[str, BookingRead])
def get_booking_endpoint(id: int, db: Session = Depends(get_db)):
    return {"data": BookingRead.model_validate(get_booking(db, id))}


@router.patch("/{id}/status", response_model=BookingEnvelope)
def update_status_endpoint(
    id: int,
    data: BookingStatusUpdate,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    booking = update_booking_status(
        UnitOfWork(session_factory),
        id,
        data.status,
        reason=data.cancellation_reason,
    )
    return BookingEnvelope(
        message="Booking status updated successfully.",
        booking=BookingRead.model_validate(booking),
    )


@router.patch("/{id}/assign-bay", response_model=BookingEnvelope)
def assign_bay_endpoint(
    id: int,
    data: BookingBayAssign,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    booking = assign_bay(UnitOfWork(session_factory), id, data.service_bay_id)
    return BookingEnvelope(
        message="Service bay assigned successfully.",
        booking=BookingRead.model_validate(booking),
    )
