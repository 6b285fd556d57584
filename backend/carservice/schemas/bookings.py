# backend/carservice/schemas/bookings.py

import re
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..services.slots.config import time_str_to_minutes

BookingStatus = Literal[
    "pending",
    "confirmed",
    "in_progress",
    "completed",
    "cancelled",
    "no_show",
]


def _validate_hhmm(v: str) -> str:
    if not re.match(r"^\d{2}:\d{2}$", v):
        raise ValueError("Time must be in HH:MM format")
    if time_str_to_minutes(v) >= 24 * 60:
        raise ValueError("Time must be in HH:MM format")
    return v


class AvailabilityRequest(BaseModel):
    date: date
    service_ids: list[int] = Field(min_length=1)


class AvailabilityResponse(BaseModel):
    date: date
    available_slots: list[str] = Field(description="Start times in HH:MM format, ascending")


class BookingCreate(BaseModel):
    vehicle_id: int
    booking_date: date
    start_time: str = Field(description="Time in HH:MM format")
    service_ids: list[int] = Field(min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _validate_hhmm(v)


class BookingUpdate(BaseModel):
    booking_date: Optional[date] = None
    start_time: Optional[str] = Field(None, description="Time in HH:MM format")
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_hhmm(v)


class BookingCancel(BaseModel):
    cancellation_reason: str = Field(min_length=1, max_length=500)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    cancellation_reason: Optional[str] = Field(None, max_length=500)


class BookingBayAssign(BaseModel):
    service_bay_id: int


class BookingServiceRead(BaseModel):
    service_id: int
    price: Decimal
    duration_minutes: int

    model_config = {"from_attributes": True}


class BookingBayRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    user_id: int
    vehicle_id: int
    service_bay_id: Optional[int] = None

    booking_date: str
    start_time: str
    end_time: str

    total_price: Decimal
    status: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[str] = None

    bay: Optional[BookingBayRead] = None
    # ORM rows expose "line_items"; re-validated responses arrive as "services"
    services: list[BookingServiceRead] = Field(
        default_factory=list,
        validation_alias=AliasChoices("line_items", "services"),
    )

    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class BookingEnvelope(BaseModel):
    message: str
    booking: BookingRead


class PageMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int


class BookingPage(BaseModel):
    data: list[BookingRead]
    meta: PageMeta
