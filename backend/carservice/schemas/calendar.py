# backend/carservice/schemas/calendar.py

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ..services.slots.config import time_str_to_minutes


class WorkingHourUpsert(BaseModel):
    open_time: str = "00:00"
    close_time: str = "00:00"
    is_closed: bool = False

    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Accept HH:MM or HH:MM:SS; 24:00 allowed as close of day."""
        if not re.match(r"^\d{2}:\d{2}(:\d{2})?$", v):
            raise ValueError("Time must be in HH:MM format")
        time_str_to_minutes(v)
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if not self.is_closed and time_str_to_minutes(self.open_time) >= time_str_to_minutes(self.close_time):
            raise ValueError("open_time must be before close_time")
        return self


class WorkingHourRead(BaseModel):
    id: int
    day_of_week: int
    open_time: str
    close_time: str
    is_closed: bool

    model_config = {"from_attributes": True}


class BlockedDateCreate(BaseModel):
    date: date
    reason: Optional[str] = None


class BlockedDateRead(BaseModel):
    id: int
    date: str
    reason: Optional[str] = None

    model_config = {"from_attributes": True}
