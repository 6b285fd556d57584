# backend/carservice/services/slots/config.py
"""
Booking configuration and time arithmetic for slots calculation.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the booking/slots system.

    Attributes:
        slot_step_minutes: Grid step in minutes. Candidate start times are
            open_time + k * step; the step never adapts to service duration.
        max_notes_length: Upper bound for booking notes.
        max_cancellation_reason_length: Upper bound for cancellation reasons.
    """
    slot_step_minutes: int = 30
    max_notes_length: int = 1000
    max_cancellation_reason_length: int = 500

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes <= 0 or (24 * 60) % self.slot_step_minutes:
            raise ValueError(
                f"slot_step_minutes must divide a day evenly, got {self.slot_step_minutes}"
            )


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" or "HH:MM:SS" to minutes since midnight.

    Seconds are dropped. "24:00" is accepted as end of day.
    """
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= minutes < 60) or not (0 <= hours <= 24) or (hours == 24 and minutes):
        raise ValueError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM" (wire format)."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_db_time(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM:SS" (persisted format)."""
    return f"{minutes_to_time_str(minutes)}:00"


def day_of_week(target_date: date) -> int:
    """Weekday index used by working hours: 0 = Sunday ... 6 = Saturday."""
    return target_date.isoweekday() % 7


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap of [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and b_start < a_end
