# backend/carservice/services/slots/__init__.py
"""
Slots calculation module.

Availability engine (pure computation over a per-call calendar snapshot)
plus the data-access functions it reads through.
"""

from .config import BookingConfig, get_booking_config
from .snapshot import CalendarSnapshot, DayHours, LedgerEntry
from .availability import (
    bay_is_free,
    compute_available_slots,
    find_free_bay,
    get_available_slots,
    load_snapshot,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "CalendarSnapshot",
    "DayHours",
    "LedgerEntry",
    "bay_is_free",
    "compute_available_slots",
    "find_free_bay",
    "get_available_slots",
    "load_snapshot",
]
