# backend/carservice/services/slots/snapshot.py
"""
Read-only inputs of the availability engine, loaded once per call.
"""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class DayHours:
    """Working hours of one weekday, in minutes since midnight."""
    open_min: int
    close_min: int
    is_closed: bool = False


@dataclass(frozen=True)
class LedgerEntry:
    """A non-cancelled booking occupying [start_min, end_min) on a bay."""
    booking_id: int
    start_min: int
    end_min: int
    bay_id: int | None


@dataclass(frozen=True)
class CalendarSnapshot:
    """Everything the engine needs to know about one date."""
    target_date: date
    is_blocked: bool
    hours: DayHours | None
    active_bay_ids: tuple[int, ...] = ()
    ledger: tuple[LedgerEntry, ...] = field(default_factory=tuple)

    @property
    def active_bay_count(self) -> int:
        return len(self.active_bay_ids)
