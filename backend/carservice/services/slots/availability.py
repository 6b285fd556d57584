# backend/carservice/services/slots/availability.py
"""
Bookable start times for a set of services on a given date.

Two layers:
- compute_available_slots: pure computation over a CalendarSnapshot
- get_available_slots: loads the snapshot and the catalog, then computes

A slot is bookable when fewer non-cancelled bookings overlap
[slot, slot + total_duration) than there are active bays. The engine
only counts; picking a bay happens at booking time (see find_free_bay).
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from .config import BookingConfig, day_of_week, get_booking_config, intervals_overlap, minutes_to_time_str
from .queries import get_active_bays, get_ledger, get_services, get_working_hours, is_date_blocked
from .snapshot import CalendarSnapshot, LedgerEntry

logger = logging.getLogger(__name__)


def compute_available_slots(
    snapshot: CalendarSnapshot,
    total_duration: int,
    config: BookingConfig | None = None,
) -> list[str]:
    """
    Available "HH:MM" start times, ascending.

    Empty list means closed, blocked, no bays or fully booked; it is never
    an error.
    """
    config = config or get_booking_config()

    if snapshot.is_blocked:
        return []

    hours = snapshot.hours
    if hours is None or hours.is_closed:
        return []

    # Zero active bays: nothing is bookable, whatever the ledger says
    capacity = snapshot.active_bay_count
    if capacity <= 0:
        return []

    available: list[str] = []
    for start_min in generate_candidates(hours.open_min, hours.close_min, total_duration, config):
        end_min = start_min + total_duration
        if count_conflicts(snapshot.ledger, start_min, end_min) < capacity:
            available.append(minutes_to_time_str(start_min))

    return available


def generate_candidates(
    open_min: int,
    close_min: int,
    total_duration: int,
    config: BookingConfig | None = None,
) -> list[int]:
    """Start times open + k * step that finish no later than close."""
    config = config or get_booking_config()
    step = config.slot_step_minutes

    candidates = []
    t = open_min
    while t + total_duration <= close_min:
        candidates.append(t)
        t += step
    return candidates


def count_conflicts(ledger: tuple[LedgerEntry, ...] | list[LedgerEntry], start_min: int, end_min: int) -> int:
    """Ledger entries overlapping [start_min, end_min). Touching ends don't count."""
    return sum(
        1 for entry in ledger
        if intervals_overlap(entry.start_min, entry.end_min, start_min, end_min)
    )


def find_free_bay(
    snapshot: CalendarSnapshot,
    start_min: int,
    end_min: int,
) -> int | None:
    """First active bay with no ledger entry overlapping [start_min, end_min)."""
    busy = _busy_bays(snapshot, start_min, end_min)
    for bay_id in snapshot.active_bay_ids:
        if bay_id not in busy:
            return bay_id
    return None


def bay_is_free(
    snapshot: CalendarSnapshot,
    bay_id: int | None,
    start_min: int,
    end_min: int,
) -> bool:
    """bay_id is active and nothing in the ledger occupies it for [start_min, end_min)."""
    if bay_id is None or bay_id not in snapshot.active_bay_ids:
        return False
    return bay_id not in _busy_bays(snapshot, start_min, end_min)


def _busy_bays(snapshot: CalendarSnapshot, start_min: int, end_min: int) -> set[int | None]:
    return {
        entry.bay_id
        for entry in snapshot.ledger
        if intervals_overlap(entry.start_min, entry.end_min, start_min, end_min)
    }


# ── Loading ──────────────────────────────────────────────────────────────


def load_snapshot(db: Session, target_date: date) -> CalendarSnapshot:
    """Read calendar rules, bay pool and ledger for target_date."""
    if is_date_blocked(db, target_date):
        return CalendarSnapshot(target_date=target_date, is_blocked=True, hours=None)

    hours = get_working_hours(db, day_of_week(target_date))
    if hours is None or hours.is_closed:
        return CalendarSnapshot(target_date=target_date, is_blocked=False, hours=hours)

    return CalendarSnapshot(
        target_date=target_date,
        is_blocked=False,
        hours=hours,
        active_bay_ids=tuple(bay.id for bay in get_active_bays(db)),
        ledger=tuple(get_ledger(db, target_date)),
    )


def total_duration_for(db: Session, service_ids: list[int]) -> int:
    """
    Sum of catalog durations.

    Ids missing from the catalog count as 0; rejecting them is the job of
    the request boundary and of the booking protocol.
    """
    services = get_services(db, service_ids)
    found = {service.id for service in services}
    missing = [sid for sid in dict.fromkeys(service_ids) if sid not in found]
    if missing:
        logger.warning(f"Unknown service ids ignored in availability: {missing}")
    return sum(service.duration_minutes for service in services)


def get_available_slots(
    db: Session,
    target_date: date,
    service_ids: list[int],
    config: BookingConfig | None = None,
) -> list[str]:
    """Available "HH:MM" start times for service_ids on target_date."""
    snapshot = load_snapshot(db, target_date)
    total_duration = total_duration_for(db, service_ids)
    return compute_available_slots(snapshot, total_duration, config)
