"""Row builders and dates shared by the tests."""

from datetime import date, timedelta
from decimal import Decimal

from carservice.models.tables import (
    BlockedDates,
    Bookings,
    ServiceBays,
    Services,
    WorkingHours,
)


def _next_weekday(start: date, weekday: int) -> date:
    """First date on or after start with the given Python weekday (0 = Monday)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


# Far enough ahead that "not in the past" checks always pass
MONDAY = _next_weekday(date(2099, 1, 1), 0)
TUESDAY = MONDAY + timedelta(days=1)
SUNDAY = MONDAY - timedelta(days=1)


def add_service(db, name="Oil Change", duration=30, price="49.99", is_active=True) -> Services:
    service = Services(
        name=name,
        duration_minutes=duration,
        price=Decimal(price),
        is_active=int(is_active),
    )
    db.add(service)
    db.commit()
    return service


def set_hours(db, day_of_week, open_time="08:00:00", close_time="18:00:00", is_closed=False) -> WorkingHours:
    row = WorkingHours(
        day_of_week=day_of_week,
        open_time=open_time,
        close_time=close_time,
        is_closed=int(is_closed),
    )
    db.add(row)
    db.commit()
    return row


def add_bay(db, name="Bay 1", is_active=True) -> ServiceBays:
    bay = ServiceBays(name=name, is_active=int(is_active))
    db.add(bay)
    db.commit()
    return bay


def block_date(db, target_date, reason="Holiday") -> BlockedDates:
    row = BlockedDates(date=target_date.isoformat(), reason=reason)
    db.add(row)
    db.commit()
    return row


def add_booking(
    db,
    target_date,
    start_time,
    end_time,
    bay_id=None,
    status="pending",
    user_id=1,
) -> Bookings:
    booking = Bookings(
        user_id=user_id,
        vehicle_id=1,
        service_bay_id=bay_id,
        booking_date=target_date.isoformat(),
        start_time=start_time,
        end_time=end_time,
        total_price=Decimal("0"),
        status=status,
        created_at="2099-01-01 00:00:00",
        updated_at="2099-01-01 00:00:00",
    )
    db.add(booking)
    db.commit()
    return booking


def half_hour_grid(start: str, last: str) -> list[str]:
    """["08:00", "08:30", ..., last]"""
    h, m = map(int, start.split(":"))
    t = h * 60 + m
    lh, lm = map(int, last.split(":"))
    end = lh * 60 + lm
    out = []
    while t <= end:
        out.append(f"{t // 60:02d}:{t % 60:02d}")
        t += 30
    return out
