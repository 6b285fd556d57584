"""
Tests for the availability engine.

Pure tests build a CalendarSnapshot by hand; the loader tests go through
a real SQLite database.
"""

import pytest

from carservice.services.slots import (
    BookingConfig,
    CalendarSnapshot,
    DayHours,
    LedgerEntry,
    bay_is_free,
    compute_available_slots,
    find_free_bay,
    get_available_slots,
    load_snapshot,
)
from carservice.services.slots.availability import count_conflicts, generate_candidates

from .factories import (
    MONDAY,
    SUNDAY,
    TUESDAY,
    add_bay,
    add_booking,
    add_service,
    block_date,
    half_hour_grid,
    set_hours,
)

MON_8_TO_18 = DayHours(open_min=8 * 60, close_min=18 * 60)


def snapshot(hours=MON_8_TO_18, bays=(1,), ledger=(), is_blocked=False) -> CalendarSnapshot:
    return CalendarSnapshot(
        target_date=MONDAY,
        is_blocked=is_blocked,
        hours=hours,
        active_bay_ids=tuple(bays),
        ledger=tuple(ledger),
    )


def entry(booking_id, start, end, bay_id=1) -> LedgerEntry:
    def to_min(value):
        h, m = map(int, value.split(":"))
        return h * 60 + m

    return LedgerEntry(booking_id=booking_id, start_min=to_min(start), end_min=to_min(end), bay_id=bay_id)


# ── Pure engine ──────────────────────────────────────────────────────────


class TestComputeAvailableSlots:
    def test_full_day_single_bay(self):
        slots = compute_available_slots(snapshot(), 30)

        assert slots == half_hour_grid("08:00", "17:30")
        assert slots[-1] == "17:30"
        assert "18:00" not in slots

    def test_existing_booking_excludes_only_overlapping_start(self):
        slots = compute_available_slots(snapshot(ledger=[entry(1, "09:00", "09:30")]), 30)

        assert "09:00" not in slots
        assert "08:30" in slots
        assert "09:30" in slots

    def test_second_bay_keeps_overlapping_slots_open(self):
        ledger = [entry(1, "10:00", "11:00")]

        two_bays = compute_available_slots(snapshot(bays=(1, 2), ledger=ledger), 30)
        one_bay = compute_available_slots(snapshot(bays=(1,), ledger=ledger), 30)

        assert {"10:00", "10:30"} <= set(two_bays)
        assert "10:00" not in one_bay
        assert "10:30" not in one_bay
        assert "11:00" in one_bay

    def test_long_service_must_fit_before_close(self):
        slots = compute_available_slots(snapshot(), 90)

        assert slots[0] == "08:00"
        assert slots[-1] == "16:30"

    def test_long_service_blocked_by_later_booking(self):
        # 60 minutes starting 09:30 would run into the 10:00 booking
        slots = compute_available_slots(snapshot(ledger=[entry(1, "10:00", "11:00")]), 60)

        assert "09:00" in slots
        assert "09:30" not in slots
        assert "10:30" not in slots
        assert "11:00" in slots

    def test_blocked_date_is_empty(self):
        assert compute_available_slots(snapshot(is_blocked=True), 30) == []

    def test_closed_day_is_empty(self):
        closed = DayHours(open_min=0, close_min=0, is_closed=True)
        assert compute_available_slots(snapshot(hours=closed), 30) == []

    def test_missing_hours_is_empty(self):
        assert compute_available_slots(snapshot(hours=None), 30) == []

    @pytest.mark.parametrize("duration", [0, 30, 120])
    def test_no_active_bays_is_empty(self, duration):
        assert compute_available_slots(snapshot(bays=()), duration) == []

    def test_fully_booked_day_is_empty(self):
        assert compute_available_slots(snapshot(ledger=[entry(1, "08:00", "18:00")]), 30) == []

    def test_duration_longer_than_day_is_empty(self):
        assert compute_available_slots(snapshot(), 11 * 60) == []

    @pytest.mark.parametrize("open_min,close_min", [(8 * 60 + 15, 17 * 60), (9 * 60, 15 * 60 + 10)])
    @pytest.mark.parametrize("duration", [30, 45, 75])
    def test_slots_aligned_to_open_time(self, open_min, close_min, duration):
        hours = DayHours(open_min=open_min, close_min=close_min)
        slots = compute_available_slots(snapshot(hours=hours), duration)

        assert slots
        for slot in slots:
            h, m = map(int, slot.split(":"))
            start = h * 60 + m
            assert (start - open_min) % 30 == 0
            assert start + duration <= close_min

    def test_step_is_independent_of_duration(self):
        # a 45-minute service still gets a 30-minute grid
        slots = compute_available_slots(snapshot(), 45)
        assert slots[:3] == ["08:00", "08:30", "09:00"]

    def test_custom_step(self):
        slots = compute_available_slots(snapshot(), 30, BookingConfig(slot_step_minutes=60))
        assert slots == [f"{h:02d}:00" for h in range(8, 18)]


class TestHelpers:
    def test_generate_candidates(self):
        assert generate_candidates(480, 600, 60) == [480, 510, 540]
        assert generate_candidates(480, 500, 30) == []

    def test_count_conflicts_ignores_touching(self):
        ledger = [entry(1, "08:00", "09:00"), entry(2, "09:30", "10:00"), entry(3, "08:30", "09:45", 2)]
        assert count_conflicts(ledger, 9 * 60, 9 * 60 + 30) == 1
        assert count_conflicts(ledger, 8 * 60 + 30, 9 * 60 + 30) == 2

    def test_find_free_bay_prefers_lowest_active_id(self):
        assert find_free_bay(snapshot(bays=(3, 5)), 480, 510) == 3

    def test_find_free_bay_skips_busy_bay(self):
        snap = snapshot(bays=(1, 2), ledger=[entry(1, "08:00", "09:00", bay_id=1)])
        assert find_free_bay(snap, 8 * 60 + 30, 9 * 60) == 2

    def test_find_free_bay_back_to_back(self):
        snap = snapshot(bays=(1,), ledger=[entry(1, "08:00", "09:00", bay_id=1)])
        assert find_free_bay(snap, 9 * 60, 9 * 60 + 30) == 1

    def test_find_free_bay_none_when_all_busy(self):
        ledger = [entry(1, "08:00", "09:00", bay_id=1), entry(2, "08:30", "09:30", bay_id=2)]
        assert find_free_bay(snapshot(bays=(1, 2), ledger=ledger), 8 * 60 + 30, 9 * 60) is None

    def test_bay_is_free(self):
        snap = snapshot(bays=(1, 2), ledger=[entry(1, "08:00", "09:00", bay_id=1)])

        assert not bay_is_free(snap, 1, 8 * 60 + 30, 9 * 60)
        assert bay_is_free(snap, 1, 9 * 60, 9 * 60 + 30)
        assert bay_is_free(snap, 2, 8 * 60 + 30, 9 * 60)

    def test_bay_is_free_rejects_inactive_or_missing_bay(self):
        snap = snapshot(bays=(1,))

        assert not bay_is_free(snap, 2, 480, 510)
        assert not bay_is_free(snap, None, 480, 510)


# ── Loading from the database ────────────────────────────────────────────


class TestGetAvailableSlots:
    def test_monday_scenario(self, db, monday_shop):
        slots = get_available_slots(db, MONDAY, [monday_shop["service"].id])
        assert slots == half_hour_grid("08:00", "17:30")

    def test_booking_blocks_sole_bay(self, db, monday_shop):
        add_booking(db, MONDAY, "09:00:00", "09:30:00", bay_id=monday_shop["bay"].id)

        slots = get_available_slots(db, MONDAY, [monday_shop["service"].id])

        assert "09:00" not in slots
        assert "08:30" in slots
        assert "09:30" in slots

    def test_cancelled_booking_is_ignored(self, db, monday_shop):
        add_booking(db, MONDAY, "09:00:00", "09:30:00", bay_id=monday_shop["bay"].id, status="cancelled")

        slots = get_available_slots(db, MONDAY, [monday_shop["service"].id])

        assert "09:00" in slots

    @pytest.mark.parametrize("status", ["pending", "confirmed", "in_progress", "completed", "no_show"])
    def test_every_non_cancelled_status_occupies(self, db, monday_shop, status):
        add_booking(db, MONDAY, "09:00:00", "09:30:00", bay_id=monday_shop["bay"].id, status=status)
        assert "09:00" not in get_available_slots(db, MONDAY, [monday_shop["service"].id])

    def test_other_dates_do_not_interfere(self, db, monday_shop):
        set_hours(db, 2)
        add_booking(db, TUESDAY, "09:00:00", "09:30:00", bay_id=monday_shop["bay"].id)

        assert "09:00" in get_available_slots(db, MONDAY, [monday_shop["service"].id])

    def test_second_bay_and_its_removal(self, db, monday_shop):
        bay2 = add_bay(db, "Bay 2")
        add_booking(db, MONDAY, "10:00:00", "11:00:00", bay_id=monday_shop["bay"].id)
        service_ids = [monday_shop["service"].id]

        assert "10:00" in get_available_slots(db, MONDAY, service_ids)

        bay2.is_active = 0
        db.commit()

        assert "10:00" not in get_available_slots(db, MONDAY, service_ids)

    def test_durations_are_summed(self, db, monday_shop):
        brakes = add_service(db, "Brake Inspection", 60, "89.00")
        slots = get_available_slots(db, MONDAY, [monday_shop["service"].id, brakes.id])

        assert slots[-1] == "16:30"

    def test_unknown_service_contributes_nothing(self, db, monday_shop):
        slots = get_available_slots(db, MONDAY, [monday_shop["service"].id, 9999])
        assert slots == half_hour_grid("08:00", "17:30")

    def test_blocked_date(self, db, monday_shop):
        block_date(db, MONDAY)
        assert get_available_slots(db, MONDAY, [monday_shop["service"].id]) == []

    def test_weekday_without_hours(self, db, monday_shop):
        assert get_available_slots(db, TUESDAY, [monday_shop["service"].id]) == []

    def test_closed_weekday(self, db, monday_shop):
        set_hours(db, 0, "00:00:00", "00:00:00", is_closed=True)
        assert get_available_slots(db, SUNDAY, [monday_shop["service"].id]) == []

    def test_malformed_hours_treated_as_closed(self, db, monday_shop):
        set_hours(db, 2, "nine", "18:00:00")
        assert get_available_slots(db, TUESDAY, [monday_shop["service"].id]) == []

    def test_no_active_bays(self, db):
        set_hours(db, 1)
        add_bay(db, "Retired", is_active=False)
        service = add_service(db)

        assert get_available_slots(db, MONDAY, [service.id]) == []


class TestLoadSnapshot:
    def test_open_day(self, db, monday_shop):
        add_booking(db, MONDAY, "09:00:00", "10:00:00", bay_id=monday_shop["bay"].id)
        add_booking(db, MONDAY, "08:00:00", "08:30:00", bay_id=None)

        snap = load_snapshot(db, MONDAY)

        assert not snap.is_blocked
        assert snap.hours == DayHours(open_min=480, close_min=1080)
        assert snap.active_bay_ids == (monday_shop["bay"].id,)
        assert [(e.start_min, e.end_min) for e in snap.ledger] == [(480, 510), (540, 600)]
        assert snap.ledger[0].bay_id is None

    def test_blocked_day_skips_ledger(self, db, monday_shop):
        add_booking(db, MONDAY, "09:00:00", "10:00:00", bay_id=monday_shop["bay"].id)
        block_date(db, MONDAY)

        snap = load_snapshot(db, MONDAY)

        assert snap.is_blocked
        assert snap.ledger == ()
        assert snap.active_bay_count == 0
