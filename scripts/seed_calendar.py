"""
Seed the default calendar, bay pool and service catalog.

Run after `alembic upgrade head`:
    python scripts/seed_calendar.py

Existing rows are left untouched (working hours are keyed by weekday,
bays by name, services by name).
"""

import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from decimal import Decimal

from carservice.database import SessionLocal
from carservice.models.tables import ServiceBays, Services, WorkingHours


# day_of_week: 0 = Sunday
WORKING_HOURS = [
    (0, "00:00:00", "00:00:00", True),
    (1, "08:00:00", "18:00:00", False),
    (2, "08:00:00", "18:00:00", False),
    (3, "08:00:00", "18:00:00", False),
    (4, "08:00:00", "18:00:00", False),
    (5, "08:00:00", "18:00:00", False),
    (6, "09:00:00", "15:00:00", False),
]

BAYS = [
    ("Bay 1", "General service bay"),
    ("Bay 2", "General service bay"),
    ("Bay 3", "Specialized for engine work"),
    ("Bay 4", "Tire and brake services"),
]

SERVICES = [
    ("Oil Change", "maintenance", 30, Decimal("49.99")),
    ("Tire Rotation", "tires", 30, Decimal("29.99")),
    ("Brake Inspection", "brakes", 45, Decimal("39.99")),
    ("Brake Pad Replacement", "brakes", 90, Decimal("149.99")),
    ("Engine Diagnostics", "engine", 60, Decimal("89.99")),
    ("Full Service", "maintenance", 120, Decimal("199.99")),
]


def main():
    db = SessionLocal()
    try:
        for day, open_time, close_time, is_closed in WORKING_HOURS:
            exists = db.query(WorkingHours).filter(WorkingHours.day_of_week == day).first()
            if not exists:
                db.add(WorkingHours(
                    day_of_week=day,
                    open_time=open_time,
                    close_time=close_time,
                    is_closed=int(is_closed),
                ))

        for name, description in BAYS:
            exists = db.query(ServiceBays).filter(ServiceBays.name == name).first()
            if not exists:
                db.add(ServiceBays(name=name, description=description, is_active=1))

        for name, category, duration, price in SERVICES:
            exists = db.query(Services).filter(Services.name == name).first()
            if not exists:
                db.add(Services(
                    name=name,
                    category=category,
                    duration_minutes=duration,
                    price=price,
                    is_active=1,
                ))

        db.commit()
        print("Working hours:", db.query(WorkingHours).count())
        print("Bays:", db.query(ServiceBays).count())
        print("Services:", db.query(Services).count())
    finally:
        db.close()


if __name__ == "__main__":
    main()
