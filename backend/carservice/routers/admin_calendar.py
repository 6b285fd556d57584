# backend/carservice/routers/admin_calendar.py
# Working hours: PUT = upsert per weekday. Blocked dates: DELETE = hard.

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..database import get_db
from ..models.tables import (
    BlockedDates as DBBlockedDates,
    WorkingHours as DBWorkingHours,
)
from ..schemas.calendar import (
    BlockedDateCreate,
    BlockedDateRead,
    WorkingHourRead,
    WorkingHourUpsert,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin-calendar"],
    dependencies=[Depends(require_admin)],
)


def _db_time(value: str) -> str:
    """Persist times as HH:MM:SS."""
    return value if len(value) == 8 else f"{value}:00"


# ── Working hours ────────────────────────────────────────────────────────


@router.get("/working-hours", response_model=list[WorkingHourRead])
def list_working_hours(db: Session = Depends(get_db)):
    return db.query(DBWorkingHours).order_by(DBWorkingHours.day_of_week).all()


@router.put("/working-hours/{day_of_week}", response_model=WorkingHourRead)
def upsert_working_hours(
    day_of_week: int,
    data: WorkingHourUpsert,
    db: Session = Depends(get_db),
):
    if not 0 <= day_of_week <= 6:
        raise HTTPException(
            status_code=422,
            detail="day_of_week must be between 0 (Sunday) and 6 (Saturday)",
        )

    obj = (
        db.query(DBWorkingHours)
        .filter(DBWorkingHours.day_of_week == day_of_week)
        .first()
    )
    if not obj:
        obj = DBWorkingHours(day_of_week=day_of_week)
        db.add(obj)

    obj.open_time = _db_time(data.open_time)
    obj.close_time = _db_time(data.close_time)
    obj.is_closed = int(data.is_closed)

    db.commit()
    db.refresh(obj)
    return obj


# ── Blocked dates ────────────────────────────────────────────────────────


@router.get("/blocked-dates", response_model=list[BlockedDateRead])
def list_blocked_dates(db: Session = Depends(get_db)):
    return db.query(DBBlockedDates).order_by(DBBlockedDates.date).all()


@router.post("/blocked-dates", response_model=BlockedDateRead, status_code=status.HTTP_201_CREATED)
def create_blocked_date(
    data: BlockedDateCreate,
    db: Session = Depends(get_db),
):
    date_str = data.date.isoformat()
    exists = db.query(DBBlockedDates.id).filter(DBBlockedDates.date == date_str).first()
    if exists:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Date already blocked")

    obj = DBBlockedDates(date=date_str, reason=data.reason)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/blocked-dates/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_blocked_date(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBlockedDates, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()
