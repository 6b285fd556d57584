# backend/carservice/routers/admin_bays.py
# PATCH = ALLOWED, DELETE = soft-delete (is_active)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..database import get_db
from ..models.tables import ServiceBays as DBServiceBays
from ..schemas.bays import (
    ServiceBayCreate,
    ServiceBayUpdate,
    ServiceBayRead,
)

router = APIRouter(
    prefix="/admin/bays",
    tags=["admin-bays"],
    dependencies=[Depends(require_admin)],
)


def _ensure_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(DBServiceBays.id).filter(DBServiceBays.name == name)
    if exclude_id is not None:
        query = query.filter(DBServiceBays.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Bay name already exists")


@router.get("", response_model=list[ServiceBayRead])
def list_bays(db: Session = Depends(get_db)):
    return db.query(DBServiceBays).order_by(DBServiceBays.id).all()


@router.get("/{id}", response_model=ServiceBayRead)
def get_bay(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServiceBays, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("", response_model=ServiceBayRead, status_code=status.HTTP_201_CREATED)
def create_bay(
    data: ServiceBayCreate,
    db: Session = Depends(get_db),
):
    _ensure_name_free(db, data.name)

    obj = DBServiceBays(**data.model_dump(), is_active=1)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=ServiceBayRead)
def update_bay(
    id: int,
    data: ServiceBayUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBServiceBays, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    if data.name is not None:
        _ensure_name_free(db, data.name, exclude_id=id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "is_active":
            value = int(value)
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bay(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBServiceBays, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    obj.is_active = 0
    db.commit()
