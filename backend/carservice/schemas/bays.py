# backend/carservice/schemas/bays.py

from typing import Optional
from pydantic import BaseModel


class ServiceBayCreate(BaseModel):
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class ServiceBayUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class ServiceBayRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}
