# app/schemas/driver_entry.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.models.driver_entry import DriverStatus


class DriverRegister(BaseModel):
    plate: str
    name: str
    phone_number: str    # national or international; normalized to E.164 by the service


class DriverEntryOut(BaseModel):
    id: int
    plate: str
    name: str
    phone_number: str
    entry_time: datetime
    called_time: Optional[datetime]
    status: DriverStatus
    call_attempts: int

    class Config:
        from_attributes = True


class ClearQueueOut(BaseModel):
    cleared: int
    status: str = "cleared"
