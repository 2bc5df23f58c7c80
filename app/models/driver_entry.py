# app/models/driver_entry.py
"""
Driver queue table.
One row per registration. Rows are never deleted: ATTENDED, NO_SHOW and
CLEARED entries stay for history. Mutated only by queue_service.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum, Index
from app.database import Base
from app.utils.plate import PLATE_MAX_LENGTH


class DriverStatus(str, enum.Enum):
    WAITING = "WAITING"
    CALLED = "CALLED"
    ATTENDED = "ATTENDED"
    NO_SHOW = "NO_SHOW"
    CLEARED = "CLEARED"


class DriverEntry(Base):
    __tablename__ = "driver_entries"
    __table_args__ = (
        Index("ix_driver_entries_status_entry_time", "status", "entry_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate = Column(String(PLATE_MAX_LENGTH), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone_number = Column(String(16), nullable=False)        # E.164
    entry_time = Column(DateTime, nullable=False)            # immutable
    called_time = Column(DateTime)                           # most recent call attempt
    status = Column(Enum(DriverStatus, name="driver_status", native_enum=False, length=20),
                    default=DriverStatus.WAITING, nullable=False)
    call_attempts = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<DriverEntry {self.id} plate={self.plate} status={self.status} attempts={self.call_attempts}>"
