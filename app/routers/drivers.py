# app/routers/drivers.py
"""Public driver registration — the only endpoint drivers use."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.driver_entry import DriverRegister, DriverEntryOut
from app.services import queue_service

router = APIRouter()


@router.post("/drivers", response_model=DriverEntryOut, status_code=status.HTTP_201_CREATED,
             summary="Join the queue")
def register_driver(body: DriverRegister, db: Session = Depends(get_db)):
    """Registers a driver as WAITING. Phone is normalized to E.164, plate to uppercase."""
    return queue_service.register(db, body.plate, body.name, body.phone_number)
