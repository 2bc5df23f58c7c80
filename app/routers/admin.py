# app/routers/admin.py
"""
Operator endpoints — queue views and driver lifecycle actions.
Protected by APIKeyMiddleware when API_KEY is set.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.driver_entry import DriverStatus
from app.schemas.driver_entry import DriverEntryOut, ClearQueueOut
from app.services import queue_service

router = APIRouter()


@router.get("/admin/queue", response_model=list[DriverEntryOut], summary="Waiting drivers, oldest first")
def get_waiting_queue(db: Session = Depends(get_db)):
    return queue_service.list_waiting(db)


@router.get("/admin/called", response_model=list[DriverEntryOut], summary="Called drivers, most recent first")
def get_called_drivers(db: Session = Depends(get_db)):
    return queue_service.list_called(db)


@router.get("/admin/drivers", response_model=list[DriverEntryOut], summary="Queue history")
def list_drivers(status: Optional[DriverStatus] = None, limit: int = Query(50, ge=1, le=500), db: Session = Depends(get_db)):
    """All entries including terminal ones, newest first. Filter by status."""
    return queue_service.list_entries(db, status=status, limit=limit)


@router.get("/admin/drivers/{entry_id}", response_model=DriverEntryOut, summary="One driver entry")
def get_driver(entry_id: int, db: Session = Depends(get_db)):
    return queue_service.get_entry(db, entry_id)


@router.post("/admin/call-next", response_model=DriverEntryOut, summary="Call the next waiting driver")
async def call_next_driver(db: Session = Depends(get_db)):
    """Marks the oldest WAITING driver as CALLED and sends the SMS. 404 when nobody is waiting."""
    entry = await queue_service.call_next(db)
    if entry is None:
        raise HTTPException(status_code=404, detail="No drivers waiting in the queue")
    return entry


@router.post("/admin/drivers/{entry_id}/recall", response_model=DriverEntryOut, summary="Call a driver again")
async def recall_driver(entry_id: int, db: Session = Depends(get_db)):
    """Sends another SMS, or moves the driver to NO_SHOW once the attempt limit is reached."""
    return await queue_service.recall(db, entry_id)


@router.post("/admin/drivers/{entry_id}/attended", response_model=DriverEntryOut, summary="Driver showed up")
def mark_driver_attended(entry_id: int, db: Session = Depends(get_db)):
    return queue_service.mark_attended(db, entry_id)


@router.post("/admin/drivers/{entry_id}/no-show", response_model=DriverEntryOut, summary="Driver did not show up")
def mark_driver_no_show(entry_id: int, db: Session = Depends(get_db)):
    return queue_service.mark_no_show(db, entry_id)


@router.post("/admin/clear-queue", response_model=ClearQueueOut, summary="Clear all waiting drivers")
def clear_queue(confirm: bool = False, db: Session = Depends(get_db)):
    """Moves every WAITING driver to CLEARED. Requires ?confirm=true."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Pass confirm=true to clear the waiting queue")
    return ClearQueueOut(cleared=queue_service.clear_waiting(db))
