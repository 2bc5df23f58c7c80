# app/services/queue_service.py
"""
Driver queue lifecycle and ordering policy.

States:  WAITING → CALLED → ATTENDED | NO_SHOW
         WAITING → CLEARED
         CALLED  → CALLED (recall, up to MAX_CALL_ATTEMPTS)

Ordering: the next driver is the WAITING entry with the oldest entry_time
(ties broken by id).

Every mutating operation reads its row(s) with SELECT ... FOR UPDATE and
commits before any SMS goes out, so no lock is held during network I/O.
SMS failures are logged and never undo a transition; the operator retries
with recall.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ValidationError, ConflictError, NotFoundError, InvalidStateError
from app.models.driver_entry import DriverEntry, DriverStatus
from app.services.sms_service import send_sms
from app.utils.phone import normalize_phone
from app.utils.plate import normalize_plate
from app.utils.logger import get_logger

logger = get_logger(__name__)

MAX_CALL_ATTEMPTS = 2
NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


# ── Registration ─────────────────────────────────────────────────────────────

def register(db: Session, plate: str, name: str, phone: str) -> DriverEntry:
    """Validate, normalize and enqueue a driver as WAITING."""
    clean_plate = normalize_plate(plate, settings.PLATE_PATTERN or None)

    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("Driver name is required")
    if not NAME_MIN_LENGTH <= len(clean_name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"Driver name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )

    clean_phone = normalize_phone(phone, settings.DEFAULT_COUNTRY_CODE)

    existing = db.query(DriverEntry).filter(DriverEntry.plate == clean_plate).first()
    if existing:
        logger.warning(f"[QUEUE] Duplicate plate {clean_plate} (entry {existing.id}, {existing.status.value})")
        raise ConflictError(f"Plate {clean_plate} is already registered")

    now = datetime.utcnow()
    entry = DriverEntry(
        plate=clean_plate,
        name=clean_name,
        phone_number=clean_phone,
        entry_time=now,
        status=DriverStatus.WAITING,
        call_attempts=0,
        updated_at=now,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same plate
        db.rollback()
        logger.warning(f"[QUEUE] Unique constraint hit for plate {clean_plate}: {e.orig}")
        raise ConflictError(f"Plate {clean_plate} is already registered") from e

    db.refresh(entry)
    logger.info(f"[QUEUE] Registered entry {entry.id} | plate={entry.plate} name={entry.name}")
    return entry


# ── Views ────────────────────────────────────────────────────────────────────

def list_waiting(db: Session) -> list[DriverEntry]:
    """WAITING entries, oldest first."""
    return (
        db.query(DriverEntry)
        .filter(DriverEntry.status == DriverStatus.WAITING)
        .order_by(DriverEntry.entry_time.asc(), DriverEntry.id.asc())
        .all()
    )


def list_called(db: Session) -> list[DriverEntry]:
    """CALLED entries, most recently called first."""
    return (
        db.query(DriverEntry)
        .filter(DriverEntry.status == DriverStatus.CALLED)
        .order_by(DriverEntry.called_time.desc(), DriverEntry.id.desc())
        .all()
    )


def list_entries(db: Session, status: Optional[DriverStatus] = None, limit: int = 50) -> list[DriverEntry]:
    """Full history, newest registration first. Optional status filter."""
    q = db.query(DriverEntry)
    if status is not None:
        q = q.filter(DriverEntry.status == status)
    return q.order_by(DriverEntry.entry_time.desc(), DriverEntry.id.desc()).limit(limit).all()


def get_entry(db: Session, entry_id: int) -> DriverEntry:
    entry = db.query(DriverEntry).filter(DriverEntry.id == entry_id).first()
    if not entry:
        raise NotFoundError(f"Driver entry {entry_id} not found")
    return entry


# ── Transitions ──────────────────────────────────────────────────────────────

def next_waiting_query(db: Session):
    """Head of the WAITING queue, row-locked. Rows held by another transaction are skipped."""
    return (
        db.query(DriverEntry)
        .filter(DriverEntry.status == DriverStatus.WAITING)
        .order_by(DriverEntry.entry_time.asc(), DriverEntry.id.asc())
        .with_for_update(skip_locked=True)
    )


async def call_next(db: Session) -> Optional[DriverEntry]:
    """
    Call the oldest WAITING driver. Returns None when the queue is empty.
    SKIP LOCKED lets concurrent callers each take a different row.
    """
    entry = next_waiting_query(db).first()
    if not entry:
        db.rollback()
        logger.info("[QUEUE] call_next: queue is empty")
        return None

    now = datetime.utcnow()
    entry.status = DriverStatus.CALLED
    entry.called_time = now
    entry.call_attempts = 1
    entry.updated_at = now
    db.commit()
    db.refresh(entry)
    logger.info(f"[QUEUE] Called entry {entry.id} | plate={entry.plate} name={entry.name}")

    await _notify(entry, settings.CALL_MESSAGE_TEMPLATE)
    return entry


async def recall(db: Session, entry_id: int) -> DriverEntry:
    """
    Call a CALLED driver again. Once MAX_CALL_ATTEMPTS calls were sent the
    entry becomes NO_SHOW instead, with no further SMS.
    """
    entry = _get_called_for_update(db, entry_id, "recall")
    now = datetime.utcnow()

    if entry.call_attempts >= MAX_CALL_ATTEMPTS:
        entry.status = DriverStatus.NO_SHOW
        entry.updated_at = now
        db.commit()
        db.refresh(entry)
        logger.warning(
            f"[QUEUE] Entry {entry.id} ({entry.plate}) reached {MAX_CALL_ATTEMPTS} calls → NO_SHOW"
        )
        return entry

    entry.call_attempts += 1
    entry.called_time = now
    entry.updated_at = now
    db.commit()
    db.refresh(entry)
    logger.info(
        f"[QUEUE] Recalled entry {entry.id} ({entry.plate}) | attempt {entry.call_attempts}/{MAX_CALL_ATTEMPTS}"
    )

    await _notify(entry, settings.RECALL_MESSAGE_TEMPLATE)
    return entry


def mark_attended(db: Session, entry_id: int) -> DriverEntry:
    entry = _get_called_for_update(db, entry_id, "mark attended")
    entry.status = DriverStatus.ATTENDED
    entry.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(entry)
    logger.info(f"[QUEUE] Entry {entry.id} ({entry.plate}) → ATTENDED")
    return entry


def mark_no_show(db: Session, entry_id: int) -> DriverEntry:
    """Operator gives up on a CALLED driver before the attempt limit."""
    entry = _get_called_for_update(db, entry_id, "mark no-show")
    entry.status = DriverStatus.NO_SHOW
    entry.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(entry)
    logger.warning(f"[QUEUE] Entry {entry.id} ({entry.plate}) manually marked NO_SHOW")
    return entry


def clear_waiting(db: Session) -> int:
    """Move every WAITING entry to CLEARED in one transaction. Returns the count."""
    waiting = (
        db.query(DriverEntry)
        .filter(DriverEntry.status == DriverStatus.WAITING)
        .with_for_update()
        .all()
    )
    if not waiting:
        db.rollback()
        logger.info("[QUEUE] clear_waiting: queue already empty")
        return 0

    now = datetime.utcnow()
    for entry in waiting:
        entry.status = DriverStatus.CLEARED
        entry.call_attempts = 0
        entry.updated_at = now
    db.commit()
    logger.warning(f"[QUEUE] Cleared {len(waiting)} waiting entries")
    return len(waiting)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _get_called_for_update(db: Session, entry_id: int, action: str) -> DriverEntry:
    entry = (
        db.query(DriverEntry)
        .filter(DriverEntry.id == entry_id)
        .with_for_update()
        .first()
    )
    if not entry:
        db.rollback()
        raise NotFoundError(f"Driver entry {entry_id} not found")
    if entry.status != DriverStatus.CALLED:
        status = entry.status.value
        db.rollback()
        raise InvalidStateError(f"Cannot {action} entry {entry_id}: status is {status}, expected CALLED")
    return entry


async def _notify(entry: DriverEntry, template: str):
    """Best-effort SMS. Failures are logged; the transition already committed stays."""
    try:
        message = template.format(
            name=entry.name,
            plate=entry.plate,
            attempt=entry.call_attempts,
            max_attempts=MAX_CALL_ATTEMPTS,
        )
        delivered = await send_sms(entry.phone_number, message)
    except Exception as e:
        logger.error(f"[QUEUE] SMS to entry {entry.id} ({entry.phone_number}) failed: {e}", exc_info=True)
        return

    if not delivered:
        logger.error(f"[QUEUE] SMS to entry {entry.id} ({entry.phone_number}) was not accepted by the provider")
