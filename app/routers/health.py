# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + Twilio account reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from app.services.sms_service import is_sms_configured
from app.utils.logger import get_logger
from datetime import datetime

logger = get_logger(__name__)
router = APIRouter()

TWILIO_ACCOUNT_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}.json"


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - SMS provider status (credentials checked against the Twilio account endpoint)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "sms": "unknown",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        logger.error(f"[HEALTH] Database check failed: {e}", exc_info=True)
        result["database"] = "error"
        result["status"] = "degraded"

    # SMS is best-effort: a broken provider degrades notifications, not the queue
    if not is_sms_configured():
        result["sms"] = "not_configured"
        return result

    try:
        resp = requests.get(
            TWILIO_ACCOUNT_URL.format(sid=settings.TWILIO_ACCOUNT_SID),
            auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
            timeout=3,
        )
        result["sms"] = "ok" if resp.status_code == 200 else f"http_{resp.status_code}"
    except requests.exceptions.ConnectionError:
        result["sms"] = "unreachable"
    except Exception as e:
        logger.error(f"[HEALTH] Twilio account check failed: {e}")
        result["sms"] = "error"

    return result
