# app/services/sms_service.py
"""
SMS notification gateway — sends a single text message through the Twilio REST API.

Endpoint: POST https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json
Auth:     HTTP Basic (account SID + auth token)

One best-effort attempt per call, bounded by SMS_TIMEOUT_SECONDS. The queue
service decides what to do with a failure; nothing here retries.
"""

import httpx
from app.config import settings
from app.exceptions import NotificationError
from app.utils.phone import is_e164
from app.utils.logger import get_logger

logger = get_logger(__name__)


def is_sms_configured() -> bool:
    """True when Twilio credentials and a sender number are present."""
    return bool(
        settings.TWILIO_ACCOUNT_SID
        and settings.TWILIO_AUTH_TOKEN
        and settings.TWILIO_PHONE_NUMBER
    )


async def send_sms(to_e164: str, message: str) -> bool:
    """
    Send `message` to `to_e164`.
    Returns True when Twilio accepted the message, False on a non-2xx response.
    Raises NotificationError when not configured, on bad numbers, or on transport errors.
    """
    if not is_sms_configured():
        raise NotificationError("Twilio is not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN / TWILIO_PHONE_NUMBER)")
    if not is_e164(to_e164):
        raise NotificationError(f"Recipient number is not E.164: '{to_e164}'")
    if not is_e164(settings.TWILIO_PHONE_NUMBER):
        raise NotificationError(f"Sender number is not E.164: '{settings.TWILIO_PHONE_NUMBER}'")

    data = {"From": settings.TWILIO_PHONE_NUMBER, "To": to_e164, "Body": message}
    auth = (settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    try:
        async with httpx.AsyncClient(auth=auth, timeout=settings.SMS_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.TWILIO_MESSAGES_URL, data=data)
    except httpx.TimeoutException as e:
        raise NotificationError(f"Twilio timeout sending to {to_e164}") from e
    except httpx.HTTPError as e:
        raise NotificationError(f"Twilio request failed for {to_e164}: {e}") from e

    if response.status_code in (200, 201):
        sid = response.json().get("sid")
        logger.info(f"[SMS] Sent to {to_e164} | SID={sid}")
        return True

    logger.error(f"[SMS] Twilio returned HTTP {response.status_code} for {to_e164}: {response.text[:300]}")
    return False
