# app/exceptions.py
"""
Error taxonomy for the driver queue.
Raised by the queue service and rendered by the handlers registered in app.main.
"""

from typing import Optional, Any


class QueueError(Exception):
    """Base exception. Carries the HTTP status and a stable error code."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500,
                 details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(QueueError):
    """Bad input shape — plate, name or phone."""

    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)


class ConflictError(QueueError):
    """Plate already registered."""

    def __init__(self, message: str = "Conflict", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=409, details=details)


class NotFoundError(QueueError):
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class InvalidStateError(QueueError):
    """Operation not legal for the entry's current status."""

    def __init__(self, message: str = "Invalid state", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_STATE", status_code=400, details=details)


class NotificationError(QueueError):
    """SMS delivery failed. Always caught and logged by the queue service."""

    def __init__(self, message: str = "Notification failed", details: Optional[Any] = None):
        super().__init__(message, code="NOTIFICATION_FAILED", status_code=502, details=details)
