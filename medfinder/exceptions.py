"""Domain errors raised by services.

These are business-logic errors, not HTTP errors. ``main`` registers handlers
translating them into ``ErrorResponse`` JSON bodies.
"""
from __future__ import annotations

from typing import Any

from medfinder.models.error_code import ErrorCode


class MedFinderError(Exception):
    status_code = 500
    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message, **self.extra}


class ValidationError(MedFinderError):
    """Missing or malformed required input."""

    status_code = 400
    code = ErrorCode.BAD_REQUEST


class NotFoundError(MedFinderError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class QuotaExceededError(MedFinderError):
    """Anonymous session has used its weekly chat allowance."""

    status_code = 429
    code = ErrorCode.QUOTA_EXCEEDED

    def __init__(self, message: str = "Weekly free chat limit reached. Sign in to keep chatting.") -> None:
        super().__init__(message, remainingChats=0, isLimitReached=True)


class StoreError(MedFinderError):
    """Persistence layer failure; the client only sees a generic message."""

    status_code = 500
    code = ErrorCode.STORE_ERROR


class TransportError(MedFinderError):
    """Malformed frame on the live chat channel."""

    status_code = 400
    code = ErrorCode.BAD_REQUEST


__all__ = [
    "MedFinderError",
    "ValidationError",
    "NotFoundError",
    "QuotaExceededError",
    "StoreError",
    "TransportError",
]
