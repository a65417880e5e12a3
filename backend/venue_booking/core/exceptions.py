"""
Domain error taxonomy for the reservation engine.

Services raise these; the API layer renders them through a single exception
handler (see venue_booking.main). Each error knows its HTTP status, a stable
machine-readable code, and whether the caller may retry it.

Retryable errors (Conflict, StorageUnavailable) are never retried by the
engine itself: a retry after a lost race must re-read state first.
"""

from typing import Any, Optional

from fastapi import status


class BookingError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "booking_error"
    retryable: bool = False

    def __init__(self, detail: str, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra

    def to_dict(self) -> dict:
        return {
            "detail": self.detail,
            "code": self.code,
            "retryable": self.retryable,
            **self.extra,
        }


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Unauthorized(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"


class VenueClosed(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "venue_closed"


class DateUnavailable(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "date_unavailable"


class SlotTaken(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "slot_taken"


class InvalidDate(BookingError):
    status_code = 422
    code = "invalid_date"

    def __init__(self, invalid_entries: list[str]):
        super().__init__(
            f"Invalid date(s), expected YYYY-MM-DD: {', '.join(invalid_entries)}",
            invalid_entries=invalid_entries,
        )
        self.invalid_entries = invalid_entries


class InvalidTransition(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"

    def __init__(self, action: str, current_status: str, detail: Optional[str] = None):
        super().__init__(
            detail or f"Cannot {action} a reservation that is {current_status}",
            action=action,
            current_status=current_status,
        )


class Conflict(BookingError):
    """Lost an optimistic-concurrency race; re-read and retry."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    retryable = True


class StorageUnavailable(BookingError):
    """Database timed out or is unreachable; safe to retry with backoff."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"
    retryable = True
