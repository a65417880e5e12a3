from venue_booking.models.user import User, UserRole
from venue_booking.models.venue import Venue, VenueStatus
from venue_booking.models.reservation import (
    Reservation,
    ReservationStatus,
    HOLDING_STATUSES,
    TERMINAL_STATUSES,
    CANCELLED_COUNTER_STATUSES,
)
from venue_booking.models.unavailable_date import UnavailableDate
from venue_booking.models.favorite import Favorite

__all__ = [
    "User", "UserRole",
    "Venue", "VenueStatus",
    "Reservation", "ReservationStatus",
    "HOLDING_STATUSES", "TERMINAL_STATUSES", "CANCELLED_COUNTER_STATUSES",
    "UnavailableDate",
    "Favorite",
]
