from venue_booking.schemas.user import CurrentUser
from venue_booking.schemas.venue import (
    VenueResponse, VenueListResponse, VenueStatusUpdate, VenueSort, FavoritesResponse,
)
from venue_booking.schemas.reservation import (
    ReservationCreate, ReservationResponse, TransitionRequest, TransitionResponse, OwnerReservationItem,
)
from venue_booking.schemas.availability import UnavailableDatesUpdate, UnavailableDatesResponse
from venue_booking.schemas.reporting import DashboardResponse

__all__ = [
    "CurrentUser",
    "VenueResponse", "VenueListResponse", "VenueStatusUpdate", "VenueSort", "FavoritesResponse",
    "ReservationCreate", "ReservationResponse", "TransitionRequest", "TransitionResponse",
    "OwnerReservationItem",
    "UnavailableDatesUpdate", "UnavailableDatesResponse",
    "DashboardResponse",
]
