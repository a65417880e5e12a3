"""
Pydantic schemas for owner dashboard counters.
"""

from pydantic import BaseModel

from venue_booking.schemas.reservation import OwnerReservationItem


class DashboardResponse(BaseModel):
    owner_id: int
    total_reservations: int
    pending_reservations: int
    cancelled_reservations: int
    recent: list[OwnerReservationItem]
