"""
Pydantic schemas for reservation request/response validation.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

from venue_booking.models.reservation import ReservationStatus
from venue_booking.services.transitions import ReservationAction


class ReservationCreate(BaseModel):
    venue_id: int
    event_date: date


class ReservationResponse(BaseModel):
    id: int
    venue_id: int
    requester_id: int
    event_date: date
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransitionRequest(BaseModel):
    action: ReservationAction


class TransitionResponse(BaseModel):
    id: int
    previous_status: ReservationStatus
    status: ReservationStatus


class OwnerReservationItem(BaseModel):
    """Reservation row joined with venue title and requester identity."""

    id: int
    event_date: date
    status: ReservationStatus
    created_at: datetime
    venue_id: int
    venue_title: str
    requester_id: int
    requester_username: Optional[str] = None
    requester_email: Optional[str] = None
