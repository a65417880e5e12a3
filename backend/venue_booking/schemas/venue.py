"""
Pydantic schemas for venue-related request/response validation.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from venue_booking.models.venue import VenueStatus


class VenueSort(str, enum.Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class VenueResponse(BaseModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str]
    price: Decimal
    capacity: Optional[int]
    status: VenueStatus
    latitude: Optional[float]
    longitude: Optional[float]
    created_at: datetime

    model_config = {"from_attributes": True}


class VenueListResponse(BaseModel):
    venues: list[VenueResponse]
    total: int
    cached: bool = False


class VenueStatusUpdate(BaseModel):
    status: VenueStatus


class FavoritesResponse(BaseModel):
    venue_ids: list[int]
