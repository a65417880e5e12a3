"""
Pydantic schemas for the availability calendar.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class UnavailableDatesUpdate(BaseModel):
    # Raw entries: the service validates each one and reports every bad one
    dates: list[Any] = Field(default_factory=list, max_length=1000)


class UnavailableDatesResponse(BaseModel):
    venue_id: int
    dates: list[date]
