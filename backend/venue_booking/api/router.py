"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from venue_booking.api.routes import reservations, venues, owners

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(reservations.router)
api_router.include_router(venues.router)
api_router.include_router(venues.favorites_router)
api_router.include_router(owners.router)
