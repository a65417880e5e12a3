"""
Owner dashboard endpoints. An owner sees only their own venues'
reservations; admins may look at any owner.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.db.session import get_db
from venue_booking.models.reservation import ReservationStatus
from venue_booking.models.venue import VenueStatus
from venue_booking.schemas.reporting import DashboardResponse
from venue_booking.schemas.reservation import OwnerReservationItem
from venue_booking.schemas.user import CurrentUser
from venue_booking.schemas.venue import VenueResponse
from venue_booking.services.authorization import ensure_owner_scope
from venue_booking.services.reporting_service import dashboard_summary
from venue_booking.services.reservation_service import list_for_owner
from venue_booking.services.venue_service import list_owner_venues
from venue_booking.core.security import get_current_user

router = APIRouter(prefix="/owners", tags=["Owners"])


@router.get("/{owner_id}/reservations", response_model=list[OwnerReservationItem])
async def list_owner_reservations(
    owner_id: int,
    status: Optional[list[ReservationStatus]] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Reservations across the owner's venues, newest first. Repeat ?status= to filter on several."""
    return await list_for_owner(db, owner_id, current_user, status)


@router.get("/{owner_id}/dashboard", response_model=DashboardResponse)
async def owner_dashboard(
    owner_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Total, pending and cancelled counters plus the most recent reservations."""
    return await dashboard_summary(db, owner_id, current_user)


@router.get("/{owner_id}/venues", response_model=list[VenueResponse])
async def list_owner_venues_endpoint(
    owner_id: int,
    status: Optional[VenueStatus] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ensure_owner_scope(owner_id, current_user)
    return await list_owner_venues(db, owner_id, status)
