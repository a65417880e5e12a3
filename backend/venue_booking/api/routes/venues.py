"""
Venue endpoints: map listing (Redis-cached), venue details, open/closed
toggle, blackout calendar and favorites.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.db.session import get_db
from venue_booking.schemas.availability import UnavailableDatesResponse, UnavailableDatesUpdate
from venue_booking.schemas.user import CurrentUser
from venue_booking.schemas.venue import (
    FavoritesResponse,
    VenueListResponse,
    VenueResponse,
    VenueSort,
    VenueStatusUpdate,
)
from venue_booking.services.availability_service import get_unavailable_dates, set_unavailable_dates
from venue_booking.services.cache_service import (
    get_cached_map_venues,
    invalidate_venue_cache,
    set_cached_map_venues,
)
from venue_booking.services.favorite_service import add_favorite, list_favorites, remove_favorite
from venue_booking.services.venue_service import list_map_venues, lookup_venue, set_venue_status
from venue_booking.core.security import get_current_user
from venue_booking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/venues", tags=["Venues"])


@router.get("", response_model=VenueListResponse)
async def list_venues_endpoint(
    q: Optional[str] = Query(None, max_length=100),
    sort: VenueSort = Query(VenueSort.NEWEST),
    db: AsyncSession = Depends(get_db),
):
    """
    Open venues with coordinates, for the map.
    Results are cached in Redis; the cache is invalidated when a venue is
    opened or closed.
    """
    cached = await get_cached_map_venues(q, sort.value)
    if cached:
        logger.info("venue_map_cache_hit", q=q, sort=sort.value)
        cached["cached"] = True
        return VenueListResponse(**cached)

    venues, total = await list_map_venues(db, q, sort)

    response_data = {
        "venues": [VenueResponse.model_validate(v).model_dump(mode="json") for v in venues],
        "total": total,
        "cached": False,
    }
    await set_cached_map_venues(q, sort.value, response_data)

    return VenueListResponse(**response_data)


@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue_endpoint(venue_id: int, db: AsyncSession = Depends(get_db)):
    """Single venue. Not cached (status gates reservations)."""
    return await lookup_venue(db, venue_id)


@router.patch("/{venue_id}/status", response_model=VenueResponse)
async def set_venue_status_endpoint(
    venue_id: int,
    update: VenueStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Open or close a venue. Owner or admin only."""
    venue = await set_venue_status(db, venue_id, current_user, update.status)
    await invalidate_venue_cache()
    return venue


@router.get("/{venue_id}/unavailable-dates", response_model=UnavailableDatesResponse)
async def get_unavailable_dates_endpoint(venue_id: int, db: AsyncSession = Depends(get_db)):
    dates = await get_unavailable_dates(db, venue_id)
    return UnavailableDatesResponse(venue_id=venue_id, dates=dates)


@router.put("/{venue_id}/unavailable-dates", response_model=UnavailableDatesResponse)
async def set_unavailable_dates_endpoint(
    venue_id: int,
    update: UnavailableDatesUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace the venue's blackout dates with the submitted set.
    422 lists every entry that is not a valid YYYY-MM-DD date.
    """
    dates = await set_unavailable_dates(db, venue_id, current_user, update.dates)
    return UnavailableDatesResponse(venue_id=venue_id, dates=dates)


@router.put("/{venue_id}/favorite", response_model=FavoritesResponse)
async def add_favorite_endpoint(
    venue_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return FavoritesResponse(venue_ids=await add_favorite(db, current_user, venue_id))


@router.delete("/{venue_id}/favorite", response_model=FavoritesResponse)
async def remove_favorite_endpoint(
    venue_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return FavoritesResponse(venue_ids=await remove_favorite(db, current_user, venue_id))


favorites_router = APIRouter(prefix="/favorites", tags=["Venues"])


@favorites_router.get("", response_model=FavoritesResponse)
async def list_favorites_endpoint(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Venue ids the authenticated user has saved, most recent first."""
    return FavoritesResponse(venue_ids=await list_favorites(db, current_user))
