"""
Venue directory: lookups, owner listings, the public map listing and the
owner's open/closed toggle.
"""

from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.exceptions import NotFound
from venue_booking.core.logging import get_logger
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.venue import Venue, VenueStatus
from venue_booking.schemas.user import CurrentUser
from venue_booking.schemas.venue import VenueSort
from venue_booking.services.authorization import ensure_venue_owner

logger = get_logger(__name__)


async def get_venue(db: AsyncSession, venue_id: int, for_update: bool = False) -> Venue:
    """
    Get a single venue by ID.
    With for_update the row stays locked until the caller's transaction ends.
    """
    query = select(Venue).where(Venue.id == venue_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    venue = result.scalar_one_or_none()

    if not venue:
        raise NotFound(f"Venue {venue_id} not found")
    return venue


async def lookup_venue(db: AsyncSession, venue_id: int) -> Venue:
    async with unit_of_work(db, "get_venue", venue_id=venue_id):
        venue = await get_venue(db, venue_id)
    return venue


async def list_owner_venues(
    db: AsyncSession,
    owner_id: int,
    status: Optional[VenueStatus] = None,
) -> list[Venue]:
    """Venues owned by owner_id, newest first, optionally open/closed only."""
    query = select(Venue).where(Venue.owner_id == owner_id)
    if status is not None:
        query = query.where(Venue.status == status)
    async with unit_of_work(db, "list_owner_venues", owner_id=owner_id):
        result = await db.execute(query.order_by(Venue.created_at.desc(), Venue.id.desc()))
        venues = list(result.scalars().all())
    return venues


async def list_map_venues(
    db: AsyncSession,
    search: Optional[str] = None,
    sort: VenueSort = VenueSort.NEWEST,
) -> tuple[list[Venue], int]:
    """
    Open venues that can be pinned on the map (both coordinates set).
    Title search is case-insensitive substring match.
    """
    query = select(Venue).where(
        Venue.status == VenueStatus.OPEN,
        Venue.latitude.is_not(None),
        Venue.longitude.is_not(None),
    )
    if search:
        query = query.where(Venue.title.icontains(search.strip(), autoescape=True))

    count_query = select(func.count()).select_from(query.subquery())

    if sort == VenueSort.PRICE_ASC:
        query = query.order_by(Venue.price.asc(), Venue.id.asc())
    elif sort == VenueSort.PRICE_DESC:
        query = query.order_by(Venue.price.desc(), Venue.id.asc())
    else:
        query = query.order_by(Venue.created_at.desc(), Venue.id.desc())

    async with unit_of_work(db, "list_map_venues"):
        total = (await db.execute(count_query)).scalar()
        result = await db.execute(query)
        venues = list(result.scalars().all())
    return venues, total


async def set_venue_status(
    db: AsyncSession,
    venue_id: int,
    actor: CurrentUser,
    status: VenueStatus,
) -> Venue:
    """Open or close a venue. Existing reservations are left untouched."""
    async with unit_of_work(db, "set_venue_status", venue_id=venue_id, actor_id=actor.id):
        venue = await get_venue(db, venue_id, for_update=True)
        ensure_venue_owner(venue, actor)
        previous = venue.status
        venue.status = status
        await db.commit()

    logger.info(
        "venue_status_changed",
        venue_id=venue_id,
        actor_id=actor.id,
        previous_status=previous.value,
        status=status.value,
    )
    return venue
