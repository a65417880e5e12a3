"""
Owner dashboard counters and recent activity.

Pure reads scoped to the set of venues an owner holds. Counters are computed
in a single statement so total/pending/cancelled always come from the same
snapshot; nothing here is cached.
"""

from typing import Iterable

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.reservation import Reservation, ReservationStatus, CANCELLED_COUNTER_STATUSES
from venue_booking.models.venue import Venue
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.authorization import ensure_owner_scope
from venue_booking.services.reservation_service import owner_reservations_query

logger = get_logger(__name__)


async def _count_by_status(db: AsyncSession, owner_id: int, statuses: Iterable[ReservationStatus]) -> int:
    wanted = {ReservationStatus(s) for s in statuses}
    if not wanted:
        return 0
    result = await db.execute(
        select(func.count(Reservation.id))
        .join(Venue, Reservation.venue_id == Venue.id)
        .where(Venue.owner_id == owner_id, Reservation.status.in_(wanted))
    )
    return result.scalar_one()


async def _recent_for_owner(db: AsyncSession, owner_id: int, limit: int) -> list[dict]:
    result = await db.execute(owner_reservations_query(owner_id).limit(limit))
    return [dict(row) for row in result.mappings().all()]


async def count_by_status(
    db: AsyncSession,
    owner_id: int,
    actor: CurrentUser,
    statuses: Iterable[ReservationStatus],
) -> int:
    """Reservations across the owner's venues whose status is in `statuses`."""
    ensure_owner_scope(owner_id, actor)
    wanted = list(statuses)
    async with unit_of_work(db, "count_by_status", owner_id=owner_id, actor_id=actor.id):
        count = await _count_by_status(db, owner_id, wanted)
    return count


async def count_cancelled(db: AsyncSession, owner_id: int, actor: CurrentUser) -> int:
    """The dashboard's cancelled counter: cancelled plus cancellation_requested."""
    return await count_by_status(db, owner_id, actor, CANCELLED_COUNTER_STATUSES)


async def recent_for_owner(
    db: AsyncSession,
    owner_id: int,
    actor: CurrentUser,
    limit: int = 10,
) -> list[dict]:
    """Latest `limit` reservations across the owner's venues, with venue and requester."""
    ensure_owner_scope(owner_id, actor)
    async with unit_of_work(db, "recent_for_owner", owner_id=owner_id, actor_id=actor.id):
        recent = await _recent_for_owner(db, owner_id, limit)
    return recent


async def _dashboard_counters(db: AsyncSession, owner_id: int) -> dict:
    pending = case((Reservation.status == ReservationStatus.PENDING, 1), else_=0)
    cancelled = case((Reservation.status.in_(CANCELLED_COUNTER_STATUSES), 1), else_=0)
    result = await db.execute(
        select(
            func.count(Reservation.id).label("total"),
            func.coalesce(func.sum(pending), 0).label("pending"),
            func.coalesce(func.sum(cancelled), 0).label("cancelled"),
        )
        .join(Venue, Reservation.venue_id == Venue.id)
        .where(Venue.owner_id == owner_id)
    )
    row = result.one()
    return {"total": int(row.total), "pending": int(row.pending), "cancelled": int(row.cancelled)}


async def dashboard_summary(db: AsyncSession, owner_id: int, actor: CurrentUser) -> dict:
    ensure_owner_scope(owner_id, actor)
    limit = get_settings().DASHBOARD_RECENT_LIMIT

    async with unit_of_work(db, "dashboard_summary", owner_id=owner_id, actor_id=actor.id):
        counters = await _dashboard_counters(db, owner_id)
        recent = await _recent_for_owner(db, owner_id, limit)

    logger.debug("dashboard_computed", owner_id=owner_id, **counters)
    return {
        "owner_id": owner_id,
        "total_reservations": counters["total"],
        "pending_reservations": counters["pending"],
        "cancelled_reservations": counters["cancelled"],
        "recent": recent,
    }
