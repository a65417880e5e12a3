"""
Saved venues. Adding and removing are idempotent.
"""

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.logging import get_logger
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.favorite import Favorite
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.venue_service import get_venue

logger = get_logger(__name__)


async def list_favorites(db: AsyncSession, actor: CurrentUser) -> list[int]:
    async with unit_of_work(db, "list_favorites", actor_id=actor.id):
        result = await db.execute(
            select(Favorite.venue_id)
            .where(Favorite.user_id == actor.id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        venue_ids = list(result.scalars().all())
    return venue_ids


async def add_favorite(db: AsyncSession, actor: CurrentUser, venue_id: int) -> list[int]:
    async with unit_of_work(db, "add_favorite", venue_id=venue_id, actor_id=actor.id):
        await get_venue(db, venue_id)
        existing = await db.execute(
            select(Favorite.id).where(Favorite.user_id == actor.id, Favorite.venue_id == venue_id)
        )
        if existing.first() is None:
            db.add(Favorite(user_id=actor.id, venue_id=venue_id))
            try:
                await db.commit()
            except IntegrityError:
                # Same favorite saved by a parallel request
                await db.rollback()
            else:
                logger.info("favorite_added", venue_id=venue_id, actor_id=actor.id)
    return await list_favorites(db, actor)


async def remove_favorite(db: AsyncSession, actor: CurrentUser, venue_id: int) -> list[int]:
    async with unit_of_work(db, "remove_favorite", venue_id=venue_id, actor_id=actor.id):
        result = await db.execute(
            delete(Favorite).where(Favorite.user_id == actor.id, Favorite.venue_id == venue_id)
        )
        await db.commit()
    if result.rowcount:
        logger.info("favorite_removed", venue_id=venue_id, actor_id=actor.id)
    return await list_favorites(db, actor)
