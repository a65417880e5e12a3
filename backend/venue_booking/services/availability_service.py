"""
Availability calendar: owner-declared blackout dates.

The editing UI redraws the whole calendar on save, so the stored set is
replaced wholesale: delete every date for the venue, insert the submitted
ones. Both statements run in one transaction under the venue row lock, so
a failure part-way leaves the previous set intact and concurrent readers
never see an empty or partial calendar.
"""

import re
from datetime import date
from typing import Any, Iterable

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.exceptions import BookingError, InvalidDate
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_availability_update
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.unavailable_date import UnavailableDate
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.authorization import ensure_venue_owner
from venue_booking.services.venue_service import get_venue

logger = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_dates(entries: Iterable[Any]) -> list[date]:
    """
    Parse YYYY-MM-DD strings into a sorted, de-duplicated list.
    Entries that are neither strings nor dates (numbers, null) are invalid.
    Raises InvalidDate naming every bad entry, not just the first.
    """
    parsed: set[date] = set()
    invalid: list[str] = []

    for entry in entries:
        if isinstance(entry, date):
            parsed.add(entry)
            continue
        if not isinstance(entry, str):
            invalid.append(str(entry))
            continue
        text = entry.strip()
        if not _ISO_DATE.match(text):
            invalid.append(str(entry))
            continue
        try:
            parsed.add(date.fromisoformat(text))
        except ValueError:
            # Right shape, impossible day (2025-02-30)
            invalid.append(str(entry))

    if invalid:
        raise InvalidDate(invalid)
    return sorted(parsed)


async def set_unavailable_dates(
    db: AsyncSession,
    venue_id: int,
    actor: CurrentUser,
    dates: Iterable[Any],
) -> list[date]:
    """Replace the venue's blackout set with `dates`. Returns the stored set."""
    entries = list(dates)
    try:
        async with unit_of_work(db, "set_unavailable_dates", venue_id=venue_id, actor_id=actor.id):
            venue = await get_venue(db, venue_id, for_update=True)
            ensure_venue_owner(venue, actor)
            new_dates = parse_dates(entries)

            await db.execute(delete(UnavailableDate).where(UnavailableDate.venue_id == venue_id))
            db.add_all([UnavailableDate(venue_id=venue_id, date=day) for day in new_dates])
            await db.flush()
            await db.commit()
    except InvalidDate:
        record_availability_update("invalid")
        raise
    except BookingError as e:
        record_availability_update(e.code)
        raise

    record_availability_update("replaced")
    logger.info(
        "unavailable_dates_replaced",
        venue_id=venue_id,
        actor_id=actor.id,
        date_count=len(new_dates),
    )
    return new_dates


async def is_date_blocked(db: AsyncSession, venue_id: int, day: date) -> bool:
    result = await db.execute(
        select(UnavailableDate.id).where(
            UnavailableDate.venue_id == venue_id,
            UnavailableDate.date == day,
        ).limit(1)
    )
    return result.first() is not None


async def get_unavailable_dates(db: AsyncSession, venue_id: int) -> list[date]:
    """Sorted blackout dates for calendar display."""
    async with unit_of_work(db, "get_unavailable_dates", venue_id=venue_id):
        await get_venue(db, venue_id)
        result = await db.execute(
            select(UnavailableDate.date)
            .where(UnavailableDate.venue_id == venue_id)
            .order_by(UnavailableDate.date.asc())
        )
        dates = list(result.scalars().all())
    return dates
