"""
Reservation lifecycle engine: the only code that creates reservations or
changes their status.

CONCURRENCY STRATEGY
====================

Creating a reservation (check-then-insert):
  Problem:
    Two guests request the same venue on the same date at the same moment.
    Both read "no holding reservation", both insert. Result: double-booking.

  Solution (two layers):
    1. The venue row is locked (SELECT ... FOR UPDATE) for the duration of
       the blackout check, the slot check and the insert. Concurrent
       creations for one venue queue behind each other, and the second one
       sees the first one's row.
    2. A partial unique index on reservations(venue_id, event_date)
       WHERE status IN ('pending','accepted','confirmed') is the final
       safety net. Backends that ignore FOR UPDATE (SQLite) still cannot
       commit two holding rows; the loser's IntegrityError becomes SlotTaken.

Changing status (read-then-update):
  Optimistic compare-and-set, the same pattern as a version column:

    UPDATE reservations SET status = :target
    WHERE id = :id AND status = :expected

  rowcount == 0 means another request moved the reservation first. That is
  reported as Conflict; we do not retry because the caller's intent
  (e.g. "accept") may no longer make sense against the new status.

History:
  Rows are never deleted and created_at is never written after insert.
"""

import time
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from venue_booking.core.exceptions import (
    BookingError,
    Conflict,
    DateUnavailable,
    NotFound,
    SlotTaken,
    VenueClosed,
)
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import (
    record_reservation_attempt,
    record_transition,
    reservation_latency,
    slot_integrity_violations,
)
from venue_booking.db.base import utcnow
from venue_booking.db.unit_of_work import unit_of_work
from venue_booking.models.reservation import Reservation, ReservationStatus, HOLDING_STATUSES
from venue_booking.models.user import User
from venue_booking.models.venue import Venue
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.authorization import ensure_can_view, ensure_owner_scope, ensure_party
from venue_booking.services.availability_service import is_date_blocked
from venue_booking.services.transitions import ReservationAction, next_status, rule_for
from venue_booking.services.venue_service import get_venue

logger = get_logger(__name__)

HOLDING_SLOT_INDEX = "ux_reservations_holding_slot"


def _is_slot_violation(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite names the columns
    message = str(exc.orig)
    return (
        HOLDING_SLOT_INDEX in message
        or "reservations.venue_id, reservations.event_date" in message
    )


async def _holding_reservation_ids(
    db: AsyncSession,
    venue_id: int,
    event_date: date,
    exclude_id: Optional[int] = None,
) -> list[int]:
    query = select(Reservation.id).where(
        Reservation.venue_id == venue_id,
        Reservation.event_date == event_date,
        Reservation.status.in_(HOLDING_STATUSES),
    )
    if exclude_id is not None:
        query = query.where(Reservation.id != exclude_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_reservation(
    db: AsyncSession,
    actor: CurrentUser,
    venue_id: int,
    event_date: date,
) -> Reservation:
    """
    Request a venue for a date. The new reservation always starts pending.

    Raises NotFound, VenueClosed, DateUnavailable or SlotTaken.
    """
    started = time.perf_counter()
    context = {"venue_id": venue_id, "actor_id": actor.id, "event_date": event_date.isoformat()}

    try:
        async with unit_of_work(db, "create_reservation", **context):
            venue = await get_venue(db, venue_id, for_update=True)

            if not venue.is_open:
                raise VenueClosed(f"Venue {venue_id} is closed and not accepting reservations")

            if await is_date_blocked(db, venue_id, event_date):
                raise DateUnavailable(
                    f"Venue {venue_id} is unavailable on {event_date.isoformat()}",
                    event_date=event_date.isoformat(),
                )

            if await _holding_reservation_ids(db, venue_id, event_date):
                raise SlotTaken(
                    f"Venue {venue_id} is already reserved on {event_date.isoformat()}",
                    event_date=event_date.isoformat(),
                )

            reservation = Reservation(
                venue_id=venue_id,
                requester_id=actor.id,
                event_date=event_date,
                status=ReservationStatus.PENDING,
            )
            db.add(reservation)
            try:
                await db.flush()
                await db.commit()
            except IntegrityError as e:
                if not _is_slot_violation(e):
                    raise
                logger.info("reservation_slot_race_lost", **context)
                raise SlotTaken(
                    f"Venue {venue_id} is already reserved on {event_date.isoformat()}",
                    event_date=event_date.isoformat(),
                ) from e
    except BookingError as e:
        record_reservation_attempt(e.code)
        logger.info("reservation_rejected", reason=e.code, **context)
        raise
    finally:
        reservation_latency.observe(time.perf_counter() - started)

    record_reservation_attempt("created")
    logger.info("reservation_created", reservation_id=reservation.id, **context)
    return reservation


async def _load_reservation(db: AsyncSession, reservation_id: int) -> Reservation:
    result = await db.execute(
        select(Reservation)
        .options(selectinload(Reservation.venue))
        .where(Reservation.id == reservation_id)
        .execution_options(populate_existing=True)
    )
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFound(f"Reservation {reservation_id} not found")
    return reservation


async def transition_reservation(
    db: AsyncSession,
    reservation_id: int,
    actor: CurrentUser,
    action: ReservationAction,
) -> tuple[Reservation, ReservationStatus]:
    """
    Apply `action` to a reservation.

    Checks, in order: existence (NotFound), the acting party (Unauthorized),
    legality from the current status (InvalidTransition). The write is a
    compare-and-set on the status read here; losing that race raises Conflict.

    Returns the refreshed reservation and the status it moved from.
    """
    action = ReservationAction(action)
    rule = rule_for(action)
    context = {"reservation_id": reservation_id, "actor_id": actor.id, "action": action.value}

    try:
        async with unit_of_work(db, "transition_reservation", **context):
            reservation = await _load_reservation(db, reservation_id)
            venue = reservation.venue
            context["venue_id"] = venue.id

            ensure_party(reservation, venue, actor, rule.party)

            current = reservation.status
            target = next_status(action, current)

            if target in HOLDING_STATUSES:
                await _check_slot_before_hold(db, reservation, current, context)

            try:
                result = await db.execute(
                    update(Reservation)
                    .where(Reservation.id == reservation_id, Reservation.status == current)
                    .values(status=target, updated_at=utcnow())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    logger.info("reservation_transition_race_lost", expected_status=current.value, **context)
                    raise Conflict(
                        "Reservation was modified by another request. Reload and try again.",
                        expected_status=current.value,
                    )
                await db.commit()
            except IntegrityError as e:
                if not _is_slot_violation(e):
                    raise
                raise SlotTaken(
                    f"Venue {venue.id} has been reserved by someone else on {reservation.event_date.isoformat()}",
                    event_date=reservation.event_date.isoformat(),
                ) from e

            await db.refresh(reservation)
    except BookingError as e:
        record_transition(action.value, e.code)
        raise

    record_transition(action.value, "applied")
    logger.info(
        "reservation_transitioned",
        previous_status=current.value,
        status=target.value,
        **context,
    )
    return reservation, current


async def _check_slot_before_hold(
    db: AsyncSession,
    reservation: Reservation,
    current: ReservationStatus,
    context: dict,
) -> None:
    """
    Before moving a reservation into a holding status, look for other
    holders of the same slot.

    From a non-holding status (cancellation_requested -> confirmed) the slot
    may have been legitimately re-booked meanwhile: that is SlotTaken.
    From a holding status another holder means the data is already
    inconsistent. We log it and carry on with this row only.
    """
    others = await _holding_reservation_ids(
        db, reservation.venue_id, reservation.event_date, exclude_id=reservation.id
    )
    if not others:
        return

    if current not in HOLDING_STATUSES:
        raise SlotTaken(
            f"Venue {reservation.venue_id} has been reserved by someone else on "
            f"{reservation.event_date.isoformat()}",
            event_date=reservation.event_date.isoformat(),
        )

    slot_integrity_violations.inc()
    logger.error(
        "slot_integrity_violation",
        event_date=reservation.event_date.isoformat(),
        conflicting_reservation_ids=others,
        **context,
    )


async def get_reservation(db: AsyncSession, reservation_id: int, actor: CurrentUser) -> Reservation:
    """Single reservation, visible to the venue owner, the requester or an admin."""
    async with unit_of_work(db, "get_reservation", reservation_id=reservation_id, actor_id=actor.id):
        reservation = await _load_reservation(db, reservation_id)
        ensure_can_view(reservation, reservation.venue, actor)
    return reservation


def owner_reservations_query(owner_id: int):
    """
    Reservations across every venue owned by owner_id, joined with the
    venue title and requester identity, newest first.
    """
    return (
        select(
            Reservation.id,
            Reservation.event_date,
            Reservation.status,
            Reservation.created_at,
            Venue.id.label("venue_id"),
            Venue.title.label("venue_title"),
            Reservation.requester_id,
            User.username.label("requester_username"),
            User.email.label("requester_email"),
        )
        .join(Venue, Reservation.venue_id == Venue.id)
        .outerjoin(User, Reservation.requester_id == User.id)
        .where(Venue.owner_id == owner_id)
        .order_by(Reservation.created_at.desc(), Reservation.id.desc())
    )


async def list_for_owner(
    db: AsyncSession,
    owner_id: int,
    actor: CurrentUser,
    statuses: Optional[Iterable[ReservationStatus]] = None,
) -> list[dict]:
    """Dashboard listing for an owner, optionally limited to some statuses."""
    ensure_owner_scope(owner_id, actor)
    query = owner_reservations_query(owner_id)
    status_filter = {ReservationStatus(s) for s in statuses} if statuses else None
    if status_filter:
        query = query.where(Reservation.status.in_(status_filter))

    async with unit_of_work(db, "list_for_owner", owner_id=owner_id, actor_id=actor.id):
        result = await db.execute(query)
        rows = [dict(row) for row in result.mappings().all()]
    return rows


async def list_for_requester(db: AsyncSession, actor: CurrentUser) -> list[Reservation]:
    """Reservations the caller has requested, newest first."""
    async with unit_of_work(db, "list_for_requester", actor_id=actor.id):
        result = await db.execute(
            select(Reservation)
            .where(Reservation.requester_id == actor.id)
            .order_by(Reservation.created_at.desc(), Reservation.id.desc())
        )
        reservations = list(result.scalars().all())
    return reservations


async def count_holding(db: AsyncSession, venue_id: int, event_date: date) -> int:
    """Number of holding reservations for a slot. Anything above 1 is an integrity problem."""
    result = await db.execute(
        select(func.count(Reservation.id)).where(
            Reservation.venue_id == venue_id,
            Reservation.event_date == event_date,
            Reservation.status.in_(HOLDING_STATUSES),
        )
    )
    return result.scalar_one()
