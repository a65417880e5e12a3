"""
Reservation endpoints: request a date, move a reservation through its
lifecycle, and read reservations the caller is party to.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.db.session import get_db
from venue_booking.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    TransitionRequest,
    TransitionResponse,
)
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.reservation_service import (
    create_reservation,
    get_reservation,
    list_for_requester,
    transition_reservation,
)
from venue_booking.core.security import get_current_user

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation_endpoint(
    reservation_data: ReservationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a venue for a date. The reservation starts as pending.

    409 when the venue is closed, the date is blacked out, or another
    pending/accepted/confirmed reservation already holds the date.
    """
    return await create_reservation(
        db, current_user, reservation_data.venue_id, reservation_data.event_date
    )


@router.get("/mine", response_model=list[ReservationResponse])
async def list_my_reservations(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Reservations the authenticated user has requested, newest first."""
    return await list_for_requester(db, current_user)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation_endpoint(
    reservation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_reservation(db, reservation_id, current_user)


@router.post("/{reservation_id}/transition", response_model=TransitionResponse)
async def transition_reservation_endpoint(
    reservation_id: int,
    transition: TransitionRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply a lifecycle action (accept, reject, confirm, cancel, complete,
    request_cancellation, approve_cancellation, deny_cancellation).

    409 with code "conflict" means another request changed the reservation
    first; reload it before retrying.
    """
    reservation, previous = await transition_reservation(
        db, reservation_id, current_user, transition.action
    )
    return TransitionResponse(id=reservation.id, previous_status=previous, status=reservation.status)
