"""
Authorization guards shared by the reservation, availability and reporting
services. Each guard takes the explicit CurrentUser and raises Unauthorized.
"""

from venue_booking.core.exceptions import Unauthorized
from venue_booking.core.logging import get_logger
from venue_booking.models.reservation import Reservation
from venue_booking.models.venue import Venue
from venue_booking.schemas.user import CurrentUser
from venue_booking.services.transitions import Party

logger = get_logger(__name__)


def is_venue_owner(venue: Venue, actor: CurrentUser) -> bool:
    return venue.owner_id == actor.id


def ensure_venue_owner(venue: Venue, actor: CurrentUser) -> None:
    """Owner of the venue or an admin."""
    if actor.is_admin or is_venue_owner(venue, actor):
        return
    logger.warning("authorization_denied", venue_id=venue.id, actor_id=actor.id, required="venue_owner")
    raise Unauthorized("Only the venue owner can perform this action")


def ensure_owner_scope(owner_id: int, actor: CurrentUser) -> None:
    """Dashboards and owner listings: the owner themself or an admin."""
    if actor.is_admin or actor.id == owner_id:
        return
    logger.warning("authorization_denied", owner_id=owner_id, actor_id=actor.id, required="owner_scope")
    raise Unauthorized("You can only view your own reservations dashboard")


def ensure_party(reservation: Reservation, venue: Venue, actor: CurrentUser, party: Party) -> None:
    """The party an action belongs to (venue owner or requester), or an admin."""
    if actor.is_admin:
        return
    if party == Party.OWNER and is_venue_owner(venue, actor):
        return
    if party == Party.REQUESTER and reservation.requester_id == actor.id:
        return
    logger.warning(
        "authorization_denied",
        reservation_id=reservation.id,
        venue_id=venue.id,
        actor_id=actor.id,
        required=party.value,
    )
    raise Unauthorized(f"Only the reservation's {party.value} can perform this action")


def ensure_can_view(reservation: Reservation, venue: Venue, actor: CurrentUser) -> None:
    if actor.is_admin or is_venue_owner(venue, actor) or reservation.requester_id == actor.id:
        return
    raise Unauthorized("You are not a party to this reservation")
