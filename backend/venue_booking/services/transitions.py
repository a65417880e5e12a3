"""
Reservation state machine.

    pending                -> accepted                (owner: accept)
    pending                -> rejected                (owner: reject)
    accepted               -> confirmed               (owner: confirm)
    accepted               -> cancelled               (owner: cancel)
    confirmed              -> completed               (owner: complete)
    confirmed              -> cancellation_requested  (requester: request_cancellation)
    cancellation_requested -> cancelled               (owner: approve_cancellation)
    cancellation_requested -> confirmed               (owner: deny_cancellation)

Each action has exactly one target status, a set of legal source statuses and
the party allowed to trigger it. Admins may act as either party.
"""

import enum
from dataclasses import dataclass

from venue_booking.core.exceptions import InvalidTransition
from venue_booking.models.reservation import ReservationStatus


class ReservationAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    COMPLETE = "complete"
    REQUEST_CANCELLATION = "request_cancellation"
    APPROVE_CANCELLATION = "approve_cancellation"
    DENY_CANCELLATION = "deny_cancellation"


class Party(str, enum.Enum):
    OWNER = "owner"
    REQUESTER = "requester"


@dataclass(frozen=True)
class TransitionRule:
    sources: frozenset
    target: ReservationStatus
    party: Party


TRANSITIONS: dict[ReservationAction, TransitionRule] = {
    ReservationAction.ACCEPT: TransitionRule(
        frozenset({ReservationStatus.PENDING}), ReservationStatus.ACCEPTED, Party.OWNER,
    ),
    ReservationAction.REJECT: TransitionRule(
        frozenset({ReservationStatus.PENDING}), ReservationStatus.REJECTED, Party.OWNER,
    ),
    ReservationAction.CONFIRM: TransitionRule(
        frozenset({ReservationStatus.ACCEPTED}), ReservationStatus.CONFIRMED, Party.OWNER,
    ),
    ReservationAction.CANCEL: TransitionRule(
        frozenset({ReservationStatus.ACCEPTED}), ReservationStatus.CANCELLED, Party.OWNER,
    ),
    ReservationAction.COMPLETE: TransitionRule(
        frozenset({ReservationStatus.CONFIRMED}), ReservationStatus.COMPLETED, Party.OWNER,
    ),
    ReservationAction.REQUEST_CANCELLATION: TransitionRule(
        frozenset({ReservationStatus.CONFIRMED}), ReservationStatus.CANCELLATION_REQUESTED, Party.REQUESTER,
    ),
    ReservationAction.APPROVE_CANCELLATION: TransitionRule(
        frozenset({ReservationStatus.CANCELLATION_REQUESTED}), ReservationStatus.CANCELLED, Party.OWNER,
    ),
    ReservationAction.DENY_CANCELLATION: TransitionRule(
        frozenset({ReservationStatus.CANCELLATION_REQUESTED}), ReservationStatus.CONFIRMED, Party.OWNER,
    ),
}


def rule_for(action: ReservationAction) -> TransitionRule:
    return TRANSITIONS[ReservationAction(action)]


def next_status(action: ReservationAction, current: ReservationStatus) -> ReservationStatus:
    """Return the status `action` moves `current` to, or raise InvalidTransition."""
    action = ReservationAction(action)
    current = ReservationStatus(current)
    rule = TRANSITIONS[action]
    if current not in rule.sources:
        raise InvalidTransition(action.value, current.value)
    return rule.target


def allowed_actions(current: ReservationStatus) -> list[ReservationAction]:
    """Actions legal from `current`, in declaration order. Empty for terminal statuses."""
    current = ReservationStatus(current)
    return [action for action, rule in TRANSITIONS.items() if current in rule.sources]
