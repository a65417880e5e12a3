"""
Reservation: one row per booking request for a venue on a given date.

Key design decisions:
- status is a closed enumeration; the allowed moves live in
  venue_booking.services.transitions
- Rows are never deleted: rejected/cancelled/completed stay as history
- Partial unique index on (venue_id, event_date) restricted to holding
  statuses is the database-level guard against double-booking. Any number
  of rejected/cancelled rows may share a slot.
- venue_id, requester_id and created_at are never updated
"""

import enum

from sqlalchemy import Column, Integer, Date, ForeignKey, Index, Enum, text
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    CANCELLATION_REQUESTED = "cancellation_requested"
    COMPLETED = "completed"


# Statuses that block every other request for the same venue and date
HOLDING_STATUSES = frozenset({
    ReservationStatus.PENDING,
    ReservationStatus.ACCEPTED,
    ReservationStatus.CONFIRMED,
})

TERMINAL_STATUSES = frozenset({
    ReservationStatus.REJECTED,
    ReservationStatus.CANCELLED,
    ReservationStatus.COMPLETED,
})

# Dashboard "cancelled" counter includes requests still awaiting the owner
CANCELLED_COUNTER_STATUSES = frozenset({
    ReservationStatus.CANCELLED,
    ReservationStatus.CANCELLATION_REQUESTED,
})

_HOLDING_SQL = "status IN ('pending', 'accepted', 'confirmed')"


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_date = Column(Date, nullable=False)
    status = Column(
        Enum(
            ReservationStatus,
            name="reservation_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda statuses: [s.value for s in statuses],
            length=32,
        ),
        nullable=False,
        default=ReservationStatus.PENDING,
    )

    venue = relationship("Venue", back_populates="reservations")
    requester = relationship("User", back_populates="reservations")

    __table_args__ = (
        Index(
            "ux_reservations_holding_slot",
            "venue_id",
            "event_date",
            unique=True,
            postgresql_where=text(_HOLDING_SQL),
            sqlite_where=text(_HOLDING_SQL),
        ),
        # Dashboards: counts and listings by venue + status, newest first
        Index("ix_reservations_venue_status", "venue_id", "status"),
        Index("ix_reservations_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, venue={self.venue_id}, requester={self.requester_id}, "
            f"date={self.event_date}, status={self.status})>"
        )
