"""
Venue listed by an owner.

Key design decisions:
- Exactly one owner (owner_id); ownership never transfers
- status gates new reservations: closed venues accept none
- Coordinates are optional; only venues with both appear on the map listing
"""

import enum

from sqlalchemy import Column, Integer, String, Numeric, Float, ForeignKey, Index, CheckConstraint, Enum
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class VenueStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    capacity = Column(Integer, nullable=True)
    status = Column(
        Enum(
            VenueStatus,
            name="venue_status",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda statuses: [s.value for s in statuses],
            length=20,
        ),
        nullable=False,
        default=VenueStatus.OPEN,
    )
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    owner = relationship("User", back_populates="venues")
    reservations = relationship("Reservation", back_populates="venue")
    unavailable_dates = relationship(
        "UnavailableDate",
        back_populates="venue",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_venue_price_non_negative"),
        # Owner dashboard: "my venues, optionally open/closed"
        Index("ix_venues_owner_status", "owner_id", "status"),
    )

    @property
    def is_open(self) -> bool:
        return self.status == VenueStatus.OPEN

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, title={self.title}, owner={self.owner_id}, status={self.status})>"
