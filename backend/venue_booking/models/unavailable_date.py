"""
Owner-declared blackout dates, independent of reservations.
The set for a venue is always replaced as a whole, never diffed.
"""

from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base


class UnavailableDate(Base):
    __tablename__ = "unavailable_dates"

    id = Column(Integer, primary_key=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    venue = relationship("Venue", back_populates="unavailable_dates")

    __table_args__ = (
        UniqueConstraint("venue_id", "date", name="uq_unavailable_venue_date"),
    )

    def __repr__(self) -> str:
        return f"<UnavailableDate(venue={self.venue_id}, date={self.date})>"
