"""
A user's saved venue.
"""

from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint

from venue_booking.db.base import Base, TimestampMixin


class Favorite(Base, TimestampMixin):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "venue_id", name="uq_favorite_user_venue"),
    )
