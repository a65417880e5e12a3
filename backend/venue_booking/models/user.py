"""
User record as seen by the reservation engine.

Accounts are created and authenticated by an external collaborator; this
service only needs a stable id, display identity and the role that drives
authorization.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, Enum
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    CLIENT = "client"  # venue owner
    GUEST = "guest"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda roles: [r.value for r in roles],
            length=20,
        ),
        nullable=False,
        default=UserRole.GUEST,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    venues = relationship("Venue", back_populates="owner")
    reservations = relationship("Reservation", back_populates="requester")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
