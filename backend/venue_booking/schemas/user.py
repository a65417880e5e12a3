"""
Caller identity passed explicitly into every service call.
"""

from pydantic import BaseModel

from venue_booking.models.user import UserRole


class CurrentUser(BaseModel):
    id: int
    role: UserRole

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

