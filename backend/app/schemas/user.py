"""Pydantic v2 response schemas for users."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Public user fields shown next to bookings, cars and reviews."""

    id: uuid.UUID
    name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Full profile of the authenticated user."""

    email: str
    phone: str | None = None
    is_active: bool
    role: str
    created_at: datetime


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
