"""Pydantic v2 request/response schemas for reviews and favorites."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.car import CarSummary
from app.schemas.user import UserSummary


class ReviewCreate(BaseModel):
    car_id: uuid.UUID
    booking_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=2000)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    car_id: uuid.UUID
    booking_id: uuid.UUID
    rating: int
    comment: str
    created_at: datetime
    reviewer: UserSummary

    model_config = ConfigDict(from_attributes=True)


class FavoriteCreate(BaseModel):
    car_id: uuid.UUID


class FavoriteResponse(BaseModel):
    id: uuid.UUID
    car_id: uuid.UUID
    created_at: datetime
    car: CarSummary

    model_config = ConfigDict(from_attributes=True)
