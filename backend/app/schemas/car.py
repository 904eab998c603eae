"""Pydantic v2 request/response schemas for car listing endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary

_STATUS_PATTERN = "^(pending|active|inactive|suspended)$"
_TRANSMISSION_PATTERN = "^(automatic|manual)$"
_FUEL_PATTERN = "^(petrol|diesel|electric|hybrid)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CarCreate(BaseModel):
    """Schema for listing a new car."""

    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=date.today().year + 1)
    car_type: str = Field(..., min_length=1, max_length=50)
    transmission: str = Field(..., pattern=_TRANSMISSION_PATTERN)
    fuel_type: str = Field(..., pattern=_FUEL_PATTERN)
    seats: int = Field(..., ge=2, le=20)
    daily_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    location: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    images: list[str] = []
    features: list[str] = []
    status: str = Field("active", pattern=_STATUS_PATTERN)


class CarUpdate(BaseModel):
    """Schema for partially updating a car. All fields optional."""

    make: str | None = Field(None, min_length=1, max_length=100)
    model: str | None = Field(None, min_length=1, max_length=100)
    year: int | None = Field(None, ge=1900, le=date.today().year + 1)
    car_type: str | None = Field(None, min_length=1, max_length=50)
    transmission: str | None = Field(None, pattern=_TRANSMISSION_PATTERN)
    fuel_type: str | None = Field(None, pattern=_FUEL_PATTERN)
    seats: int | None = Field(None, ge=2, le=20)
    daily_price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    location: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    images: list[str] | None = None
    features: list[str] | None = None
    status: str | None = Field(None, pattern=_STATUS_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CarSummary(BaseModel):
    """Compact car fields embedded in bookings and favorites."""

    id: uuid.UUID
    make: str
    model: str
    year: int
    daily_price: Decimal
    location: str
    images: list | None = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class CarResponse(CarSummary):
    """Full car listing."""

    owner_id: uuid.UUID
    car_type: str
    transmission: str
    fuel_type: str
    seats: int
    description: str | None = None
    features: list | None = None
    rating: Decimal
    total_reviews: int
    created_at: datetime
    updated_at: datetime
    owner: UserSummary | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class CarListResponse(BaseModel):
    """Paginated list of cars."""

    items: list[CarResponse]
    pagination: Pagination


class BookedDatesResponse(BaseModel):
    """Calendar days (``YYYY-MM-DD``) on which a car is already taken."""

    booked_dates: list[str]


class QuoteResponse(BaseModel):
    """Price breakdown for a prospective stay."""

    car_id: uuid.UUID
    start_date: date
    end_date: date
    total_days: int
    daily_rate: Decimal
    subtotal: Decimal
    service_fee: Decimal
    insurance_fee: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal
    available: bool
