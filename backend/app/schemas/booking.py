"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.car import CarSummary
from app.schemas.user import UserSummary

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
_STATUS_PATTERN = "^(pending|confirmed|ongoing|completed|cancelled)$"


def _calendar_day(value):
    """Reduce an ISO datetime string to its calendar day, as written.

    ``"2024-06-10T23:30:00-05:00"`` becomes ``2024-06-10``; the offset is
    ignored so a late-evening local time never shifts to the next day.
    """
    if value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
        return value[:10]
    return value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for requesting a booking.

    ``car_id``, ``start_date`` and ``end_date`` are required; their absence is
    reported by the booking service rather than by schema validation. Pricing
    fields are optional client figures that the server checks against its own
    computation.
    """

    car_id: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    pickup_time: str | None = Field(None, pattern=_TIME_PATTERN)
    return_time: str | None = Field(None, pattern=_TIME_PATTERN)
    total_days: int | None = None
    daily_rate: Decimal | None = Field(None, ge=0)
    subtotal: Decimal | None = Field(None, ge=0)
    service_fee: Decimal | None = Field(None, ge=0)
    insurance_fee: Decimal | None = Field(None, ge=0)
    gst: Decimal | None = Field(None, ge=0)
    total_amount: Decimal | None = Field(None, ge=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_calendar_day(cls, value):
        return _calendar_day(value)


class BookingUpdate(BaseModel):
    """Schema for updating a booking. All fields optional."""

    status: str | None = Field(None, pattern=_STATUS_PATTERN)
    pickup_time: str | None = Field(None, pattern=_TIME_PATTERN)
    return_time: str | None = Field(None, pattern=_TIME_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    car_id: uuid.UUID
    renter_id: uuid.UUID
    host_id: uuid.UUID
    start_date: date
    end_date: date
    pickup_time: str | None = None
    return_time: str | None = None
    total_days: int
    daily_rate: Decimal
    subtotal: Decimal
    service_fee: Decimal
    insurance_fee: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal
    status: str
    payment_status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with the car, renter and host attached for display."""

    car: CarSummary
    renter: UserSummary
    host: UserSummary


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingDetailResponse]
    total: int
