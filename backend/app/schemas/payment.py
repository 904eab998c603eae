"""Pydantic v2 request/response schemas for payment endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PaymentCreate(BaseModel):
    """Schema for paying a booking."""

    booking_id: uuid.UUID
    payment_method: str = Field("card", min_length=1, max_length=50)


class PaymentResponse(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    payer_id: uuid.UUID
    amount: Decimal
    currency: str
    payment_method: str
    status: str
    transaction_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentResultResponse(BaseModel):
    """Outcome of a payment attempt; ``message`` tells a first charge from a replay."""

    message: str
    payment: PaymentResponse
