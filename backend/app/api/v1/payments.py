"""Payments API router: simulated checkout for bookings."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, get_payment_processor
from app.models.payment import Payment
from app.models.user import User
from app.schemas.payment import PaymentCreate, PaymentResponse, PaymentResultResponse
from app.services import payment_ledger
from app.services.payment_ledger import PaymentProcessor

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post(
    "",
    response_model=PaymentResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Pay for a booking",
    responses={200: {"description": "Payment already processed; the existing payment is returned"}},
)
async def create_payment(
    body: PaymentCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    processor: PaymentProcessor = Depends(get_payment_processor),
) -> PaymentResultResponse:
    """Charge the booking's total and confirm it.

    Idempotent per booking: repeating the call returns 200 with the original
    payment instead of charging twice.
    """
    result = await payment_ledger.pay(
        db,
        body.booking_id,
        current_user,
        method=body.payment_method,
        processor=processor,
    )
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return PaymentResultResponse(
        message=result.message,
        payment=PaymentResponse.model_validate(result.payment),
    )


@router.get(
    "/{booking_id}",
    response_model=PaymentResponse,
    summary="Get the payment recorded for a booking",
)
async def get_payment(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Payment:
    return await payment_ledger.get_payment_for_booking(db, booking_id, current_user)
