"""Payment ledger: records at most one payment per booking.

Charging is delegated to a ``PaymentProcessor``. The default
``SimulatedProcessor`` always approves; a real gateway adapter raises
``PaymentDeclined`` to reject a charge, in which case nothing is recorded and
the renter may retry.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.booking import Booking
from app.models.payment import Payment
from app.models.user import User
from app.services.errors import Forbidden, InvalidOperation, NotFound, PaymentFailed

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Payment already processed"
PROCESSED = "Payment processed successfully"


class PaymentDeclined(Exception):
    """Raised by a processor when the charge is rejected."""


class PaymentProcessor(Protocol):
    async def charge(self, booking: Booking, method: str) -> str:
        """Charge the booking's total and return the transaction id."""
        ...


class SimulatedProcessor:
    """Stand-in for a card gateway: approves every charge."""

    async def charge(self, booking: Booking, method: str) -> str:
        return f"txn_{uuid.uuid4().hex}"


_default_processor = SimulatedProcessor()


def get_payment_processor() -> PaymentProcessor:
    """FastAPI dependency returning the configured processor."""
    return _default_processor


@dataclass
class PaymentResult:
    payment: Payment
    created: bool
    message: str


async def _get_payment(db: AsyncSession, booking_id: uuid.UUID) -> Payment | None:
    result = await db.execute(
        select(Payment).where(Payment.booking_id == booking_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def pay(
    db: AsyncSession,
    booking_id: uuid.UUID,
    payer: User,
    method: str = "card",
    processor: PaymentProcessor | None = None,
) -> PaymentResult:
    """Pay for a booking, once.

    A repeated call for the same booking returns the existing payment with
    ``created=False`` instead of charging again.

    Raises:
        NotFound: booking does not exist.
        Forbidden: payer is not the booking's renter.
        InvalidOperation: booking is cancelled, or settled without a ledger entry.
        PaymentFailed: the processor declined the charge.
    """
    processor = processor or _default_processor

    result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    if booking.renter_id != payer.id:
        raise Forbidden("Only the renter can pay for this booking")

    existing = await _get_payment(db, booking.id)
    if existing is not None:
        logger.info("Payment replay for booking %s (payment %s)", booking.id, existing.id)
        return PaymentResult(payment=existing, created=False, message=ALREADY_PROCESSED)
    if booking.payment_status != "pending":
        raise InvalidOperation(f"Booking payment is already {booking.payment_status}")
    if booking.status == "cancelled":
        raise InvalidOperation("Cannot pay for a cancelled booking")

    try:
        transaction_id = await processor.charge(booking, method)
    except PaymentDeclined as exc:
        logger.warning("Payment declined for booking %s: %s", booking.id, exc)
        raise PaymentFailed(f"Payment was declined: {exc}") from exc

    payment = Payment(
        booking_id=booking.id,
        payer_id=payer.id,
        amount=booking.total_amount,
        currency=settings.currency,
        payment_method=method,
        status="success",
        transaction_id=transaction_id,
    )
    try:
        async with db.begin_nested():
            db.add(payment)
            booking.payment_status = "paid"
            if booking.status == "pending":
                booking.status = "confirmed"
    except IntegrityError:
        # A concurrent request recorded the payment first. The savepoint
        # rollback expired `booking`, so only the argument id is used here.
        winner = await _get_payment(db, booking_id)
        if winner is None:
            raise
        await db.refresh(booking)
        logger.info("Lost payment race for booking %s; returning %s", booking_id, winner.id)
        return PaymentResult(payment=winner, created=False, message=ALREADY_PROCESSED)

    await db.refresh(payment)
    logger.info(
        "Recorded payment %s for booking %s: %s %s via %s (%s)",
        payment.id,
        booking.id,
        payment.amount,
        payment.currency,
        method,
        transaction_id,
    )
    return PaymentResult(payment=payment, created=True, message=PROCESSED)


async def get_payment_for_booking(db: AsyncSession, booking_id: uuid.UUID, actor: User) -> Payment:
    """Return the payment of a booking to its renter or host."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    if not booking.involves(actor.id):
        raise Forbidden("You are not a party to this booking")

    payment = await _get_payment(db, booking.id)
    if payment is None:
        raise NotFound("Payment not found")
    return payment


async def refund_booking_payment(db: AsyncSession, booking: Booking) -> Payment | None:
    """Mark a booking's payment refunded. Used when a paid booking is cancelled."""
    payment = await _get_payment(db, booking.id)
    booking.payment_status = "refunded"
    if payment is not None:
        payment.status = "refunded"
        logger.info("Refunded payment %s for cancelled booking %s", payment.id, booking.id)
    else:
        logger.warning("Booking %s was marked paid but has no payment row", booking.id)
    return payment
