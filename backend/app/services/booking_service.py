"""Booking lifecycle: creation, status transitions and lookups.

Creation validates in a fixed order and re-checks availability while holding
a row lock on the car, so two concurrent requests for the same car serialize
on the database and cannot both pass the conflict check.
"""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.booking import BOOKING_STATUSES, Booking
from app.models.car import Car
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services import payment_ledger
from app.services.availability import find_conflicts
from app.services.errors import (
    Conflict,
    Forbidden,
    InvalidArgument,
    InvalidOperation,
    InvalidRange,
    InvalidTransition,
    MissingField,
    NotFound,
    PriceMismatch,
    Unavailable,
)
from app.services.pricing import PriceBreakdown, compute_breakdown, count_days, matches_within

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"completed", "cancelled"})

# Legal status changes. Anything not listed here is rejected.
TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"ongoing", "completed", "cancelled"}),
    "ongoing": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

# Statuses a renter (who is not also the host) may set.
RENTER_TRANSITIONS = frozenset({"cancelled"})

PRICING_FIELDS = ("daily_rate", "subtotal", "service_fee", "insurance_fee", "gst", "total_amount")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def load_booking(db: AsyncSession, booking_id: uuid.UUID, *, for_update: bool = False) -> Booking | None:
    """Fetch a booking with car, renter and host attached."""
    query = select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def _lock_car(db: AsyncSession, car_id: uuid.UUID) -> Car | None:
    result = await db.execute(select(Car).where(Car.id == car_id).with_for_update())
    return result.scalar_one_or_none()


def _resolve_total_days(body: BookingCreate, renter: User) -> int:
    derived = count_days(body.start_date, body.end_date)
    if derived < 1:
        raise InvalidRange("end_date must be on or after start_date")

    if body.total_days is None:
        return derived
    if body.total_days < 1:
        raise InvalidRange("total_days must be at least 1")
    if body.total_days != derived and not renter.is_admin:
        raise InvalidRange(
            f"total_days ({body.total_days}) does not match the selected dates ({derived} days)"
        )
    return body.total_days


def _price(body: BookingCreate, car: Car, total_days: int, renter: User) -> PriceBreakdown:
    """Server-side price for the stay, honouring client figures only for admins."""
    supplied = {field: getattr(body, field) for field in PRICING_FIELDS if getattr(body, field) is not None}

    if renter.is_admin and supplied:
        rate = supplied.pop("daily_rate", car.daily_price)
        logger.info("Admin %s overriding pricing fields %s", renter.id, sorted(supplied))
        return compute_breakdown(rate, total_days, **supplied)

    breakdown = compute_breakdown(car.daily_price, total_days)
    for field, value in supplied.items():
        expected = getattr(breakdown, field)
        if not matches_within(expected, value, settings.pricing_tolerance):
            logger.warning(
                "Rejected client price for car %s: %s=%s, server computed %s",
                car.id,
                field,
                value,
                expected,
            )
            raise PriceMismatch(f"{field} does not match the current price ({expected})")
    return breakdown


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_booking(db: AsyncSession, renter: User, body: BookingCreate) -> Booking:
    """Validate, price and persist a new pending booking.

    Checks, in order: required fields, car exists, renter is not the host,
    car is active, date range yields a positive day count, no overlapping
    active booking.

    Raises:
        MissingField, NotFound, InvalidOperation, Unavailable, InvalidRange,
        Conflict, PriceMismatch
    """
    missing = [name for name in ("car_id", "start_date", "end_date") if getattr(body, name) is None]
    if missing:
        raise MissingField(f"Please provide all required fields: {', '.join(missing)}")

    car = await _lock_car(db, body.car_id)
    if car is None:
        raise NotFound("Car not found")

    if car.owner_id == renter.id:
        raise InvalidOperation("You cannot book your own car")

    if not car.is_bookable:
        raise Unavailable(f"Car is not available for booking (status: {car.status})")

    total_days = _resolve_total_days(body, renter)

    conflicts = await find_conflicts(db, car.id, body.start_date, body.end_date)
    if conflicts:
        logger.info(
            "Booking request by %s for car %s %s..%s conflicts with %s",
            renter.id,
            car.id,
            body.start_date,
            body.end_date,
            [str(b.id) for b in conflicts],
        )
        raise Conflict("Car is already booked for these dates")

    breakdown = _price(body, car, total_days, renter)

    booking = Booking(
        car_id=car.id,
        renter_id=renter.id,
        host_id=car.owner_id,
        start_date=body.start_date,
        end_date=body.end_date,
        pickup_time=body.pickup_time,
        return_time=body.return_time,
        total_days=breakdown.total_days,
        daily_rate=breakdown.daily_rate,
        subtotal=breakdown.subtotal,
        service_fee=breakdown.service_fee,
        insurance_fee=breakdown.insurance_fee,
        gst=breakdown.gst,
        discount=breakdown.discount,
        total_amount=breakdown.total_amount,
        status="pending",
        payment_status="pending",
    )
    db.add(booking)
    await db.flush()

    logger.info(
        "Created booking %s: car=%s renter=%s %s..%s (%d days) total=%s",
        booking.id,
        car.id,
        renter.id,
        booking.start_date,
        booking.end_date,
        booking.total_days,
        booking.total_amount,
    )
    return await load_booking(db, booking.id)


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


async def get_booking_for_actor(db: AsyncSession, booking_id: uuid.UUID, actor: User) -> Booking:
    """Return a booking the actor takes part in, as renter or host."""
    booking = await load_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if not booking.involves(actor.id):
        raise Forbidden("You are not a party to this booking")
    return booking


async def list_bookings(
    db: AsyncSession,
    actor: User,
    role: str = "renter",
    status_filter: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Return a page of the actor's bookings, newest first, and the total count.

    ``role="renter"`` lists trips the actor booked; ``role="host"`` lists
    bookings of the actor's cars.
    """
    if role == "host":
        filters = [Booking.host_id == actor.id]
    elif role == "renter":
        filters = [Booking.renter_id == actor.id]
    else:
        raise InvalidArgument("role must be 'renter' or 'host'")
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def check_transition(booking: Booking, actor: User, new_status: str) -> None:
    """Raise unless ``actor`` may move ``booking`` to ``new_status``."""
    if new_status not in BOOKING_STATUSES:
        raise InvalidArgument(f"Unknown booking status: {new_status!r}")

    is_host = actor.id == booking.host_id
    if not is_host and new_status not in RENTER_TRANSITIONS:
        raise Forbidden(f"Only the host can mark a booking as {new_status}")

    if new_status not in TRANSITIONS[booking.status]:
        raise InvalidTransition(f"Cannot change booking status from {booking.status} to {new_status}")


async def update_booking_status(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor: User,
    new_status: str,
) -> Booking:
    """Move a booking along the lifecycle.

    The actor must be the renter or the host. Setting the current status
    again is a no-op. Cancelling a paid booking refunds its payment.

    Raises:
        NotFound, Forbidden, InvalidArgument, InvalidTransition
    """
    booking = await load_booking(db, booking_id, for_update=True)
    if booking is None:
        raise NotFound("Booking not found")
    if not booking.involves(actor.id):
        raise Forbidden("You are not a party to this booking")

    if new_status == booking.status:
        return booking

    check_transition(booking, actor, new_status)

    previous = booking.status
    booking.status = new_status
    if new_status == "cancelled" and booking.payment_status == "paid":
        await payment_ledger.refund_booking_payment(db, booking)

    await db.flush()
    logger.info("Booking %s: %s -> %s by %s", booking.id, previous, new_status, actor.id)
    return await load_booking(db, booking.id)


async def update_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor: User,
    body: BookingUpdate,
) -> Booking:
    """Apply a partial update: handover times and/or a status change."""
    booking = await get_booking_for_actor(db, booking_id, actor)
    update_data = body.model_dump(exclude_unset=True)

    time_changes = {k: v for k, v in update_data.items() if k in ("pickup_time", "return_time")}
    if time_changes:
        if booking.status in TERMINAL_STATUSES:
            raise InvalidOperation(f"Cannot change a {booking.status} booking")
        for field, value in time_changes.items():
            setattr(booking, field, value)
        await db.flush()

    new_status = update_data.get("status")
    if new_status is not None:
        return await update_booking_status(db, booking_id, actor, new_status)
    return await load_booking(db, booking.id)
