"""Review service: post-trip reviews and the car's average rating."""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.car import Car
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate
from app.services.errors import Conflict, Forbidden, InvalidOperation, NotFound

logger = logging.getLogger(__name__)


async def create_review(db: AsyncSession, reviewer: User, body: ReviewCreate) -> Review:
    """Record a review for a completed booking and refresh the car's rating."""
    result = await db.execute(select(Booking).where(Booking.id == body.booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    if booking.renter_id != reviewer.id:
        raise Forbidden("You can only review your own bookings")
    if booking.car_id != body.car_id:
        raise InvalidOperation("Booking does not belong to this car")
    if booking.status != "completed":
        raise InvalidOperation("You can only review completed bookings")

    existing = await db.execute(
        select(Review.id).where(Review.car_id == body.car_id, Review.reviewer_id == reviewer.id)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("You have already reviewed this car")

    review = Review(
        car_id=body.car_id,
        booking_id=booking.id,
        reviewer_id=reviewer.id,
        rating=body.rating,
        comment=body.comment,
    )
    db.add(review)
    await db.flush()

    await refresh_car_rating(db, body.car_id)
    await db.refresh(review, attribute_names=["created_at", "reviewer"])
    return review


async def refresh_car_rating(db: AsyncSession, car_id: uuid.UUID) -> Car:
    """Recompute a car's average rating and review count."""
    stats = await db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.car_id == car_id)
    )
    average, count = stats.one()

    car = (await db.execute(select(Car).where(Car.id == car_id))).scalar_one()
    car.rating = Decimal(str(average or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    car.total_reviews = count
    await db.flush()
    logger.info("Car %s rating now %s over %d review(s)", car_id, car.rating, count)
    return car


async def list_reviews(db: AsyncSession, car_id: uuid.UUID) -> list[Review]:
    result = await db.execute(
        select(Review).where(Review.car_id == car_id).order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())
