"""Car listing queries and host-side listing management."""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.car import Car
from app.models.user import User
from app.services.availability import has_conflict
from app.services.errors import Conflict, Forbidden, InvalidRange, NotFound, Unavailable
from app.services.pricing import PriceBreakdown, compute_breakdown, count_days

logger = logging.getLogger(__name__)


@dataclass
class CarFilters:
    search: str | None = None
    car_type: str | None = None
    transmission: str | None = None
    fuel_type: str | None = None
    location: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    owner_id: uuid.UUID | None = None


@dataclass
class Page:
    items: list[Car]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _build_filters(filters: CarFilters, viewer: User | None) -> list:
    clauses = []

    # Hosts browsing their own listings see every status; everyone else sees active cars only.
    own_listing = viewer is not None and filters.owner_id == viewer.id
    if not own_listing:
        clauses.append(Car.status == "active")

    if filters.owner_id is not None:
        clauses.append(Car.owner_id == filters.owner_id)
    if filters.search:
        pattern = f"%{filters.search}%"
        clauses.append(
            or_(
                Car.make.ilike(pattern),
                Car.model.ilike(pattern),
                Car.location.ilike(pattern),
            )
        )
    if filters.car_type:
        clauses.append(Car.car_type == filters.car_type)
    if filters.transmission:
        clauses.append(Car.transmission == filters.transmission)
    if filters.fuel_type:
        clauses.append(Car.fuel_type == filters.fuel_type)
    if filters.location:
        clauses.append(Car.location.ilike(f"%{filters.location}%"))
    if filters.min_price is not None:
        clauses.append(Car.daily_price >= filters.min_price)
    if filters.max_price is not None:
        clauses.append(Car.daily_price <= filters.max_price)
    return clauses


async def search_cars(
    db: AsyncSession,
    filters: CarFilters,
    page: int = 1,
    limit: int = 12,
    viewer: User | None = None,
) -> Page:
    """Return one page of listings matching ``filters``, newest first."""
    clauses = _build_filters(filters, viewer)

    total_result = await db.execute(select(func.count()).select_from(Car).where(*clauses))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Car).where(*clauses).order_by(Car.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    return Page(items=list(result.scalars().all()), page=page, limit=limit, total=total)


async def get_car(db: AsyncSession, car_id: uuid.UUID) -> Car:
    result = await db.execute(select(Car).where(Car.id == car_id).execution_options(populate_existing=True))
    car = result.scalar_one_or_none()
    if car is None:
        raise NotFound("Car not found")
    return car


async def get_owned_car(db: AsyncSession, car_id: uuid.UUID, user: User) -> Car:
    """Fetch a car the user may edit."""
    car = await get_car(db, car_id)
    if car.owner_id != user.id and not user.is_admin:
        raise Forbidden("You do not own this car")
    return car


async def delete_car(db: AsyncSession, car_id: uuid.UUID, user: User) -> None:
    """Delete a listing that has never been booked.

    Cars with booking history must be deactivated instead, so that bookings
    never point at a missing car.
    """
    car = await get_owned_car(db, car_id, user)
    count_result = await db.execute(select(func.count()).select_from(Booking).where(Booking.car_id == car.id))
    booking_count = count_result.scalar_one()
    if booking_count:
        raise Conflict(f"Car has {booking_count} booking(s); set its status to inactive instead")

    await db.delete(car)
    await db.flush()
    logger.info("Deleted car %s (owner %s)", car_id, user.id)


async def quote(
    db: AsyncSession,
    car_id: uuid.UUID,
    start: date,
    end: date,
) -> tuple[PriceBreakdown, bool]:
    """Price a prospective stay and report whether the dates are free."""
    car = await get_car(db, car_id)
    if not car.is_bookable:
        raise Unavailable(f"Car is not available for booking (status: {car.status})")

    total_days = count_days(start, end)
    if total_days < 1:
        raise InvalidRange("end_date must be on or after start_date")

    breakdown = compute_breakdown(car.daily_price, total_days)
    available = not await has_conflict(db, car.id, start, end)
    return breakdown, available
