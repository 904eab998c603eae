"""Availability checker: booked dates and overlap detection for a car.

Only bookings in an *active* status block a car. The overlap rule lives in
``ranges_overlap`` so the same-day handoff policy is a single named switch
(``settings.allow_same_day_handoff``) instead of an accident of comparison
operators.
"""

import logging
import uuid
from collections.abc import Iterator
from datetime import date, timedelta

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.booking import Booking

logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed", "ongoing")


def ranges_overlap(
    start: date,
    end: date,
    other_start: date,
    other_end: date,
    *,
    same_day_handoff: bool = False,
) -> bool:
    """Return True when two inclusive date ranges collide.

    With ``same_day_handoff`` off, sharing a boundary day is a collision
    (``start <= other_end and end >= other_start``). With it on, one renter
    may return the car on the day the next one picks it up.
    """
    if same_day_handoff:
        return start < other_end and end > other_start
    return start <= other_end and end >= other_start


def expand_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in the inclusive range ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


class BookedDates:
    """Sorted, de-duplicated ISO dates covered by a set of date ranges.

    Iteration is lazy and restartable: each ``iter()`` walks the ranges
    again and yields the same sequence.
    """

    def __init__(self, ranges: list[tuple[date, date]]) -> None:
        self._ranges = sorted(ranges)

    def _days(self) -> Iterator[date]:
        last: date | None = None
        for start, end in self._ranges:
            if last is not None and start <= last:
                start = last + timedelta(days=1)
            for day in expand_dates(start, end):
                yield day
                last = day

    def __iter__(self) -> Iterator[str]:
        return (day.isoformat() for day in self._days())

    def __bool__(self) -> bool:
        return bool(self._ranges)

    def to_list(self) -> list[str]:
        return list(self)


def coerce_car_id(car_id: uuid.UUID | str | None) -> uuid.UUID | None:
    """Parse a car id, returning None for anything that is not a UUID."""
    if car_id is None or isinstance(car_id, uuid.UUID):
        return car_id
    try:
        return uuid.UUID(str(car_id))
    except ValueError:
        return None


async def list_booked_dates(
    db: AsyncSession,
    car_id: uuid.UUID | str | None,
    today: date | None = None,
) -> BookedDates:
    """Return the days a car is blocked by active bookings.

    Bookings that ended before ``today`` (local calendar date by default) are
    skipped. An unknown or malformed ``car_id`` yields an empty result.
    """
    parsed = coerce_car_id(car_id)
    if parsed is None:
        return BookedDates([])

    today = today or date.today()
    result = await db.execute(
        select(Booking.start_date, Booking.end_date).where(
            Booking.car_id == parsed,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.end_date >= today,
        )
    )
    return BookedDates([(row.start_date, row.end_date) for row in result.all()])


async def find_conflicts(
    db: AsyncSession,
    car_id: uuid.UUID,
    start: date,
    end: date,
    exclude_booking_id: uuid.UUID | None = None,
    *,
    same_day_handoff: bool | None = None,
) -> list[Booking]:
    """Return the active bookings of ``car_id`` that collide with ``[start, end]``."""
    if same_day_handoff is None:
        same_day_handoff = settings.allow_same_day_handoff

    if same_day_handoff:
        overlap = and_(Booking.start_date < end, Booking.end_date > start)
    else:
        overlap = and_(Booking.start_date <= end, Booking.end_date >= start)

    query = select(Booking).where(
        Booking.car_id == car_id,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        overlap,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def has_conflict(
    db: AsyncSession,
    car_id: uuid.UUID | str | None,
    start: date,
    end: date,
    exclude_booking_id: uuid.UUID | None = None,
    *,
    same_day_handoff: bool | None = None,
) -> bool:
    """True when ``[start, end]`` collides with an active booking of the car.

    A malformed or missing ``car_id`` is treated as "no information" and
    returns False.
    """
    parsed = coerce_car_id(car_id)
    if parsed is None:
        return False
    conflicts = await find_conflicts(
        db,
        parsed,
        start,
        end,
        exclude_booking_id,
        same_day_handoff=same_day_handoff,
    )
    if conflicts:
        logger.info(
            "Car %s has %d booking(s) overlapping %s..%s",
            parsed,
            len(conflicts),
            start,
            end,
        )
    return bool(conflicts)
