"""Tests for overlap detection and booked-date expansion."""

import uuid
from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.availability import (
    BookedDates,
    coerce_car_id,
    expand_dates,
    find_conflicts,
    has_conflict,
    list_booked_dates,
    ranges_overlap,
)

D = date(2025, 6, 1)


def _day(n: int) -> date:
    return D + timedelta(days=n)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestRangesOverlap:
    """Existing booking is days 10..15 throughout."""

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (14, 20, True),  # tail overlap
            (5, 10, True),  # ends on the first booked day
            (15, 18, True),  # starts on the last booked day
            (11, 12, True),  # inside
            (8, 20, True),  # covers
            (16, 20, False),  # starts the day after
            (1, 9, False),  # ends the day before
        ],
    )
    def test_inclusive_policy(self, start, end, expected):
        assert ranges_overlap(_day(start), _day(end), _day(10), _day(15)) is expected

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (15, 18, False),  # pick up on the return day
            (5, 10, False),  # return on the next pickup day
            (14, 20, True),
            (11, 12, True),
        ],
    )
    def test_same_day_handoff_policy(self, start, end, expected):
        assert ranges_overlap(_day(start), _day(end), _day(10), _day(15), same_day_handoff=True) is expected

    def test_symmetric(self):
        a = (_day(1), _day(4))
        b = (_day(4), _day(9))
        assert ranges_overlap(*a, *b) == ranges_overlap(*b, *a)


class TestExpandDates:
    def test_inclusive(self):
        assert list(expand_dates(_day(0), _day(2))) == [_day(0), _day(1), _day(2)]

    def test_single_day(self):
        assert list(expand_dates(_day(3), _day(3))) == [_day(3)]

    def test_reversed_is_empty(self):
        assert list(expand_dates(_day(3), _day(1))) == []

    def test_month_boundary(self):
        days = list(expand_dates(date(2024, 2, 28), date(2024, 3, 1)))
        assert days == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]


class TestBookedDates:
    def test_sorted_and_deduplicated(self):
        booked = BookedDates([(_day(5), _day(7)), (_day(1), _day(2)), (_day(6), _day(8))])
        assert booked.to_list() == [
            "2025-06-02",
            "2025-06-03",
            "2025-06-06",
            "2025-06-07",
            "2025-06-08",
            "2025-06-09",
        ]

    def test_nested_range_adds_nothing(self):
        booked = BookedDates([(_day(1), _day(10)), (_day(3), _day(4))])
        assert len(booked.to_list()) == 10

    def test_iteration_is_restartable(self):
        booked = BookedDates([(_day(0), _day(1))])
        assert list(booked) == list(booked) == ["2025-06-01", "2025-06-02"]

    def test_empty(self):
        booked = BookedDates([])
        assert not booked
        assert booked.to_list() == []


class TestCoerceCarId:
    def test_uuid_passthrough(self):
        car_id = uuid.uuid4()
        assert coerce_car_id(car_id) is car_id

    def test_string_parsed(self):
        car_id = uuid.uuid4()
        assert coerce_car_id(str(car_id)) == car_id

    @pytest.mark.parametrize("value", [None, "", "not-a-uuid", "123"])
    def test_garbage_is_none(self, value):
        assert coerce_car_id(value) is None


# ---------------------------------------------------------------------------
# Database queries
# ---------------------------------------------------------------------------


class TestListBookedDates:
    async def test_only_active_bookings_block(self, db_session: AsyncSession, test_car, test_user, make_booking):
        today = date.today()
        await make_booking(test_car, test_user, today + timedelta(days=2), today + timedelta(days=3))
        await make_booking(
            test_car, test_user, today + timedelta(days=10), today + timedelta(days=12), status="cancelled"
        )
        await make_booking(
            test_car, test_user, today + timedelta(days=20), today + timedelta(days=20), status="pending"
        )

        booked = await list_booked_dates(db_session, test_car.id)

        assert booked.to_list() == [
            (today + timedelta(days=2)).isoformat(),
            (today + timedelta(days=3)).isoformat(),
            (today + timedelta(days=20)).isoformat(),
        ]

    async def test_ended_bookings_skipped(self, db_session: AsyncSession, test_car, test_user, make_booking):
        today = date.today()
        await make_booking(
            test_car, test_user, today - timedelta(days=10), today - timedelta(days=5), status="completed"
        )
        await make_booking(test_car, test_user, today - timedelta(days=10), today - timedelta(days=1))

        booked = await list_booked_dates(db_session, test_car.id)
        assert booked.to_list() == []

    async def test_booking_ending_today_still_listed(
        self, db_session: AsyncSession, test_car, test_user, make_booking
    ):
        today = date.today()
        await make_booking(test_car, test_user, today - timedelta(days=2), today)

        booked = await list_booked_dates(db_session, test_car.id)
        assert today.isoformat() in booked.to_list()
        assert len(booked.to_list()) == 3

    async def test_explicit_today(self, db_session: AsyncSession, test_car, test_user, make_booking):
        await make_booking(test_car, test_user, date(2030, 1, 1), date(2030, 1, 2))

        assert (await list_booked_dates(db_session, test_car.id, today=date(2030, 1, 3))).to_list() == []
        assert (await list_booked_dates(db_session, test_car.id, today=date(2030, 1, 2))).to_list() == [
            "2030-01-01",
            "2030-01-02",
        ]

    async def test_unknown_or_malformed_car(self, db_session: AsyncSession):
        assert (await list_booked_dates(db_session, uuid.uuid4())).to_list() == []
        assert (await list_booked_dates(db_session, "nope")).to_list() == []
        assert (await list_booked_dates(db_session, None)).to_list() == []


class TestConflicts:
    async def test_overlap_detected(self, db_session: AsyncSession, test_car, test_user, make_booking):
        existing = await make_booking(test_car, test_user, date(2030, 3, 10), date(2030, 3, 15))

        conflicts = await find_conflicts(db_session, test_car.id, date(2030, 3, 14), date(2030, 3, 20))
        assert [b.id for b in conflicts] == [existing.id]
        assert await has_conflict(db_session, test_car.id, date(2030, 3, 16), date(2030, 3, 20)) is False

    async def test_boundary_day_depends_on_policy(
        self, db_session: AsyncSession, test_car, test_user, make_booking
    ):
        await make_booking(test_car, test_user, date(2030, 3, 10), date(2030, 3, 15))

        assert await has_conflict(db_session, test_car.id, date(2030, 3, 15), date(2030, 3, 18)) is True
        assert (
            await has_conflict(
                db_session, test_car.id, date(2030, 3, 15), date(2030, 3, 18), same_day_handoff=True
            )
            is False
        )

    async def test_cancelled_and_completed_do_not_block(
        self, db_session: AsyncSession, test_car, test_user, make_booking
    ):
        await make_booking(test_car, test_user, date(2030, 3, 10), date(2030, 3, 15), status="cancelled")
        await make_booking(test_car, test_user, date(2030, 3, 10), date(2030, 3, 15), status="completed")

        assert await has_conflict(db_session, test_car.id, date(2030, 3, 12), date(2030, 3, 13)) is False

    async def test_excluded_booking_ignored(self, db_session: AsyncSession, test_car, test_user, make_booking):
        existing = await make_booking(test_car, test_user, date(2030, 3, 10), date(2030, 3, 15))

        assert (
            await has_conflict(
                db_session,
                test_car.id,
                date(2030, 3, 11),
                date(2030, 3, 12),
                exclude_booking_id=existing.id,
            )
            is False
        )

    async def test_malformed_car_id_is_no_conflict(self, db_session: AsyncSession):
        assert await has_conflict(db_session, "garbage", date(2030, 1, 1), date(2030, 1, 2)) is False
        assert await has_conflict(db_session, None, date(2030, 1, 1), date(2030, 1, 2)) is False
