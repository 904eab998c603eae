"""Booking model: a renter's date-ranged reservation of a car."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "ongoing", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "refunded")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of a car over an inclusive range of calendar days.

    The pricing columns are a snapshot taken at creation time and are never
    recomputed from the car's current daily price.
    """

    __tablename__ = "bookings"

    car_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("cars.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    renter_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Copy of the car's owner at booking time
    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    pickup_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    return_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)

    # Pricing snapshot
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    insurance_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    gst: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        index=True,
    )  # pending, confirmed, ongoing, completed, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, paid, refunded

    # Relationships
    car: Mapped["Car"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    renter: Mapped["User"] = relationship(foreign_keys=[renter_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    host: Mapped["User"] = relationship(foreign_keys=[host_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        Index("ix_bookings_car_range", "car_id", "start_date", "end_date"),
        CheckConstraint("end_date >= start_date", name="ck_bookings_date_order"),
        CheckConstraint("total_days >= 1", name="ck_bookings_total_days"),
    )

    def involves(self, user_id: uuid.UUID) -> bool:
        """True when the user is this booking's renter or host."""
        return user_id in (self.renter_id, self.host_id)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, car_id={self.car_id}, renter_id={self.renter_id}, status={self.status})>"
