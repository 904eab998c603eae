"""Car model: a vehicle listed for rent by its host."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

CAR_STATUSES = ("pending", "active", "inactive", "suspended")


class Car(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A car listing. Only cars with ``status == "active"`` can be booked."""

    __tablename__ = "cars"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    car_type: Mapped[str] = mapped_column(String(50), nullable=False)  # sedan, suv, hatchback, ...
    transmission: Mapped[str] = mapped_column(String(20), nullable=False)  # automatic, manual
    fuel_type: Mapped[str] = mapped_column(String(20), nullable=False)  # petrol, diesel, electric, hybrid
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    features: Mapped[list | None] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0"))
    total_reviews: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    owner: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    @property
    def is_bookable(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, {self.make} {self.model}, status={self.status!r})>"
