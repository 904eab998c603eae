"""Pricing calculator: turns a daily rate and a day count into a price breakdown.

Pure functions, no I/O. All amounts are ``Decimal`` rounded to two places;
the total is always derived from the rounded components so that

    total_amount == subtotal + service_fee + insurance_fee + gst - discount

holds exactly unless the caller overrides ``total_amount`` itself.
"""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from app.services.errors import InvalidArgument

SERVICE_FEE_RATE = Decimal("0.10")
INSURANCE_PER_DAY = Decimal("150")
GST_RATE = Decimal("0.18")
MONEY_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class PriceBreakdown:
    """Monetary breakdown of a stay."""

    daily_rate: Decimal
    total_days: int
    subtotal: Decimal
    service_fee: Decimal
    insurance_fee: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


def quantize(amount: Decimal) -> Decimal:
    """Round a monetary amount to two decimal places, half up."""
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _to_decimal(value, field: str) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidArgument(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise InvalidArgument(f"{field} must be a finite number")
    return amount


def _override(value, field: str) -> Decimal | None:
    if value is None:
        return None
    amount = _to_decimal(value, field)
    if amount < 0:
        raise InvalidArgument(f"{field} cannot be negative")
    return quantize(amount)


def count_days(start: date, end: date) -> int:
    """Number of calendar days in the inclusive range ``[start, end]``.

    A same-day rental counts as one day. Returns a value below 1 when
    ``end`` precedes ``start``; callers decide how to reject that.
    """
    return (end - start).days + 1


def compute_breakdown(
    daily_rate,
    total_days: int,
    *,
    subtotal=None,
    service_fee=None,
    insurance_fee=None,
    gst=None,
    discount=None,
    total_amount=None,
) -> PriceBreakdown:
    """Compute the full breakdown for ``total_days`` days at ``daily_rate``.

    Any keyword field may be supplied to override the computed value. Only
    fields that were not supplied are computed, and dependent fields are
    derived from whichever values are in effect (e.g. an overridden
    ``subtotal`` feeds the service fee and GST).

    Raises:
        InvalidArgument: negative rate or override, or ``total_days`` not a
            positive integer.

    Example::

        >>> compute_breakdown(Decimal("1000"), 3).total_amount
        Decimal('4425.00')
    """
    rate = _to_decimal(daily_rate, "daily_rate")
    if rate < 0:
        raise InvalidArgument("daily_rate cannot be negative")
    rate = quantize(rate)
    if isinstance(total_days, bool) or not isinstance(total_days, int) or total_days < 1:
        raise InvalidArgument("total_days must be a positive integer")

    sub = _override(subtotal, "subtotal")
    if sub is None:
        sub = quantize(rate * total_days)

    fee = _override(service_fee, "service_fee")
    if fee is None:
        fee = quantize(sub * SERVICE_FEE_RATE)

    insurance = _override(insurance_fee, "insurance_fee")
    if insurance is None:
        insurance = quantize(INSURANCE_PER_DAY * total_days)

    tax = _override(gst, "gst")
    if tax is None:
        tax = quantize((sub + fee + insurance) * GST_RATE)

    disc = _override(discount, "discount")
    if disc is None:
        disc = Decimal("0.00")

    total = _override(total_amount, "total_amount")
    if total is None:
        total = sub + fee + insurance + tax - disc

    return PriceBreakdown(
        daily_rate=rate,
        total_days=total_days,
        subtotal=sub,
        service_fee=fee,
        insurance_fee=insurance,
        gst=tax,
        discount=disc,
        total_amount=total,
    )


def matches_within(expected: Decimal, supplied, tolerance: Decimal) -> bool:
    """True when ``supplied`` is within ``tolerance`` of ``expected``."""
    return abs(expected - _to_decimal(supplied, "amount")) <= tolerance
