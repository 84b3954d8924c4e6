"""Pricing engine: stay prices and discount quotes.

Everything here is read-only. Redeeming a code (incrementing its usage
counter) is a separate, atomic step in ``apps.discounts.services``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone  # type: ignore

from shared.domain.value_objects import DateRange

from .exceptions import (
    DiscountExhausted,
    DiscountExpired,
    DiscountNotFound,
    InvalidDateRange,
    MinimumOrderNotMet,
)
from .models import Discount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


@dataclass(frozen=True)
class DiscountQuote:
    discount: Discount
    order_amount: Decimal
    amount: Decimal

    @property
    def code(self) -> str:
        return self.discount.code

    @property
    def final_amount(self) -> Decimal:
        return max(self.order_amount - self.amount, ZERO)


def validate_stay_dates(check_in: date, check_out: date, *, today: date | None = None) -> DateRange:
    today = today or timezone.localdate()
    if check_in is None or check_out is None:
        raise InvalidDateRange("Check-in and check-out dates are required")
    if check_in < today:
        raise InvalidDateRange("Check-in date cannot be in the past")
    if check_in >= check_out:
        raise InvalidDateRange("Check-out date must be after check-in date")
    return DateRange(check_in, check_out)


def price_stay(room, check_in: date, check_out: date, *, today: date | None = None) -> Decimal:
    """Nights multiplied by the room's nightly rate."""
    stay = validate_stay_dates(check_in, check_out, today=today)
    return quantize(Decimal(len(stay)) * room.base_price)


def compute_discount_amount(discount: Discount, order_amount: Decimal) -> Decimal:
    """Discount amount for ``order_amount``, capped first by the discount's
    own maximum and then by the order amount itself."""
    order_amount = Decimal(order_amount)
    if discount.is_percentage:
        amount = quantize(order_amount * (discount.percentage_value or ZERO) / Decimal(100))
    else:
        amount = quantize(discount.fixed_amount or ZERO)

    if discount.max_discount_amount is not None and amount > discount.max_discount_amount:
        amount = quantize(discount.max_discount_amount)
    if amount > order_amount:
        amount = quantize(order_amount)
    return max(amount, ZERO)


def ensure_discount_usable(discount: Discount, order_amount: Decimal, now: datetime | None = None) -> None:
    if not discount.is_active:
        raise DiscountNotFound()
    if not discount.is_valid_at(now or timezone.now()):
        raise DiscountExpired()
    if discount.is_exhausted:
        raise DiscountExhausted()
    if discount.min_order_amount is not None and Decimal(order_amount) < discount.min_order_amount:
        raise MinimumOrderNotMet(
            f"Minimum order amount for this discount is {discount.min_order_amount}"
        )


def resolve_discount(code: str, order_amount: Decimal, now: datetime | None = None) -> DiscountQuote:
    """Look up an active code and quote it against ``order_amount``."""
    normalized = normalize_code(code)
    discount = Discount.objects.filter(code=normalized, is_active=True).first()
    if discount is None:
        raise DiscountNotFound(f"Discount code {normalized!r} not found")

    ensure_discount_usable(discount, order_amount, now)
    order_amount = quantize(order_amount)
    return DiscountQuote(
        discount=discount,
        order_amount=order_amount,
        amount=compute_discount_amount(discount, order_amount),
    )
