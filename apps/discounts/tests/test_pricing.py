from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.discounts.exceptions import (
    DiscountExhausted,
    DiscountExpired,
    DiscountNotFound,
    InvalidDateRange,
    MinimumOrderNotMet,
)
from apps.discounts.models import Discount
from apps.discounts.pricing import compute_discount_amount, price_stay, resolve_discount
from apps.rooms.models import Room


def _discount(**overrides) -> Discount:
    values = {
        "code": "SAVE10",
        "name": "Save ten",
        "type": Discount.Type.PERCENTAGE,
        "percentage_value": Decimal("10"),
    }
    values.update(overrides)
    return Discount.objects.create(**values)


def test_price_is_nights_times_base_price():
    room = Room(number="1", base_price=Decimal("100.00"))

    price = price_stay(room, date(2025, 6, 1), date(2025, 6, 4), today=date(2025, 5, 1))

    assert price == Decimal("300.00")


@pytest.mark.parametrize(
    "check_in, check_out",
    [
        (date(2025, 6, 4), date(2025, 6, 1)),
        (date(2025, 6, 1), date(2025, 6, 1)),
        (date(2025, 4, 30), date(2025, 5, 2)),
    ],
)
def test_price_rejects_bad_ranges(check_in, check_out):
    room = Room(number="1", base_price=Decimal("100.00"))

    with pytest.raises(InvalidDateRange):
        price_stay(room, check_in, check_out, today=date(2025, 5, 1))


def test_check_in_today_is_allowed():
    room = Room(number="1", base_price=Decimal("55.50"))

    assert price_stay(room, date(2025, 5, 1), date(2025, 5, 2), today=date(2025, 5, 1)) == Decimal("55.50")


@pytest.mark.django_db
def test_percentage_discount_is_capped_by_max_discount_amount():
    _discount(max_discount_amount=Decimal("20.00"))

    quote = resolve_discount("SAVE10", Decimal("300.00"))

    assert quote.amount == Decimal("20.00")
    assert quote.final_amount == Decimal("280.00")


@pytest.mark.django_db
def test_code_lookup_is_case_insensitive():
    _discount()

    assert resolve_discount(" save10 ", Decimal("300.00")).amount == Decimal("30.00")


@pytest.mark.django_db
def test_percentage_rounds_half_up_to_cents():
    discount = _discount(percentage_value=Decimal("15"))

    # 333.33 * 15% = 49.9995
    assert compute_discount_amount(discount, Decimal("333.33")) == Decimal("50.00")


@pytest.mark.django_db
def test_fixed_amount_never_exceeds_order():
    discount = _discount(code="FLAT50", type=Discount.Type.FIXED_AMOUNT, percentage_value=None, fixed_amount=Decimal("50"))

    assert compute_discount_amount(discount, Decimal("30.00")) == Decimal("30.00")
    assert compute_discount_amount(discount, Decimal("80.00")) == Decimal("50.00")


@pytest.mark.django_db
def test_cap_is_applied_before_order_ceiling():
    discount = _discount(
        code="PROMO",
        type=Discount.Type.PROMOTIONAL_CODE,
        percentage_value=None,
        fixed_amount=Decimal("100"),
        max_discount_amount=Decimal("40"),
    )

    assert compute_discount_amount(discount, Decimal("25.00")) == Decimal("25.00")
    assert compute_discount_amount(discount, Decimal("60.00")) == Decimal("40.00")


@pytest.mark.django_db
def test_unknown_and_inactive_codes_are_not_found():
    _discount(is_active=False)

    with pytest.raises(DiscountNotFound):
        resolve_discount("SAVE10", Decimal("100"))
    with pytest.raises(DiscountNotFound):
        resolve_discount("NOPE", Decimal("100"))


@pytest.mark.django_db
def test_code_outside_validity_window_is_expired():
    now = timezone.now()
    _discount(valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))
    _discount(code="LATER", valid_from=now + timedelta(days=1))

    with pytest.raises(DiscountExpired):
        resolve_discount("SAVE10", Decimal("100"))
    with pytest.raises(DiscountExpired):
        resolve_discount("LATER", Decimal("100"))


@pytest.mark.django_db
def test_used_up_code_is_exhausted():
    _discount(max_usage_count=2, current_usage_count=2)

    with pytest.raises(DiscountExhausted):
        resolve_discount("SAVE10", Decimal("100"))


@pytest.mark.django_db
def test_minimum_order_amount():
    _discount(min_order_amount=Decimal("150.00"))

    with pytest.raises(MinimumOrderNotMet):
        resolve_discount("SAVE10", Decimal("149.99"))
    assert resolve_discount("SAVE10", Decimal("150.00")).amount == Decimal("15.00")
