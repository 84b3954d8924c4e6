"""Discount administration and redemption."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from django.db import transaction  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils import timezone  # type: ignore

from .exceptions import (
    DiscountExhausted,
    DiscountNotFound,
    DuplicateDiscountCode,
    InvalidDiscountDefinition,
)
from .models import Discount, DiscountRedemption
from .pricing import DiscountQuote, normalize_code, resolve_discount

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "description",
    "type",
    "percentage_value",
    "fixed_amount",
    "valid_from",
    "valid_until",
    "max_usage_count",
    "max_usage_per_user",
    "min_order_amount",
    "max_discount_amount",
    "is_active",
    "terms_and_conditions",
)


def _validate_definition(discount: Discount) -> None:
    if discount.is_percentage:
        value = discount.percentage_value
        if value is None or value <= 0:
            raise InvalidDiscountDefinition("Percentage value must be greater than 0")
        if value > 100:
            raise InvalidDiscountDefinition("Percentage value cannot exceed 100")
    elif discount.type in Discount.FIXED_TYPES:
        if discount.fixed_amount is None or discount.fixed_amount <= 0:
            raise InvalidDiscountDefinition("Fixed amount must be greater than 0")
    else:
        raise InvalidDiscountDefinition(f"Unknown discount type {discount.type!r}")

    if discount.valid_from and discount.valid_until and discount.valid_from >= discount.valid_until:
        raise InvalidDiscountDefinition("Valid from date must be before valid until date")
    if discount.max_usage_count is not None and discount.current_usage_count > discount.max_usage_count:
        raise InvalidDiscountDefinition("Usage limit is below the number of redemptions already made")


@transaction.atomic
def create_discount(data: Mapping[str, Any]) -> Discount:
    code = normalize_code(data.get("code", ""))
    if not code:
        raise InvalidDiscountDefinition("Discount code is required")
    if Discount.objects.filter(code=code).exists():
        raise DuplicateDiscountCode(f"Discount code already exists: {code}")

    discount = Discount(code=code, **{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
    _validate_definition(discount)
    discount.save()
    logger.info("Created discount %s (%s)", discount.code, discount.type)
    return discount


@transaction.atomic
def update_discount(discount_id: int, data: Mapping[str, Any]) -> Discount:
    discount = get_discount(discount_id, lock=True)
    for field, value in data.items():
        if field in EDITABLE_FIELDS:
            setattr(discount, field, value)
    _validate_definition(discount)
    discount.save()
    logger.info("Updated discount %s", discount.code)
    return discount


def get_discount(discount_id: int, *, lock: bool = False) -> Discount:
    queryset = Discount.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=discount_id)
    except Discount.DoesNotExist:
        raise DiscountNotFound(f"Discount not found with id: {discount_id}") from None


def get_discount_by_code(code: str) -> Discount:
    try:
        return Discount.objects.get(code=normalize_code(code))
    except Discount.DoesNotExist:
        raise DiscountNotFound(f"Discount not found with code: {normalize_code(code)}") from None


def list_active_discounts(now: datetime | None = None):
    now = now or timezone.now()
    return (
        Discount.objects.filter(is_active=True)
        .filter(Q(valid_from__isnull=True) | Q(valid_from__lte=now))
        .filter(Q(valid_until__isnull=True) | Q(valid_until__gte=now))
        .filter(Q(max_usage_count__isnull=True) | Q(current_usage_count__lt=F("max_usage_count")))
    )


def validate_discount_code(code: str, order_amount: Decimal, *, owner=None) -> DiscountQuote:
    """Quote a code for an order, including the per-user redemption limit."""
    quote = resolve_discount(code, order_amount)
    ensure_owner_may_redeem(quote.discount, owner)
    return quote


def ensure_owner_may_redeem(discount: Discount, owner) -> None:
    if owner is None or discount.max_usage_per_user is None:
        return
    used = DiscountRedemption.objects.filter(discount=discount, owner=owner).count()
    if used >= discount.max_usage_per_user:
        raise DiscountExhausted("You have already used this discount the maximum number of times")


@transaction.atomic
def redeem_discount(discount_id: int, *, owner=None, reference: str = "") -> Discount:
    """Consume one use of a discount.

    The increment is a single conditional UPDATE, so two concurrent
    redemptions of the last remaining use cannot both succeed.
    """
    updated = (
        Discount.objects.filter(pk=discount_id, is_active=True)
        .filter(Q(max_usage_count__isnull=True) | Q(current_usage_count__lt=F("max_usage_count")))
        .update(current_usage_count=F("current_usage_count") + 1, updated_at=timezone.now())
    )
    if not updated:
        if not Discount.objects.filter(pk=discount_id, is_active=True).exists():
            raise DiscountNotFound(f"Discount not found with id: {discount_id}")
        raise DiscountExhausted()

    discount = Discount.objects.get(pk=discount_id)
    # Row is locked by the UPDATE above, so this count is stable
    ensure_owner_may_redeem(discount, owner)
    DiscountRedemption.objects.create(discount=discount, owner=owner, reference=reference)
    logger.info(
        "Redeemed discount %s (%s/%s)",
        discount.code,
        discount.current_usage_count,
        discount.max_usage_count if discount.max_usage_count is not None else "unlimited",
    )
    return discount


@transaction.atomic
def deactivate_discount(discount_id: int) -> Discount:
    discount = get_discount(discount_id, lock=True)
    discount.is_active = False
    discount.save(update_fields=["is_active", "updated_at"])
    logger.info("Deactivated discount %s", discount.code)
    return discount


@transaction.atomic
def delete_discount(discount_id: int) -> None:
    discount = get_discount(discount_id, lock=True)
    now = timezone.now()
    if discount.is_active and (discount.valid_until is None or discount.valid_until > now):
        raise InvalidDiscountDefinition("Cannot delete an active discount. Deactivate it first.")
    logger.info("Deleting discount %s", discount.code)
    discount.delete()
