"""Cart services.

All operations take the cart owner explicitly and only touch that owner's
single ACTIVE cart. Totals are recomputed after every mutation.
"""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.availability import has_conflict, lock_room
from apps.bookings.exceptions import RoomNoLongerAvailable, RoomNotFound, RoomUnavailable
from apps.bookings.services import ensure_capacity
from apps.discounts.exceptions import DiscountExhausted, DiscountExpired, DiscountNotFound, MinimumOrderNotMet
from apps.discounts.pricing import ZERO, price_stay, quantize, resolve_discount, validate_stay_dates
from apps.discounts.services import validate_discount_code
from apps.rooms.models import Room

from .exceptions import CartItemNotFound, CartNotFound, EmptyCart
from .models import Cart, CartItem

logger = logging.getLogger(__name__)

# Errors that mean a previously applied code stopped being usable
STALE_DISCOUNT_ERRORS = (DiscountNotFound, DiscountExpired, DiscountExhausted, MinimumOrderNotMet)


def discount_recalculation_policy(cart: Cart, error: Exception) -> bool:
    """Decide what happens when the applied code no longer validates.

    Returns True to silently drop the code from the cart, False to let the
    error reach the caller. Controlled by ``CART_DROP_INVALID_DISCOUNTS``.
    """
    return bool(getattr(settings, "CART_DROP_INVALID_DISCOUNTS", True))


def recalculate_totals(cart: Cart) -> Cart:
    subtotal = quantize(sum((item.price for item in cart.items.all()), ZERO))
    discount_amount = ZERO

    if cart.applied_discount_code:
        try:
            discount_amount = resolve_discount(cart.applied_discount_code, subtotal).amount
        except STALE_DISCOUNT_ERRORS as exc:
            if not discount_recalculation_policy(cart, exc):
                raise
            logger.info(
                "Dropping discount %s from cart %s: %s",
                cart.applied_discount_code,
                cart.pk,
                exc,
            )
            cart.applied_discount_code = ""
            cart.discount_applied_at = None

    cart.subtotal = subtotal
    cart.discount_amount = discount_amount
    cart.total_price = max(subtotal - discount_amount, ZERO)
    cart.save(
        update_fields=[
            "subtotal",
            "discount_amount",
            "total_price",
            "applied_discount_code",
            "discount_applied_at",
            "updated_at",
        ]
    )
    return cart


def get_active_cart(owner, *, lock: bool = False) -> Cart:
    queryset = Cart.objects.filter(owner=owner, status=Cart.Status.ACTIVE)
    if lock:
        queryset = queryset.select_for_update()
    cart = queryset.first()
    if cart is None:
        raise CartNotFound()
    return cart


def get_or_create_active_cart(owner) -> Cart:
    cart = Cart.objects.filter(owner=owner, status=Cart.Status.ACTIVE).first()
    if cart is not None:
        return cart
    try:
        with transaction.atomic():
            return Cart.objects.create(owner=owner)
    except IntegrityError:
        # Lost the race against a concurrent request for the same owner
        return Cart.objects.get(owner=owner, status=Cart.Status.ACTIVE)


@transaction.atomic
def add_item(
    owner,
    room_id: int,
    check_in: date,
    check_out: date,
    guests_count: int = 1,
    *,
    today: date | None = None,
) -> Cart:
    validate_stay_dates(check_in, check_out, today=today)

    room = Room.objects.filter(pk=room_id).first()
    if room is None:
        raise RoomNotFound(f"Room not found with id: {room_id}")
    if not room.is_bookable:
        raise RoomUnavailable("Room is not available for booking")
    ensure_capacity(room, guests_count)
    if has_conflict(room.pk, check_in, check_out):
        raise RoomUnavailable("Room is not available for the selected dates")

    get_or_create_active_cart(owner)
    cart = get_active_cart(owner, lock=True)
    in_cart = cart.items.filter(room_id=room.pk).filter(Q(check_in__lt=check_out) & Q(check_out__gt=check_in))
    if in_cart.exists():
        raise RoomUnavailable("Room is already in your cart for overlapping dates")

    CartItem.objects.create(
        cart=cart,
        room=room,
        check_in=check_in,
        check_out=check_out,
        guests_count=guests_count,
        price=price_stay(room, check_in, check_out, today=today),
    )
    logger.info("Added room %s (%s - %s) to cart %s", room.number, check_in, check_out, cart.pk)
    return recalculate_totals(cart)


@transaction.atomic
def remove_item(owner, item_id: int) -> Cart:
    cart = get_active_cart(owner, lock=True)
    deleted, _ = cart.items.filter(pk=item_id).delete()
    if not deleted:
        raise CartItemNotFound(f"Cart item not found with id: {item_id}")
    return recalculate_totals(cart)


@transaction.atomic
def clear(owner) -> Cart:
    cart = get_active_cart(owner, lock=True)
    cart.items.all().delete()
    cart.applied_discount_code = ""
    cart.discount_applied_at = None
    return recalculate_totals(cart)


@transaction.atomic
def apply_discount(owner, code: str) -> Cart:
    cart = get_active_cart(owner, lock=True)
    if not cart.items.exists():
        raise EmptyCart("Cannot apply discount to an empty cart")

    cart = recalculate_totals(cart)
    quote = validate_discount_code(code, cart.subtotal, owner=owner)
    cart.applied_discount_code = quote.code
    cart.discount_applied_at = timezone.now()
    logger.info("Applied discount %s to cart %s", quote.code, cart.pk)
    return recalculate_totals(cart)


@transaction.atomic
def remove_discount(owner) -> Cart:
    cart = get_active_cart(owner, lock=True)
    cart.applied_discount_code = ""
    cart.discount_applied_at = None
    return recalculate_totals(cart)


@transaction.atomic
def checkout(owner, *, today: date | None = None) -> dict:
    """Re-validate every stay under its room lock and hand the cart to the payment ledger.

    Returns the signed gateway form the client posts to the payment page.
    """
    from apps.payments.services import checkout_payload, initiate_payment

    cart = get_active_cart(owner, lock=True)
    # Lock rooms in id order so concurrent checkouts cannot deadlock
    items = list(cart.items.select_related("room").order_by("room_id", "check_in"))
    if not items:
        raise EmptyCart("Cannot checkout an empty cart")

    cart = recalculate_totals(cart)

    for item in items:
        validate_stay_dates(item.check_in, item.check_out, today=today)
        room = lock_room(item.room_id)
        if not room.is_bookable or has_conflict(room.pk, item.check_in, item.check_out, exclude_cart_id=cart.pk):
            raise RoomNoLongerAvailable(
                f"Room {room.number} is no longer available for {item.check_in} - {item.check_out}"
            )

    payment = initiate_payment(cart)
    logger.info("Cart %s checked out as %s for %s", cart.pk, payment.transaction_id, payment.amount)
    return checkout_payload(payment)
