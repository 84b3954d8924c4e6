"""Availability index.

Answers whether a room is free for a half-open stay ``[check_in, check_out)``
and provides the per-room lock under which every check-then-write on room
occupancy must run. A room is busy when any of these overlap the stay:

* a booking that still holds its dates (anything but cancelled or no-show);
* a day override marking a night unavailable;
* a line item of another cart whose payment is still open at the gateway.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.rooms.models import Room, RoomAvailability

from .domain.state_machine import RELEASED_STATUSES
from .exceptions import RoomNotFound, RoomUnavailable

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_room(room_id: int) -> Room:
    """Load the room with a row lock held until the surrounding transaction ends."""
    try:
        return _lock_queryset_if_possible(Room.objects.filter(pk=room_id)).get()
    except Room.DoesNotExist:
        raise RoomNotFound(f"Room not found with id: {room_id}") from None


def overlapping_bookings(room_id: int, check_in: date, check_out: date, *, exclude_booking_id=None):
    from .models import Booking  # Local import to prevent circular dependency

    queryset = (
        Booking.objects.filter(room_id=room_id)
        .exclude(status__in=RELEASED_STATUSES)
        .filter(Q(check_in__lt=check_out) & Q(check_out__gt=check_in))
    )
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    return queryset


def blocked_nights(room_id: int, check_in: date, check_out: date):
    # check_out night is not stayed
    last_night = check_out - timedelta(days=1)
    return RoomAvailability.objects.filter(
        room_id=room_id,
        is_available=False,
        date__gte=check_in,
        date__lte=last_night,
    )


def checkout_holds(room_id: int, check_in: date, check_out: date, *, exclude_cart_id=None):
    from apps.carts.models import Cart, CartItem
    from apps.payments.models import Payment

    queryset = CartItem.objects.filter(
        room_id=room_id,
        cart__status=Cart.Status.CHECKOUT_PENDING,
        cart__payments__status__in=Payment.OPEN_STATUSES,
    ).filter(Q(check_in__lt=check_out) & Q(check_out__gt=check_in))
    if exclude_cart_id is not None:
        queryset = queryset.exclude(cart_id=exclude_cart_id)
    return queryset


def has_conflict(
    room_id: int,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
    exclude_cart_id=None,
) -> bool:
    if overlapping_bookings(room_id, check_in, check_out, exclude_booking_id=exclude_booking_id).exists():
        return True
    if blocked_nights(room_id, check_in, check_out).exists():
        return True
    if checkout_holds(room_id, check_in, check_out, exclude_cart_id=exclude_cart_id).exists():
        return True
    return False


def ensure_room_is_available(
    room_id: int,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
    exclude_cart_id=None,
    error_class=RoomUnavailable,
) -> None:
    if has_conflict(
        room_id,
        check_in,
        check_out,
        exclude_booking_id=exclude_booking_id,
        exclude_cart_id=exclude_cart_id,
    ):
        logger.info("Room %s busy for %s - %s", room_id, check_in, check_out)
        raise error_class()
