"""Booking lifecycle services.

Every operation that reads room occupancy and then writes runs inside one
transaction after taking the room's row lock (see ``availability.lock_room``).
"""

from __future__ import annotations

import logging
import secrets
import time
import uuid
from datetime import date, datetime
from decimal import Decimal

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.discounts.models import Discount
from apps.discounts.pricing import ZERO, price_stay, validate_stay_dates
from apps.discounts.services import redeem_discount, validate_discount_code
from apps.rooms.models import Room
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import DomainValidationError

from .availability import ensure_room_is_available, lock_room
from .domain.events import (
    BookingCancelled,
    BookingCheckedIn,
    BookingCheckedOut,
    BookingConfirmed,
    BookingCreated,
)
from .domain.state_machine import CANCELLABLE_STATUSES, BookingStatus, ensure_transition
from .exceptions import BookingNotFound, CapacityExceeded, RoomNoLongerAvailable, RoomUnavailable
from .models import Booking, BookingDiscount

logger = logging.getLogger(__name__)

TRANSITION_EVENTS = {
    BookingStatus.CONFIRMED: BookingConfirmed,
    BookingStatus.CANCELLED: BookingCancelled,
    BookingStatus.CHECKED_IN: BookingCheckedIn,
    BookingStatus.CHECKED_OUT: BookingCheckedOut,
}


def generate_confirmation_code() -> str:
    """Code for bookings made directly: BK, epoch millis and a 0-999 suffix."""
    return f"BK{int(time.time() * 1000)}{secrets.randbelow(1000)}"


def generate_settlement_confirmation_code() -> str:
    """Code for bookings created from a paid cart."""
    millis = str(int(time.time() * 1000))
    return f"BK-{millis[-8:]}-{uuid.uuid4().hex[:6].upper()}"


def _event_kwargs(booking: Booking) -> dict:
    return {
        "aggregate_id": booking.pk,
        "booking_id": booking.pk,
        "confirmation_code": booking.confirmation_code,
        "owner_id": booking.owner_id,
        "room_id": booking.room_id,
    }


def _set_room_status(room_id: int, status: str) -> None:
    Room.objects.filter(pk=room_id).update(status=status, updated_at=timezone.now())


def ensure_capacity(room: Room, guests_count: int) -> None:
    if guests_count < 1:
        raise DomainValidationError("At least one guest is required")
    if guests_count > room.capacity:
        raise CapacityExceeded(f"Room capacity is {room.capacity} guests")


def _get_booking(booking_id: int, *, owner=None, lock: bool = False) -> Booking:
    queryset = Booking.objects.select_related("room")
    if owner is not None:
        queryset = queryset.filter(owner=owner)
    if lock:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFound(f"Booking not found with id: {booking_id}") from None


@transaction.atomic
def create_booking(
    owner,
    room_id: int,
    check_in: date,
    check_out: date,
    guests_count: int = 1,
    *,
    discount_code: str | None = None,
    special_requests: str = "",
    today: date | None = None,
) -> Booking:
    """Book a room directly, without going through a cart and the gateway."""
    validate_stay_dates(check_in, check_out, today=today)

    with DjangoUnitOfWork() as uow:
        room = lock_room(room_id)
        if not room.is_active or room.status != Room.Status.AVAILABLE:
            raise RoomUnavailable("Room is not available for booking")
        ensure_capacity(room, guests_count)
        ensure_room_is_available(room.pk, check_in, check_out)

        total_price = price_stay(room, check_in, check_out, today=today)
        quote = validate_discount_code(discount_code, total_price, owner=owner) if discount_code else None
        discount_amount = quote.amount if quote else ZERO

        booking = Booking.objects.create(
            confirmation_code=generate_confirmation_code(),
            owner=owner,
            room=room,
            status=BookingStatus.PENDING,
            check_in=check_in,
            check_out=check_out,
            guests_count=guests_count,
            total_price=total_price,
            discount_amount=discount_amount,
            final_price=max(total_price - discount_amount, ZERO),
            special_requests=special_requests or "",
        )

        if quote is not None:
            redeem_discount(quote.discount.pk, owner=owner, reference=booking.confirmation_code)
            BookingDiscount.objects.create(
                booking=booking,
                discount=quote.discount,
                discount_code=quote.code,
                discount_amount=discount_amount,
            )

        _set_room_status(room.pk, Room.Status.RESERVED)
        uow.record(
            BookingCreated(
                **_event_kwargs(booking),
                check_in=check_in,
                check_out=check_out,
                final_price=booking.final_price,
            )
        )

    logger.info("Created booking %s for room %s", booking.confirmation_code, room.number)
    return booking


@transaction.atomic
def create_from_cart_item(
    item,
    *,
    owner,
    transaction_id: str,
    paid_at: datetime | None = None,
    discount: Discount | None = None,
    discount_share: Decimal = ZERO,
) -> Booking:
    """Materialize a paid cart line item as a confirmed booking.

    The room is re-checked under its lock; holds of the cart being settled
    are ignored. Raises RoomNoLongerAvailable when the stay was taken in the
    meantime.
    """
    paid_at = paid_at or timezone.now()

    with DjangoUnitOfWork() as uow:
        room = lock_room(item.room_id)
        if not room.is_bookable:
            raise RoomNoLongerAvailable(f"Room {room.number} is no longer bookable")
        ensure_room_is_available(
            room.pk,
            item.check_in,
            item.check_out,
            exclude_cart_id=item.cart_id,
            error_class=RoomNoLongerAvailable,
        )

        discount_share = min(Decimal(discount_share), item.price)
        booking = Booking.objects.create(
            confirmation_code=generate_settlement_confirmation_code(),
            owner=owner,
            room=room,
            status=BookingStatus.CONFIRMED,
            check_in=item.check_in,
            check_out=item.check_out,
            guests_count=item.guests_count,
            total_price=item.price,
            discount_amount=discount_share,
            final_price=max(item.price - discount_share, ZERO),
            transaction_id=transaction_id,
            paid_at=paid_at,
        )
        if discount is not None:
            BookingDiscount.objects.create(
                booking=booking,
                discount=discount,
                discount_code=discount.code,
                discount_amount=discount_share,
            )

        _set_room_status(room.pk, Room.Status.RESERVED)
        uow.record(BookingConfirmed(**_event_kwargs(booking), transaction_id=transaction_id))

    logger.info(
        "Confirmed booking %s for room %s from transaction %s",
        booking.confirmation_code,
        room.number,
        transaction_id,
    )
    return booking


def _apply_transition(uow: DjangoUnitOfWork, booking: Booking, target: str, *, reason: str = "") -> Booking:
    transition = ensure_transition(booking.status, target)
    now = timezone.now()
    previous = booking.status

    booking.status = target
    update_fields = ["status", "updated_at"]
    if target == BookingStatus.CHECKED_IN:
        booking.checked_in_at = now
        update_fields.append("checked_in_at")
    elif target == BookingStatus.CHECKED_OUT:
        booking.checked_out_at = now
        update_fields.append("checked_out_at")
    elif target == BookingStatus.CANCELLED:
        booking.cancelled_at = now
        booking.cancellation_reason = reason or ""
        update_fields.extend(["cancelled_at", "cancellation_reason"])
    booking.save(update_fields=update_fields)

    if transition.room_status:
        _set_room_status(booking.room_id, transition.room_status)

    event_class = TRANSITION_EVENTS.get(BookingStatus(target))
    if event_class is BookingCancelled:
        uow.record(BookingCancelled(**_event_kwargs(booking), reason=booking.cancellation_reason))
    elif event_class is BookingConfirmed:
        uow.record(BookingConfirmed(**_event_kwargs(booking), transaction_id=booking.transaction_id))
    elif event_class is not None:
        uow.record(event_class(**_event_kwargs(booking)))

    logger.info(
        "Booking %s: %s -> %s (%s)",
        booking.confirmation_code,
        previous,
        target,
        transition.name,
    )
    return booking


@transaction.atomic
def transition(booking_id: int, target: str, *, owner=None, reason: str = "") -> Booking:
    with DjangoUnitOfWork() as uow:
        booking = _get_booking(booking_id, owner=owner, lock=True)
        return _apply_transition(uow, booking, target, reason=reason)


def confirm_booking(booking_id: int) -> Booking:
    return transition(booking_id, BookingStatus.CONFIRMED)


def cancel_booking(owner, booking_id: int, reason: str = "") -> Booking:
    """Cancel a pending or confirmed booking. ``owner=None`` skips the ownership scope (staff)."""
    return transition(booking_id, BookingStatus.CANCELLED, owner=owner, reason=reason)


def check_in(booking_id: int) -> Booking:
    return transition(booking_id, BookingStatus.CHECKED_IN)


def check_out(booking_id: int) -> Booking:
    return transition(booking_id, BookingStatus.CHECKED_OUT)


def mark_no_show(booking_id: int) -> Booking:
    return transition(booking_id, BookingStatus.NO_SHOW)


def refund_booking(booking_id: int) -> Booking:
    return transition(booking_id, BookingStatus.REFUNDED)


@transaction.atomic
def update_booking(
    owner,
    booking_id: int,
    *,
    status: str | None = None,
    check_in: date | None = None,
    check_out: date | None = None,
    guests_count: int | None = None,
    special_requests: str | None = None,
    cancellation_reason: str | None = None,
    today: date | None = None,
) -> Booking:
    """Change dates, party size, requests and/or status of a booking.

    New dates are re-checked against other bookings (this one excluded) and
    re-priced; an existing discount keeps its amount, clamped to the new
    price.
    """
    with DjangoUnitOfWork() as uow:
        booking = _get_booking(booking_id, owner=owner, lock=True)
        new_check_in = check_in or booking.check_in
        new_check_out = check_out or booking.check_out
        dates_changed = (new_check_in, new_check_out) != (booking.check_in, booking.check_out)

        if dates_changed or guests_count is not None:
            if booking.status not in CANCELLABLE_STATUSES:
                raise DomainValidationError("Only pending or confirmed bookings can be changed")

        if dates_changed or guests_count is not None:
            room = lock_room(booking.room_id)
        else:
            room = booking.room

        update_fields = ["updated_at"]
        if dates_changed:
            validate_stay_dates(new_check_in, new_check_out, today=today)
            ensure_room_is_available(
                room.pk,
                new_check_in,
                new_check_out,
                exclude_booking_id=booking.pk,
            )
            booking.check_in = new_check_in
            booking.check_out = new_check_out
            booking.total_price = price_stay(room, new_check_in, new_check_out, today=today)
            booking.discount_amount = min(booking.discount_amount, booking.total_price)
            booking.final_price = max(booking.total_price - booking.discount_amount, ZERO)
            update_fields.extend(["check_in", "check_out", "total_price", "discount_amount", "final_price"])

        if guests_count is not None:
            ensure_capacity(room, guests_count)
            booking.guests_count = guests_count
            update_fields.append("guests_count")

        if special_requests is not None:
            booking.special_requests = special_requests
            update_fields.append("special_requests")

        booking.save(update_fields=update_fields)

        if status is not None and status != booking.status:
            _apply_transition(uow, booking, status, reason=cancellation_reason or "")

    return booking


def get_booking_for_owner(owner, booking_id: int) -> Booking:
    return _get_booking(booking_id, owner=owner)


def get_booking_by_confirmation(confirmation_code: str, *, owner=None) -> Booking:
    queryset = Booking.objects.select_related("room")
    if owner is not None:
        queryset = queryset.filter(owner=owner)
    try:
        return queryset.get(confirmation_code=confirmation_code)
    except Booking.DoesNotExist:
        raise BookingNotFound(f"Booking not found with confirmation code: {confirmation_code}") from None


def list_bookings_for_owner(owner):
    return Booking.objects.filter(owner=owner).select_related("room").order_by("-created_at")
