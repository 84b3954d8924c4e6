from datetime import timedelta
from decimal import Decimal

import pytest

from apps.bookings import services
from apps.bookings.domain.events import BookingCancelled, BookingCreated
from apps.bookings.domain.state_machine import BookingStatus
from apps.bookings.exceptions import (
    BookingNotFound,
    CapacityExceeded,
    InvalidStatusTransition,
    RoomNotFound,
    RoomUnavailable,
)
from apps.bookings.models import BookingDiscount
from apps.bookings.tasks import mark_no_show_bookings
from apps.discounts.exceptions import InvalidDateRange
from apps.discounts.models import Discount, DiscountRedemption
from apps.rooms.models import Room
from shared.application.message_bus import message_bus


@pytest.fixture
def captured_events():
    seen = []
    for event_type in (BookingCreated, BookingCancelled):
        message_bus.register_event_handler(event_type, seen.append)
    yield seen
    for handlers in message_bus._event_handlers.values():
        if seen.append in handlers:
            handlers.remove(seen.append)


@pytest.mark.django_db
def test_create_booking_prices_stay_and_reserves_room(guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, 2, special_requests="Late arrival", today=today)

    room.refresh_from_db()
    assert booking.status == BookingStatus.PENDING
    assert booking.confirmation_code.startswith("BK")
    assert booking.total_price == Decimal("300.00")
    assert booking.final_price == Decimal("300.00")
    assert booking.special_requests == "Late arrival"
    assert room.status == Room.Status.RESERVED


@pytest.mark.django_db
def test_create_booking_redeems_discount(guest, room, stay, today):
    discount = Discount.objects.create(
        code="SAVE10",
        name="Save",
        type=Discount.Type.PERCENTAGE,
        percentage_value=Decimal("10"),
        max_discount_amount=Decimal("20"),
    )

    booking = services.create_booking(guest, room.pk, *stay, discount_code="save10", today=today)

    discount.refresh_from_db()
    assert booking.discount_amount == Decimal("20.00")
    assert booking.final_price == Decimal("280.00")
    assert discount.current_usage_count == 1
    assert BookingDiscount.objects.get(booking=booking).discount_code == "SAVE10"
    assert DiscountRedemption.objects.filter(owner=guest, reference=booking.confirmation_code).exists()


@pytest.mark.django_db
def test_create_booking_validations(guest, room, stay, today):
    with pytest.raises(RoomNotFound):
        services.create_booking(guest, 9999, *stay, today=today)
    with pytest.raises(CapacityExceeded):
        services.create_booking(guest, room.pk, *stay, 3, today=today)
    with pytest.raises(InvalidDateRange):
        services.create_booking(guest, room.pk, stay[1], stay[0], today=today)


@pytest.mark.django_db
def test_create_booking_rejects_rooms_out_of_service(guest, room, stay, today):
    Room.objects.filter(pk=room.pk).update(status=Room.Status.MAINTENANCE)

    with pytest.raises(RoomUnavailable):
        services.create_booking(guest, room.pk, *stay, today=today)


@pytest.mark.django_db
def test_overlapping_booking_is_rejected(guest, other_guest, room, stay, today):
    first = services.create_booking(guest, room.pk, *stay, today=today)
    # Make the room bookable again so only the date overlap is in play
    Room.objects.filter(pk=room.pk).update(status=Room.Status.AVAILABLE)

    with pytest.raises(RoomUnavailable):
        services.create_booking(other_guest, room.pk, stay[0] + timedelta(days=1), stay[1], today=today)

    services.cancel_booking(guest, first.pk, "Plans changed")
    again = services.create_booking(other_guest, room.pk, *stay, today=today)
    assert again.owner == other_guest


@pytest.mark.django_db
def test_front_desk_lifecycle(guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    services.confirm_booking(booking.pk)
    checked_in = services.check_in(booking.pk)
    room.refresh_from_db()
    assert checked_in.checked_in_at is not None
    assert room.status == Room.Status.OCCUPIED

    checked_out = services.check_out(booking.pk)
    room.refresh_from_db()
    assert checked_out.checked_out_at is not None
    assert room.status == Room.Status.CLEANING

    assert services.refund_booking(booking.pk).status == BookingStatus.REFUNDED


@pytest.mark.django_db
def test_cancel_releases_room_and_publishes_after_commit(
    guest, room, stay, today, captured_events, django_capture_on_commit_callbacks
):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    with django_capture_on_commit_callbacks(execute=True):
        cancelled = services.cancel_booking(guest, booking.pk, "Flight cancelled")

    room.refresh_from_db()
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "Flight cancelled"
    assert cancelled.cancelled_at is not None
    assert room.status == Room.Status.AVAILABLE
    assert [type(event) for event in captured_events] == [BookingCancelled]
    assert captured_events[0].reason == "Flight cancelled"


@pytest.mark.django_db
def test_guest_cannot_cancel_someone_elses_booking(guest, other_guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    with pytest.raises(BookingNotFound):
        services.cancel_booking(other_guest, booking.pk)


@pytest.mark.django_db
def test_invalid_transition_leaves_booking_untouched(guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    with pytest.raises(InvalidStatusTransition):
        services.check_out(booking.pk)

    booking.refresh_from_db()
    assert booking.status == BookingStatus.PENDING


@pytest.mark.django_db
def test_update_booking_reprices_new_dates(guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    updated = services.update_booking(
        guest,
        booking.pk,
        check_out=stay[1] + timedelta(days=1),
        guests_count=2,
        today=today,
    )

    assert updated.total_price == Decimal("400.00")
    assert updated.final_price == Decimal("400.00")
    assert updated.guests_count == 2


@pytest.mark.django_db
def test_update_booking_to_cancelled(guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    updated = services.update_booking(guest, booking.pk, status="CANCELLED", cancellation_reason="Sick")

    assert updated.status == BookingStatus.CANCELLED
    assert updated.cancellation_reason == "Sick"


@pytest.mark.django_db
def test_lookup_by_confirmation_code(guest, other_guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    assert services.get_booking_by_confirmation(booking.confirmation_code, owner=guest) == booking
    with pytest.raises(BookingNotFound):
        services.get_booking_by_confirmation(booking.confirmation_code, owner=other_guest)


@pytest.mark.django_db
def test_no_show_sweep_only_touches_past_confirmed_bookings(guest, room, stay, today):
    future = services.create_booking(guest, room.pk, *stay, today=today)
    services.confirm_booking(future.pk)
    Room.objects.filter(pk=room.pk).update(status=Room.Status.AVAILABLE)
    past = services.create_booking(
        guest, room.pk, today - timedelta(days=2), today + timedelta(days=1), today=today - timedelta(days=2)
    )
    services.confirm_booking(past.pk)

    result = mark_no_show_bookings()

    past.refresh_from_db()
    future.refresh_from_db()
    assert result == {"no_show": 1}
    assert past.status == BookingStatus.NO_SHOW
    assert future.status == BookingStatus.CONFIRMED


@pytest.mark.django_db
def test_owner_scoped_lookups(guest, other_guest, room, stay, today):
    booking = services.create_booking(guest, room.pk, *stay, today=today)

    assert services.get_booking_for_owner(guest, booking.pk) == booking
    assert list(services.list_bookings_for_owner(guest)) == [booking]
    assert list(services.list_bookings_for_owner(other_guest)) == []
    with pytest.raises(BookingNotFound):
        services.get_booking_for_owner(other_guest, booking.pk)
