from decimal import Decimal
from unittest import mock

import pytest
from django.core import mail

from apps.bookings import services as booking_services
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed
from apps.notifications import handlers, services, tasks
from apps.payments.events import PaymentFailed
from apps.payments.models import Payment
from shared.application.message_bus import MessageBus


@pytest.fixture
def booking(guest, room, stay, today):
    return booking_services.create_booking(guest, room.pk, *stay, today=today)


def test_plain_text_email_is_sent():
    assert services.send_email_notification("guest@example.com", "Hello", None, {"message": "Body"})

    assert len(mail.outbox) == 1
    assert mail.outbox[0].body == "Body"
    assert mail.outbox[0].to == ["guest@example.com"]


def test_email_without_recipient_is_skipped():
    assert services.send_email_notification("", "Hello", None, {"message": "Body"}) is False
    assert mail.outbox == []


def test_mail_backend_errors_are_reported_not_raised():
    with mock.patch.object(services, "send_mail", side_effect=OSError("smtp down")):
        assert services.send_email_notification("guest@example.com", "Hello", None, {"message": "Body"}) is False


@pytest.mark.django_db
def test_confirmation_email_names_booking(booking):
    booking_services.confirm_booking(booking.pk)

    assert tasks.notify_booking_confirmed(booking.pk) is True

    message = mail.outbox[0]
    assert booking.confirmation_code in message.subject
    assert "Sok Dara" in message.body
    assert "room 101" in message.body


@pytest.mark.django_db
def test_cancellation_email_includes_reason(guest, booking):
    booking_services.cancel_booking(guest, booking.pk, "Flight cancelled")

    assert tasks.notify_booking_cancelled(booking.pk) is True
    assert "Reason: Flight cancelled." in mail.outbox[0].body


@pytest.mark.django_db
def test_payment_failed_email(guest):
    Payment.objects.create(
        transaction_id="TXN-1-abcdef12",
        owner=guest,
        amount=Decimal("120.00"),
        status=Payment.Status.FAILED,
        customer_email="billing@example.com",
    )

    assert tasks.notify_payment_failed("TXN-1-abcdef12") is True
    assert mail.outbox[0].to == ["billing@example.com"]
    assert "120.00 USD" in mail.outbox[0].body


@pytest.mark.django_db
def test_tasks_tolerate_missing_records():
    assert tasks.notify_booking_confirmed(999) is False
    assert tasks.notify_booking_cancelled(999) is False
    assert tasks.notify_payment_failed("TXN-missing") is False


def _booking_event(event_class, **extra):
    return event_class(aggregate_id=1, booking_id=1, confirmation_code="BK1", owner_id=1, room_id=1, **extra)


def test_handlers_enqueue_tasks():
    bus = MessageBus()
    handlers.register(bus)

    with mock.patch.object(tasks.notify_booking_confirmed, "delay") as confirmed, mock.patch.object(
        tasks.notify_booking_cancelled, "delay"
    ) as cancelled, mock.patch.object(tasks.notify_payment_failed, "delay") as failed:
        bus.publish_events(
            [
                _booking_event(BookingConfirmed, transaction_id="TXN-1"),
                _booking_event(BookingCancelled, reason="x"),
                PaymentFailed(aggregate_id=3, transaction_id="TXN-3", owner_id=1, status="FAILED", reason="declined"),
            ]
        )

    confirmed.assert_called_once_with(1)
    cancelled.assert_called_once_with(1)
    failed.assert_called_once_with("TXN-3")


def test_broker_outage_does_not_break_publishing():
    with mock.patch.object(tasks.notify_booking_confirmed, "delay", side_effect=ConnectionError("broker down")):
        handlers.on_booking_confirmed(_booking_event(BookingConfirmed))
