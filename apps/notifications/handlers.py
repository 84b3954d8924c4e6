"""Message bus handlers turning domain events into notification tasks."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed
from apps.payments.events import PaymentFailed
from shared.application.message_bus import MessageBus

from . import tasks

logger = logging.getLogger(__name__)


def _enqueue(task, *args) -> None:
    try:
        task.delay(*args)
    except Exception as exc:  # noqa: BLE001
        logger.error("Could not enqueue %s%s: %s", task.name, args, exc, exc_info=True)


def on_booking_confirmed(event: BookingConfirmed) -> None:
    _enqueue(tasks.notify_booking_confirmed, event.booking_id)


def on_booking_cancelled(event: BookingCancelled) -> None:
    _enqueue(tasks.notify_booking_cancelled, event.booking_id)


def on_payment_failed(event: PaymentFailed) -> None:
    _enqueue(tasks.notify_payment_failed, event.transaction_id)


def register(bus: MessageBus) -> None:
    bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    bus.register_event_handler(PaymentFailed, on_payment_failed)
