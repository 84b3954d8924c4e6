"""Celery tasks delivering notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


@shared_task(name="notifications.booking_confirmed")
def notify_booking_confirmed(booking_id: int) -> bool:
    from apps.bookings.models import Booking

    booking = Booking.objects.select_related("owner", "room").filter(pk=booking_id).first()
    if booking is None:
        logger.warning("Booking %s disappeared before confirmation e-mail", booking_id)
        return False
    return services.send_booking_confirmation_email(booking)


@shared_task(name="notifications.booking_cancelled")
def notify_booking_cancelled(booking_id: int) -> bool:
    from apps.bookings.models import Booking

    booking = Booking.objects.select_related("owner", "room").filter(pk=booking_id).first()
    if booking is None:
        return False
    return services.send_booking_cancelled_email(booking)


@shared_task(name="notifications.payment_failed")
def notify_payment_failed(transaction_id: str) -> bool:
    from apps.payments.models import Payment

    payment = Payment.objects.select_related("owner").filter(transaction_id=transaction_id).first()
    if payment is None:
        return False
    return services.send_payment_failed_email(payment)
