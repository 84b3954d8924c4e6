"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .domain.state_machine import BookingStatus
from .models import Booking
from .services import mark_no_show

logger = logging.getLogger(__name__)


@shared_task(name="bookings.mark_no_show_bookings")
def mark_no_show_bookings() -> dict[str, int]:
    """
    Move confirmed bookings whose check-in day has passed without the guest
    arriving to NO_SHOW, releasing their dates.

    Runs daily through Celery Beat.
    """
    today = timezone.localdate()
    booking_ids = list(
        Booking.objects.filter(status=BookingStatus.CONFIRMED, check_in__lt=today).values_list("pk", flat=True)
    )

    marked = 0
    for booking_id in booking_ids:
        try:
            mark_no_show(booking_id)
            marked += 1
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to mark booking %s as no-show: %s", booking_id, exc, exc_info=True)

    if marked:
        logger.info("Marked %s bookings as no-show", marked)
    return {"no_show": marked}
