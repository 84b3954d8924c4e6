"""Notification services for sending e-mails."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one e-mail.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Django template for the HTML body (optional)
        context: Template context; ``message`` is used as plain text when
            there is no template
        html_message: Pre-rendered HTML body (optional)

    Returns:
        bool: True if the message was handed to the mail backend
    """
    if not recipient_email:
        logger.info("Skipping e-mail %r: recipient has no address", subject)
        return False

    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info("Email sent successfully to %s: %s", recipient_email, subject)
        return True

    except Exception as e:
        logger.error("Failed to send email to %s: %s", recipient_email, e, exc_info=True)
        return False


def _guest_name(user) -> str:
    return (user.get_full_name() or user.get_username()) if user else "guest"


def send_booking_confirmation_email(booking) -> bool:
    """Tell the guest their stay is confirmed."""
    subject = f"Booking {booking.confirmation_code} confirmed"
    message = (
        f"Dear {_guest_name(booking.owner)},\n\n"
        f"Your booking {booking.confirmation_code} for room {booking.room.number} "
        f"from {booking.check_in:%Y-%m-%d} to {booking.check_out:%Y-%m-%d} is confirmed.\n"
        f"Total paid: {booking.final_price}.\n"
    )
    return send_email_notification(booking.owner.email, subject, None, {"message": message})


def send_booking_cancelled_email(booking) -> bool:
    subject = f"Booking {booking.confirmation_code} cancelled"
    reason = f" Reason: {booking.cancellation_reason}." if booking.cancellation_reason else ""
    message = (
        f"Dear {_guest_name(booking.owner)},\n\n"
        f"Your booking {booking.confirmation_code} for room {booking.room.number} has been cancelled.{reason}\n"
    )
    return send_email_notification(booking.owner.email, subject, None, {"message": message})


def send_payment_failed_email(payment) -> bool:
    subject = f"Payment {payment.transaction_id} was not completed"
    message = (
        f"Dear {_guest_name(payment.owner)},\n\n"
        f"Your payment of {payment.amount} {payment.currency} did not go through "
        f"({payment.get_status_display().lower()}). Your cart is still available if you want to try again.\n"
    )
    recipient = payment.customer_email or (payment.owner.email if payment.owner else "")
    return send_email_notification(recipient, subject, None, {"message": message})
