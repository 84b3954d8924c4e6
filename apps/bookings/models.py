"""Booking models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

from .domain.state_machine import BookingStatus, allowed_targets


class Booking(models.Model):
    """A reserved stay in one room."""

    Status = BookingStatus

    confirmation_code = models.CharField(max_length=32, unique=True, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
    )
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Stay price before discounts."),
    )
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    final_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    special_requests = models.TextField(blank=True)
    transaction_id = models.CharField(max_length=64, blank=True, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "check_in", "check_out"], name="booking_room_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.confirmation_code} for room {self.room_id}"

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        return len(self.stay)

    @property
    def allowed_transitions(self) -> list[str]:
        return [str(target) for target in allowed_targets(self.status)]


class BookingDiscount(models.Model):
    """A discount applied to a booking and the share of it the booking received."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="applied_discounts")
    discount = models.ForeignKey(
        "discounts.Discount",
        on_delete=models.PROTECT,
        related_name="booking_discounts",
    )
    discount_code = models.CharField(max_length=50)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2)
    applied_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Booking discount")
        verbose_name_plural = _("Booking discounts")
        ordering = ["applied_at"]

    def __str__(self) -> str:
        return f"{self.discount_code} on {self.booking.confirmation_code}"
