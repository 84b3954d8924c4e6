"""Cart models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Cart(models.Model):
    """A guest's collection of stays awaiting checkout."""

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        CHECKOUT_PENDING = "CHECKOUT_PENDING", _("Checkout pending")
        COMPLETED = "COMPLETED", _("Completed")
        CANCELLED = "CANCELLED", _("Cancelled")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="carts",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    applied_discount_code = models.CharField(max_length=50, blank=True)
    discount_applied_at = models.DateTimeField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    transaction_id = models.CharField(max_length=64, blank=True, db_index=True)
    checkout_initiated_at = models.DateTimeField(null=True, blank=True)
    checkout_completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Cart")
        verbose_name_plural = _("Carts")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner"],
                condition=models.Q(status="ACTIVE"),
                name="unique_active_cart_per_owner",
            ),
        ]

    def __str__(self) -> str:
        return f"Cart {self.pk} ({self.status}) of {self.owner_id}"


class CartItem(models.Model):
    """One prospective stay; price is the nightly rate times nights when added."""

    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    room = models.ForeignKey("rooms.Room", on_delete=models.CASCADE, related_name="cart_items")
    check_in = models.DateField()
    check_out = models.DateField()
    guests_count = models.PositiveSmallIntegerField(default=1)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Cart item")
        verbose_name_plural = _("Cart items")
        ordering = ["created_at", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="cart_item_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "check_in", "check_out"], name="cart_item_room_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"Room {self.room_id}: {self.check_in} - {self.check_out}"

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        return len(self.stay)
