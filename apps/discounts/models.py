"""Discount code models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

code_validator = RegexValidator(
    r"^[A-Z0-9_-]+$",
    _("Code may contain upper-case letters, digits, hyphens and underscores only."),
)


class Discount(models.Model):
    """Promotional discount redeemable by code."""

    class Type(models.TextChoices):
        PERCENTAGE = "PERCENTAGE", _("Percentage")
        EARLY_BIRD = "EARLY_BIRD", _("Early bird")
        LAST_MINUTE = "LAST_MINUTE", _("Last minute")
        SEASONAL = "SEASONAL", _("Seasonal")
        LOYALTY = "LOYALTY", _("Loyalty")
        FIXED_AMOUNT = "FIXED_AMOUNT", _("Fixed amount")
        PROMOTIONAL_CODE = "PROMOTIONAL_CODE", _("Promotional code")

    PERCENTAGE_TYPES = frozenset(
        {t.value for t in (Type.PERCENTAGE, Type.EARLY_BIRD, Type.LAST_MINUTE, Type.SEASONAL, Type.LOYALTY)}
    )
    FIXED_TYPES = frozenset({Type.FIXED_AMOUNT.value, Type.PROMOTIONAL_CODE.value})

    code = models.CharField(max_length=50, unique=True, validators=[code_validator])
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=Type.choices)
    percentage_value = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    fixed_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    max_usage_count = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Leave empty for unlimited redemptions."),
    )
    current_usage_count = models.PositiveIntegerField(default=0)
    max_usage_per_user = models.PositiveIntegerField(null=True, blank=True)
    min_order_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_discount_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    terms_and_conditions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Discount")
        verbose_name_plural = _("Discounts")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_usage_count__isnull=True)
                | models.Q(current_usage_count__lte=models.F("max_usage_count")),
                name="discount_usage_within_limit",
            ),
        ]
        indexes = [
            models.Index(fields=["is_active", "valid_from", "valid_until"], name="discount_validity_idx"),
        ]

    def __str__(self) -> str:
        return self.code

    @property
    def is_percentage(self) -> bool:
        return self.type in self.PERCENTAGE_TYPES

    @property
    def is_exhausted(self) -> bool:
        return self.max_usage_count is not None and self.current_usage_count >= self.max_usage_count

    def is_valid_at(self, moment=None) -> bool:
        moment = moment or timezone.now()
        if self.valid_from and moment < self.valid_from:
            return False
        if self.valid_until and moment > self.valid_until:
            return False
        return True


class DiscountRedemption(models.Model):
    """One successful redemption of a discount, used for per-user limits."""

    discount = models.ForeignKey(Discount, on_delete=models.CASCADE, related_name="redemptions")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="discount_redemptions",
    )
    reference = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Transaction id or confirmation code the redemption paid for."),
    )
    redeemed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Discount redemption")
        verbose_name_plural = _("Discount redemptions")
        ordering = ["-redeemed_at"]

    def __str__(self) -> str:
        return f"{self.discount.code} -> {self.reference or self.owner_id}"
