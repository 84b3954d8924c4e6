from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Discount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        max_length=50,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^[A-Z0-9_-]+$",
                                "Code may contain upper-case letters, digits, hyphens and underscores only.",
                            )
                        ],
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("PERCENTAGE", "Percentage"),
                            ("EARLY_BIRD", "Early bird"),
                            ("LAST_MINUTE", "Last minute"),
                            ("SEASONAL", "Seasonal"),
                            ("LOYALTY", "Loyalty"),
                            ("FIXED_AMOUNT", "Fixed amount"),
                            ("PROMOTIONAL_CODE", "Promotional code"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "percentage_value",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=5,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "fixed_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("valid_from", models.DateTimeField(blank=True, null=True)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                (
                    "max_usage_count",
                    models.PositiveIntegerField(blank=True, help_text="Leave empty for unlimited redemptions.", null=True),
                ),
                ("current_usage_count", models.PositiveIntegerField(default=0)),
                ("max_usage_per_user", models.PositiveIntegerField(blank=True, null=True)),
                ("min_order_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("max_discount_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("terms_and_conditions", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Discount",
                "verbose_name_plural": "Discounts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "valid_from", "valid_until"], name="discount_validity_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_usage_count__isnull", True))
                        | models.Q(("current_usage_count__lte", models.F("max_usage_count"))),
                        name="discount_usage_within_limit",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DiscountRedemption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="Transaction id or confirmation code the redemption paid for.",
                        max_length=64,
                    ),
                ),
                ("redeemed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "discount",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="redemptions",
                        to="discounts.discount",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="discount_redemptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Discount redemption",
                "verbose_name_plural": "Discount redemptions",
                "ordering": ["-redeemed_at"],
            },
        ),
    ]
