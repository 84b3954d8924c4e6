from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=20, unique=True)),
                (
                    "room_type",
                    models.CharField(
                        choices=[
                            ("SINGLE", "Single"),
                            ("DOUBLE", "Double"),
                            ("TWIN", "Twin"),
                            ("SUITE", "Suite"),
                            ("DELUXE", "Deluxe"),
                            ("FAMILY", "Family"),
                        ],
                        default="DOUBLE",
                        max_length=20,
                    ),
                ),
                ("floor", models.SmallIntegerField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                (
                    "base_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Nightly rate.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("capacity", models.PositiveSmallIntegerField(default=2)),
                ("bed_count", models.PositiveSmallIntegerField(default=1)),
                ("size_sqm", models.DecimalField(blank=True, decimal_places=1, max_digits=6, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("AVAILABLE", "Available"),
                            ("RESERVED", "Reserved"),
                            ("OCCUPIED", "Occupied"),
                            ("CLEANING", "Cleaning"),
                            ("MAINTENANCE", "Maintenance"),
                        ],
                        default="AVAILABLE",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Room",
                "verbose_name_plural": "Rooms",
                "ordering": ["number"],
                "indexes": [models.Index(fields=["status", "is_active"], name="room_status_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="RoomAvailability",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("is_available", models.BooleanField(default=True)),
                (
                    "dynamic_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Informational nightly price for this date.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                ("notes", models.CharField(blank=True, max_length=255)),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Room availability",
                "verbose_name_plural": "Room availability",
                "ordering": ["room", "date"],
                "constraints": [
                    models.UniqueConstraint(fields=("room", "date"), name="unique_room_availability_date"),
                ],
            },
        ),
    ]
