"""Room inventory models."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Room(models.Model):
    """A bookable hotel room."""

    class Status(models.TextChoices):
        AVAILABLE = "AVAILABLE", _("Available")
        RESERVED = "RESERVED", _("Reserved")
        OCCUPIED = "OCCUPIED", _("Occupied")
        CLEANING = "CLEANING", _("Cleaning")
        MAINTENANCE = "MAINTENANCE", _("Maintenance")

    class RoomType(models.TextChoices):
        SINGLE = "SINGLE", _("Single")
        DOUBLE = "DOUBLE", _("Double")
        TWIN = "TWIN", _("Twin")
        SUITE = "SUITE", _("Suite")
        DELUXE = "DELUXE", _("Deluxe")
        FAMILY = "FAMILY", _("Family")

    number = models.CharField(max_length=20, unique=True)
    room_type = models.CharField(max_length=20, choices=RoomType.choices, default=RoomType.DOUBLE)
    floor = models.SmallIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Nightly rate."),
    )
    capacity = models.PositiveSmallIntegerField(default=2)
    bed_count = models.PositiveSmallIntegerField(default=1)
    size_sqm = models.DecimalField(max_digits=6, decimal_places=1, null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["number"]
        indexes = [
            models.Index(fields=["status", "is_active"], name="room_status_active_idx"),
        ]

    def __str__(self) -> str:
        return f"Room {self.number} ({self.get_room_type_display()})"

    @property
    def is_bookable(self) -> bool:
        """Active and not taken out of service."""
        return self.is_active and self.status != self.Status.MAINTENANCE


class RoomAvailability(models.Model):
    """Day-level override for a room: blocks a night or carries a price hint."""

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="availability")
    date = models.DateField()
    is_available = models.BooleanField(default=True)
    dynamic_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Informational nightly price for this date."),
    )
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _("Room availability")
        verbose_name_plural = _("Room availability")
        ordering = ["room", "date"]
        constraints = [
            models.UniqueConstraint(fields=["room", "date"], name="unique_room_availability_date"),
        ]

    def __str__(self) -> str:
        state = "open" if self.is_available else "blocked"
        return f"{self.room.number} {self.date.isoformat()} {state}"
