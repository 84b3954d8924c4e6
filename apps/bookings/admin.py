"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking, BookingDiscount


class BookingDiscountInline(admin.TabularInline):
    model = BookingDiscount
    extra = 0
    readonly_fields = ("discount", "discount_code", "discount_amount", "applied_at")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "confirmation_code",
        "room",
        "owner",
        "status",
        "check_in",
        "check_out",
        "final_price",
        "created_at",
    )
    list_filter = ("status", "check_in", "check_out")
    search_fields = ("confirmation_code", "transaction_id", "owner__email", "room__number")
    readonly_fields = (
        "confirmation_code",
        "transaction_id",
        "paid_at",
        "created_at",
        "updated_at",
    )
    inlines = [BookingDiscountInline]
