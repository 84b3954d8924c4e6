from django.contrib import admin  # type: ignore

from .models import Discount, DiscountRedemption


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "type",
        "percentage_value",
        "fixed_amount",
        "current_usage_count",
        "max_usage_count",
        "valid_until",
        "is_active",
    )
    list_filter = ("type", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("current_usage_count", "created_at", "updated_at")


@admin.register(DiscountRedemption)
class DiscountRedemptionAdmin(admin.ModelAdmin):
    list_display = ("discount", "owner", "reference", "redeemed_at")
    search_fields = ("discount__code", "reference")
