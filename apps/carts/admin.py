from django.contrib import admin  # type: ignore

from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ("price", "created_at")


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "owner", "status", "subtotal", "discount_amount", "total_price", "transaction_id")
    list_filter = ("status",)
    search_fields = ("transaction_id", "owner__email", "applied_discount_code")
    inlines = [CartItemInline]
