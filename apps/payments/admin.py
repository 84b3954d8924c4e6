from django.contrib import admin  # type: ignore

from .models import Payment, PaymentEvent


class PaymentEventInline(admin.TabularInline):
    model = PaymentEvent
    extra = 0
    readonly_fields = ("event", "status", "payload", "created_at")
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "owner", "amount", "currency", "status", "initiated_at", "completed_at")
    list_filter = ("status", "currency")
    search_fields = ("transaction_id", "customer_email", "owner__email")
    readonly_fields = (
        "transaction_id",
        "req_time",
        "request_hash",
        "request_fields",
        "callback_hash",
        "callback_data",
        "callback_received_at",
        "initiated_at",
        "completed_at",
        "failed_at",
    )
    inlines = [PaymentEventInline]
