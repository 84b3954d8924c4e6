from rest_framework import serializers  # type: ignore

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_ids = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "transaction_id",
            "status",
            "amount",
            "currency",
            "payment_method",
            "payment_url",
            "error_message",
            "booking_ids",
            "initiated_at",
            "completed_at",
            "failed_at",
        ]
        read_only_fields = fields

    def get_booking_ids(self, obj: Payment) -> list[int]:
        from apps.bookings.models import Booking

        if not obj.transaction_id:
            return []
        return list(Booking.objects.filter(transaction_id=obj.transaction_id).values_list("pk", flat=True))
