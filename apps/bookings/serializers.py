"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.state_machine import BookingStatus
from .models import Booking, BookingDiscount


class BookingCreateSerializer(serializers.Serializer):
    """Direct booking request from a guest."""

    room = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, max_value=20, default=1)
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices, required=False)
    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    guests_count = serializers.IntegerField(min_value=1, max_value=20, required=False)
    special_requests = serializers.CharField(required=False, allow_blank=True)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class BookingDiscountSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingDiscount
        fields = ["discount_code", "discount_amount", "applied_at"]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Booking details."""

    room_number = serializers.ReadOnlyField(source="room.number")
    nights = serializers.ReadOnlyField()
    applied_discounts = BookingDiscountSerializer(many=True, read_only=True)
    allowed_transitions = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "confirmation_code",
            "owner",
            "room",
            "room_number",
            "status",
            "check_in",
            "check_out",
            "nights",
            "guests_count",
            "total_price",
            "discount_amount",
            "final_price",
            "applied_discounts",
            "special_requests",
            "transaction_id",
            "paid_at",
            "checked_in_at",
            "checked_out_at",
            "cancelled_at",
            "cancellation_reason",
            "allowed_transitions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
