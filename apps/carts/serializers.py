"""Serializers for the cart API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Cart, CartItem


class CartItemSerializer(serializers.ModelSerializer):
    room_number = serializers.ReadOnlyField(source="room.number")
    room_type = serializers.ReadOnlyField(source="room.room_type")
    nightly_rate = serializers.ReadOnlyField(source="room.base_price")
    nights = serializers.ReadOnlyField()

    class Meta:
        model = CartItem
        fields = [
            "id",
            "room",
            "room_number",
            "room_type",
            "nightly_rate",
            "check_in",
            "check_out",
            "nights",
            "guests_count",
            "price",
            "created_at",
        ]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = [
            "id",
            "status",
            "items",
            "item_count",
            "applied_discount_code",
            "discount_applied_at",
            "subtotal",
            "discount_amount",
            "total_price",
            "transaction_id",
            "updated_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj: Cart) -> int:
        return len(obj.items.all())


class AddToCartSerializer(serializers.Serializer):
    room_id = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, max_value=20, default=1)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("Check-out date must be after check-in date.")
        return attrs


class ApplyDiscountSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
