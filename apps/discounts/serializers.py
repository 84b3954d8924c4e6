"""Serializers for discount codes."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .models import Discount


class DiscountSerializer(serializers.ModelSerializer):
    """Full discount definition, used by administrators."""

    class Meta:
        model = Discount
        fields = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "percentage_value",
            "fixed_amount",
            "valid_from",
            "valid_until",
            "max_usage_count",
            "current_usage_count",
            "max_usage_per_user",
            "min_order_amount",
            "max_discount_amount",
            "is_active",
            "terms_and_conditions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "current_usage_count", "created_at", "updated_at"]
        # Uniqueness is checked by the service layer after normalizing the code
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value: str) -> str:
        return value.strip().upper()


class PublicDiscountSerializer(serializers.ModelSerializer):
    """What guests may see about a currently offered discount."""

    class Meta:
        model = Discount
        fields = [
            "code",
            "name",
            "description",
            "type",
            "percentage_value",
            "fixed_amount",
            "valid_until",
            "min_order_amount",
            "max_discount_amount",
            "terms_and_conditions",
        ]
        read_only_fields = fields


class DiscountValidationSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))
