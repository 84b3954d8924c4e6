from rest_framework import serializers  # type: ignore

from .models import Room


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = [
            "id",
            "number",
            "room_type",
            "floor",
            "description",
            "base_price",
            "capacity",
            "bed_count",
            "size_sqm",
            "status",
            "is_active",
        ]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError("check_out must be after check_in")
        return attrs
