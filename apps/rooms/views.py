from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.availability import has_conflict

from .models import Room
from .serializers import AvailabilityQuerySerializer, RoomSerializer


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = RoomSerializer
    permission_classes = [permissions.AllowAny]
    filterset_fields = ["room_type", "status", "capacity"]

    def get_queryset(self):
        return Room.objects.filter(is_active=True)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        room = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        check_in = query.validated_data["check_in"]
        check_out = query.validated_data["check_out"]
        available = room.is_bookable and not has_conflict(room.pk, check_in, check_out)
        return Response(
            {
                "room": room.pk,
                "check_in": check_in,
                "check_out": check_out,
                "available": available,
            }
        )
