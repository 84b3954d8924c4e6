"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .domain.state_machine import BookingStatus
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    CancelBookingSerializer,
)


def _is_staff(user) -> bool:
    return bool(getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Guests see and manage their own bookings; staff run front-desk transitions."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilterSet

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Booking.objects.select_related("room").prefetch_related("applied_discounts")
        if _is_staff(user):
            return qs
        return qs.filter(owner=user)

    def _owner_scope(self):
        return None if _is_staff(self.request.user) else self.request.user

    def _respond(self, booking: Booking, code: int = status.HTTP_200_OK) -> Response:
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = services.create_booking(
            request.user,
            data["room"],
            data["check_in"],
            data["check_out"],
            data["guests_count"],
            discount_code=data.get("discount_code") or None,
            special_requests=data.get("special_requests", ""),
        )
        return self._respond(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        requested_status = data.get("status")
        if requested_status and requested_status != BookingStatus.CANCELLED and not _is_staff(request.user):
            raise PermissionDenied("Only staff can change a booking to this status.")
        booking = services.update_booking(self._owner_scope(), int(pk), **data)
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_booking(self._owner_scope(), int(pk), serializer.validated_data["reason"])
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-in", permission_classes=[permissions.IsAdminUser])
    def check_in(self, request, pk=None):  # type: ignore
        return self._respond(services.check_in(int(pk)))

    @action(detail=True, methods=["post"], url_path="check-out", permission_classes=[permissions.IsAdminUser])
    def check_out(self, request, pk=None):  # type: ignore
        return self._respond(services.check_out(int(pk)))

    @action(detail=True, methods=["post"], url_path="no-show", permission_classes=[permissions.IsAdminUser])
    def no_show(self, request, pk=None):  # type: ignore
        return self._respond(services.mark_no_show(int(pk)))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def confirm(self, request, pk=None):  # type: ignore
        return self._respond(services.confirm_booking(int(pk)))

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAdminUser])
    def refund(self, request, pk=None):  # type: ignore
        return self._respond(services.refund_booking(int(pk)))

    @action(detail=False, methods=["get"], url_path=r"confirmation/(?P<code>[\w-]+)")
    def by_confirmation(self, request, code=None):  # type: ignore
        booking = services.get_booking_by_confirmation(code, owner=self._owner_scope())
        return self._respond(booking)
