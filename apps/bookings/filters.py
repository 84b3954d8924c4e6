"""FilterSet for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    room = django_filters.NumberFilter(field_name="room_id")
    check_in_from = django_filters.DateFilter(field_name="check_in", lookup_expr="gte")
    check_in_to = django_filters.DateFilter(field_name="check_in", lookup_expr="lte")
    transaction_id = django_filters.CharFilter(field_name="transaction_id", lookup_expr="exact")

    class Meta:
        model = Booking
        fields = ["status", "room", "transaction_id"]
