"""API tests for guest bookings and front-desk actions."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services
from apps.bookings.models import Booking
from apps.rooms.models import Room

User = get_user_model()


class BookingAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(username="guest", password="GuestPass123", email="guest@example.com")
        self.other = User.objects.create_user(username="other", password="OtherPass123")
        self.staff = User.objects.create_user(username="desk", password="DeskPass123", is_staff=True)
        self.room = Room.objects.create(number="201", base_price=Decimal("120.00"), capacity=2)
        self.check_in = timezone.localdate() + timedelta(days=7)
        self.check_out = self.check_in + timedelta(days=2)

    def _book(self, owner=None) -> Booking:
        return services.create_booking(owner or self.guest, self.room.pk, self.check_in, self.check_out)

    def test_guest_creates_booking(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            reverse("booking-list"),
            {
                "room": self.room.pk,
                "check_in": self.check_in.isoformat(),
                "check_out": self.check_out.isoformat(),
                "guests_count": 2,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "PENDING")
        self.assertEqual(Decimal(response.data["final_price"]), Decimal("240.00"))
        self.assertEqual(response.data["nights"], 2)

    def test_inverted_dates_are_rejected(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            reverse("booking-list"),
            {"room": self.room.pk, "check_in": self.check_out.isoformat(), "check_out": self.check_in.isoformat()},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_overlap_is_conflict(self) -> None:
        self._book()
        Room.objects.filter(pk=self.room.pk).update(status=Room.Status.AVAILABLE)
        self.client.force_authenticate(self.other)

        response = self.client.post(
            reverse("booking-list"),
            {"room": self.room.pk, "check_in": self.check_in.isoformat(), "check_out": self.check_out.isoformat()},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "room_unavailable")

    def test_guest_only_sees_own_bookings(self) -> None:
        own = self._book()
        self.client.force_authenticate(self.other)

        listing = self.client.get(reverse("booking-list"))
        detail = self.client.get(reverse("booking-detail", args=[own.pk]))

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data, [])
        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)

    def test_guest_cancels_booking(self) -> None:
        booking = self._book()
        self.client.force_authenticate(self.guest)

        response = self.client.post(reverse("booking-cancel", args=[booking.pk]), {"reason": "Change of plans"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "CANCELLED")
        self.assertEqual(response.data["cancellation_reason"], "Change of plans")

    def test_cancelling_twice_is_conflict(self) -> None:
        booking = self._book()
        services.cancel_booking(self.guest, booking.pk)
        self.client.force_authenticate(self.guest)

        response = self.client.post(reverse("booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "invalid_status_transition")

    def test_guest_cannot_check_in(self) -> None:
        booking = self._book()
        services.confirm_booking(booking.pk)
        self.client.force_authenticate(self.guest)

        response = self.client.post(reverse("booking-check-in", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_checks_in_confirmed_booking(self) -> None:
        booking = self._book()
        services.confirm_booking(booking.pk)
        self.client.force_authenticate(self.staff)

        response = self.client.post(reverse("booking-check-in", args=[booking.pk]))

        self.room.refresh_from_db()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "CHECKED_IN")
        self.assertEqual(self.room.status, Room.Status.OCCUPIED)

    def test_guest_may_only_patch_to_cancelled(self) -> None:
        booking = self._book()
        self.client.force_authenticate(self.guest)

        forbidden = self.client.patch(reverse("booking-detail", args=[booking.pk]), {"status": "CONFIRMED"}, format="json")
        allowed = self.client.patch(reverse("booking-detail", args=[booking.pk]), {"status": "CANCELLED"}, format="json")

        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertEqual(allowed.data["status"], "CANCELLED")

    def test_lookup_by_confirmation_code(self) -> None:
        booking = self._book()
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("booking-by-confirmation", args=[booking.confirmation_code]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], booking.pk)

    def test_anonymous_is_rejected(self) -> None:
        response = self.client.get(reverse("booking-list"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
