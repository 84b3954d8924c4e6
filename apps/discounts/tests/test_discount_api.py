"""API tests for discount administration and validation."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.discounts.models import Discount

User = get_user_model()


class DiscountAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username="admin", password="AdminPass123", is_staff=True)
        self.guest = User.objects.create_user(username="guest", password="GuestPass123")
        self.list_url = reverse("discount-list")

    def test_admin_creates_discount(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"code": "early-bird", "name": "Early bird", "type": "EARLY_BIRD", "percentage_value": "12.50"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["code"], "EARLY-BIRD")
        self.assertTrue(Discount.objects.filter(code="EARLY-BIRD").exists())

    def test_duplicate_code_is_conflict(self) -> None:
        Discount.objects.create(code="DUP", name="Dup", type="PERCENTAGE", percentage_value=Decimal("5"))
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"code": "dup", "name": "Again", "type": "PERCENTAGE", "percentage_value": "5"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_discount_code")

    def test_guest_cannot_manage_discounts(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            self.list_url,
            {"code": "FREE", "name": "Free", "type": "PERCENTAGE", "percentage_value": "100"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_guest_validates_code(self) -> None:
        Discount.objects.create(
            code="SAVE10",
            name="Save",
            type="PERCENTAGE",
            percentage_value=Decimal("10"),
            max_discount_amount=Decimal("20"),
        )
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            reverse("discount-validate"),
            {"code": "save10", "order_amount": "300.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data["discount_amount"])), Decimal("20.00"))
        self.assertEqual(Decimal(str(response.data["final_amount"])), Decimal("280.00"))

    def test_validate_unknown_code_is_not_found(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(
            reverse("discount-validate"),
            {"code": "NOPE", "order_amount": "10"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "discount_not_found")

    def test_guest_lists_active_codes(self) -> None:
        Discount.objects.create(code="LIVE", name="Live", type="PERCENTAGE", percentage_value=Decimal("5"))
        Discount.objects.create(code="OFF", name="Off", type="PERCENTAGE", percentage_value=Decimal("5"), is_active=False)
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("discount-active"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["code"] for item in response.data], ["LIVE"])
