"""API tests for the guest's cart."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.carts.models import Cart
from apps.discounts.models import Discount
from apps.rooms.models import Room

User = get_user_model()


class CartAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(
            username="guest",
            password="GuestPass123",
            email="guest@example.com",
            first_name="Sok",
            last_name="Dara",
        )
        self.room = Room.objects.create(number="301", base_price=Decimal("100.00"), capacity=2)
        self.check_in = timezone.localdate() + timedelta(days=5)
        self.check_out = self.check_in + timedelta(days=3)
        self.client.force_authenticate(self.guest)

    def _add_room(self):
        return self.client.post(
            reverse("cart-items"),
            {
                "room_id": self.room.pk,
                "check_in": self.check_in.isoformat(),
                "check_out": self.check_out.isoformat(),
                "guests_count": 1,
            },
            format="json",
        )

    def test_empty_cart_is_created_on_first_view(self) -> None:
        response = self.client.get(reverse("cart-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "ACTIVE")
        self.assertEqual(response.data["items"], [])
        self.assertEqual(Cart.objects.filter(owner=self.guest).count(), 1)

    def test_add_and_remove_item(self) -> None:
        added = self._add_room()

        self.assertEqual(added.status_code, status.HTTP_201_CREATED, added.data)
        self.assertEqual(added.data["item_count"], 1)
        self.assertEqual(Decimal(added.data["total_price"]), Decimal("300.00"))

        item_id = added.data["items"][0]["id"]
        removed = self.client.delete(reverse("cart-remove-item", args=[item_id]))

        self.assertEqual(removed.status_code, status.HTTP_200_OK)
        self.assertEqual(removed.data["item_count"], 0)

    def test_unknown_room_is_not_found(self) -> None:
        response = self.client.post(
            reverse("cart-items"),
            {"room_id": 9999, "check_in": self.check_in.isoformat(), "check_out": self.check_out.isoformat()},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "room_not_found")

    def test_apply_and_remove_discount(self) -> None:
        Discount.objects.create(code="TENOFF", name="Ten off", type="FIXED_AMOUNT", fixed_amount=Decimal("10"))
        self._add_room()

        applied = self.client.post(reverse("cart-discount"), {"code": "tenoff"}, format="json")
        removed = self.client.delete(reverse("cart-discount"))

        self.assertEqual(applied.status_code, status.HTTP_200_OK)
        self.assertEqual(applied.data["applied_discount_code"], "TENOFF")
        self.assertEqual(Decimal(applied.data["total_price"]), Decimal("290.00"))
        self.assertEqual(removed.data["applied_discount_code"], "")
        self.assertEqual(Decimal(removed.data["total_price"]), Decimal("300.00"))

    def test_discount_on_empty_cart_is_rejected(self) -> None:
        Discount.objects.create(code="TENOFF", name="Ten off", type="FIXED_AMOUNT", fixed_amount=Decimal("10"))
        self.client.get(reverse("cart-list"))

        response = self.client.post(reverse("cart-discount"), {"code": "TENOFF"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "empty_cart")

    def test_clear(self) -> None:
        self._add_room()

        response = self.client.delete(reverse("cart-clear"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["items"], [])

    def test_checkout_returns_signed_form(self) -> None:
        self._add_room()

        response = self.client.post(reverse("cart-checkout"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["total_amount"], "300.00")
        self.assertEqual(response.data["currency"], "USD")
        self.assertIn("hash", response.data["form_fields"])
        self.assertEqual(
            Cart.objects.get(transaction_id=response.data["transaction_id"]).status,
            Cart.Status.CHECKOUT_PENDING,
        )

    def test_checkout_without_active_cart(self) -> None:
        response = self.client.post(reverse("cart-checkout"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "cart_not_found")
