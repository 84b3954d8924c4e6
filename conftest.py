"""Fixtures shared by the pytest-style tests."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.rooms.models import Room


@pytest.fixture
def guest(db):
    return get_user_model().objects.create_user(
        username="guest",
        email="guest@example.com",
        password="GuestPass123",
        first_name="Sok",
        last_name="Dara",
    )


@pytest.fixture
def other_guest(db):
    return get_user_model().objects.create_user(
        username="other",
        email="other@example.com",
        password="OtherPass123",
    )


@pytest.fixture
def room(db):
    return Room.objects.create(number="101", base_price=Decimal("100.00"), capacity=2)


@pytest.fixture
def second_room(db):
    return Room.objects.create(number="102", base_price=Decimal("80.00"), capacity=3)


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def stay(today):
    """Three nights starting in ten days."""
    check_in = today + timedelta(days=10)
    return check_in, check_in + timedelta(days=3)
