"""
Booking Domain Events

Published through the message bus after the transaction that produced
them commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    booking_id: int
    confirmation_code: str
    owner_id: int
    room_id: int


@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    check_in: date
    check_out: date
    final_price: Decimal


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """Payment settled or staff confirmed the booking."""
    transaction_id: str = ""


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    reason: str = ""


@dataclass(kw_only=True)
class BookingCheckedIn(BookingEvent):
    pass


@dataclass(kw_only=True)
class BookingCheckedOut(BookingEvent):
    pass
