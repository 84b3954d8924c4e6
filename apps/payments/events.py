"""Payment domain events."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentCompleted(DomainEvent):
    transaction_id: str
    owner_id: int
    amount: Decimal
    booking_ids: List[int] = field(default_factory=list)


@dataclass(kw_only=True)
class PaymentFailed(DomainEvent):
    transaction_id: str
    owner_id: int
    status: str
    reason: str = ""
