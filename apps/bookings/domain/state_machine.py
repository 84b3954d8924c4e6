"""
Booking status state machine

Every allowed move is listed in TRANSITIONS, keyed by (from, to). Each entry
names the transition and the status the booked room takes as a side effect
(None means the room is left alone). Anything not listed is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.rooms.models import Room
from shared.domain.exceptions import ConflictError


class BookingStatus(models.TextChoices):
    PENDING = "PENDING", _("Pending")
    CONFIRMED = "CONFIRMED", _("Confirmed")
    CHECKED_IN = "CHECKED_IN", _("Checked in")
    CHECKED_OUT = "CHECKED_OUT", _("Checked out")
    CANCELLED = "CANCELLED", _("Cancelled")
    NO_SHOW = "NO_SHOW", _("No show")
    REFUNDED = "REFUNDED", _("Refunded")


# Statuses that no longer hold the room's dates
RELEASED_STATUSES = frozenset({BookingStatus.CANCELLED.value, BookingStatus.NO_SHOW.value})

CANCELLABLE_STATUSES = frozenset({BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value})


@dataclass(frozen=True)
class Transition:
    name: str
    room_status: Optional[str] = None


TRANSITIONS: Dict[Tuple[str, str], Transition] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): Transition("confirm"),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): Transition("cancel", Room.Status.AVAILABLE),
    (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN): Transition("check_in", Room.Status.OCCUPIED),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): Transition("cancel", Room.Status.AVAILABLE),
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW): Transition("no_show"),
    (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT): Transition("check_out", Room.Status.CLEANING),
    (BookingStatus.CHECKED_OUT, BookingStatus.REFUNDED): Transition("refund"),
}


class InvalidStatusTransition(ConflictError):
    default_code = "invalid_status_transition"
    default_message = "Booking cannot move to the requested status"


def get_transition(current: str, target: str) -> Optional[Transition]:
    try:
        key = (BookingStatus(current), BookingStatus(target))
    except ValueError:
        return None
    return TRANSITIONS.get(key)


def ensure_transition(current: str, target: str) -> Transition:
    transition = get_transition(current, target)
    if transition is None:
        raise InvalidStatusTransition(f"Cannot change booking status from {current} to {target}")
    return transition


def allowed_targets(current: str) -> list[str]:
    return [target for (source, target) in TRANSITIONS if source == current]
