import itertools

import pytest

from apps.bookings.domain.state_machine import (
    TRANSITIONS,
    BookingStatus,
    InvalidStatusTransition,
    allowed_targets,
    ensure_transition,
    get_transition,
)
from apps.rooms.models import Room

ALLOWED = {
    ("PENDING", "CONFIRMED"),
    ("PENDING", "CANCELLED"),
    ("CONFIRMED", "CHECKED_IN"),
    ("CONFIRMED", "CANCELLED"),
    ("CONFIRMED", "NO_SHOW"),
    ("CHECKED_IN", "CHECKED_OUT"),
    ("CHECKED_OUT", "REFUNDED"),
}


@pytest.mark.parametrize("current, target", list(itertools.product(BookingStatus.values, repeat=2)))
def test_every_status_pair(current, target):
    if (current, target) in ALLOWED:
        assert ensure_transition(current, target) is get_transition(current, target)
    else:
        assert get_transition(current, target) is None
        with pytest.raises(InvalidStatusTransition):
            ensure_transition(current, target)


def test_table_lists_exactly_the_allowed_moves():
    assert {(str(a), str(b)) for a, b in TRANSITIONS} == ALLOWED


def test_room_side_effects():
    assert get_transition("PENDING", "CANCELLED").room_status == Room.Status.AVAILABLE
    assert get_transition("CONFIRMED", "CHECKED_IN").room_status == Room.Status.OCCUPIED
    assert get_transition("CHECKED_IN", "CHECKED_OUT").room_status == Room.Status.CLEANING
    assert get_transition("CONFIRMED", "NO_SHOW").room_status is None


def test_terminal_statuses_have_no_targets():
    for status in ("CANCELLED", "NO_SHOW", "REFUNDED"):
        assert allowed_targets(status) == []
    assert set(allowed_targets("CONFIRMED")) == {"CHECKED_IN", "CANCELLED", "NO_SHOW"}


def test_unknown_status_is_rejected():
    assert get_transition("BOGUS", "CONFIRMED") is None
    with pytest.raises(InvalidStatusTransition):
        ensure_transition("PENDING", "BOGUS")
