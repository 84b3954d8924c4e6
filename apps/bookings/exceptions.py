"""Errors raised by the booking lifecycle and the availability index."""

from shared.domain.exceptions import ConflictError, DomainValidationError, NotFoundError

from .domain.state_machine import InvalidStatusTransition  # noqa: F401


class RoomNotFound(NotFoundError):
    default_code = "room_not_found"
    default_message = "Room not found"


class BookingNotFound(NotFoundError):
    default_code = "booking_not_found"
    default_message = "Booking not found"


class RoomUnavailable(ConflictError):
    default_code = "room_unavailable"
    default_message = "Room is not available for the selected dates"


class RoomNoLongerAvailable(ConflictError):
    default_code = "room_no_longer_available"
    default_message = "Room is no longer available for the selected dates"


class CapacityExceeded(DomainValidationError):
    default_code = "capacity_exceeded"
    default_message = "Number of guests exceeds room capacity"
