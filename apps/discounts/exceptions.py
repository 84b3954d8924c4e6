"""Errors raised while pricing stays and applying discount codes."""

from shared.domain.exceptions import ConflictError, DomainValidationError, NotFoundError


class InvalidDateRange(DomainValidationError):
    default_code = "invalid_date_range"
    default_message = "Check-out must be after check-in and check-in cannot be in the past"


class DiscountNotFound(NotFoundError):
    default_code = "discount_not_found"
    default_message = "Discount code not found or inactive"


class DiscountExpired(ConflictError):
    default_code = "discount_expired"
    default_message = "Discount code is not valid at this time"


class DiscountExhausted(ConflictError):
    default_code = "discount_exhausted"
    default_message = "Discount code usage limit reached"


class MinimumOrderNotMet(DomainValidationError):
    default_code = "minimum_order_not_met"
    default_message = "Order amount is below the minimum required for this discount"


class InvalidDiscountDefinition(DomainValidationError):
    default_code = "invalid_discount"
    default_message = "Discount definition is invalid"


class DuplicateDiscountCode(ConflictError):
    default_code = "duplicate_discount_code"
    default_message = "Discount code already exists"
