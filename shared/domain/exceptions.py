"""
Domain error taxonomy

Every error raised by a service derives from one of the kinds below. The
API layer maps a kind to an HTTP status; the code attribute is a stable,
machine-readable identifier.
"""


class DomainError(Exception):
    status_code = 400
    default_code = "domain_error"
    default_message = "Domain rule violated"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class DomainValidationError(DomainError):
    status_code = 400
    default_code = "validation_error"
    default_message = "Invalid request"


class NotFoundError(DomainError):
    status_code = 404
    default_code = "not_found"
    default_message = "Not found"


class ConflictError(DomainError):
    status_code = 409
    default_code = "conflict"
    default_message = "Request conflicts with the current state"


class PaymentGatewayError(DomainError):
    """Failure talking to, or trusting, the external payment gateway."""

    status_code = 502
    default_code = "payment_gateway_error"
    default_message = "Payment gateway error"
