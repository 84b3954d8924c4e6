from shared.domain.exceptions import NotFoundError


class PaymentNotFound(NotFoundError):
    default_code = "payment_not_found"
    default_message = "Payment not found"
