from shared.domain.exceptions import DomainValidationError, NotFoundError


class CartNotFound(NotFoundError):
    default_code = "cart_not_found"
    default_message = "No active cart found"


class CartItemNotFound(NotFoundError):
    default_code = "cart_item_not_found"
    default_message = "Cart item not found"


class EmptyCart(DomainValidationError):
    default_code = "empty_cart"
    default_message = "Cart is empty"
