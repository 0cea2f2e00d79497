"""
Cart-related exceptions.
"""

from .base import GigaEatsException


class CartException(GigaEatsException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to check out an empty cart."""

    def __init__(self):
        super().__init__("Cart is empty")


class CartItemNotFoundException(CartException):
    """Raised when a cart line is not found."""

    def __init__(self, item_id: str):
        super().__init__(
            f"Cart item {item_id} not found",
            details={'item_id': item_id}
        )
        self.item_id = item_id


class InvalidCartQuantityException(CartException):
    """Raised when a quantity violates a menu item's order bounds."""

    def __init__(self, message: str, product_id: str | None = None, requested: int | None = None,
                 min_quantity: int | None = None, max_quantity: int | None = None):
        super().__init__(
            message,
            details={
                'product_id': product_id,
                'requested': requested,
                'min_quantity': min_quantity,
                'max_quantity': max_quantity,
            }
        )
        self.product_id = product_id
        self.requested = requested
        self.min_quantity = min_quantity
        self.max_quantity = max_quantity
