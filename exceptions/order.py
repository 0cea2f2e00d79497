"""
Order- and driver-related exceptions.
"""

from .base import GigaEatsException


class OrderException(GigaEatsException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderStateException(OrderException):
    """Raised when a driver action is not allowed from the order's current status."""

    def __init__(self, message: str, order_id: str | None = None, current_state: str | None = None):
        super().__init__(
            message,
            details={'order_id': order_id, 'current_state': current_state}
        )
        self.order_id = order_id
        self.current_state = current_state


class OrderStatusUpdateException(OrderException):
    """Raised when the backend rejects an order status update."""

    def __init__(self, order_id: str, reason: str):
        super().__init__(
            f"Failed to update order status: {reason}",
            details={'order_id': order_id, 'reason': reason}
        )
        self.order_id = order_id
        self.reason = reason


class DriverNotAvailableException(OrderException):
    """Raised when a driver cannot take an order in their current status."""

    def __init__(self, driver_id: str, current_state: str | None):
        super().__init__(
            f"Driver must be online to accept orders. Current status: {current_state}",
            details={'driver_id': driver_id, 'current_state': current_state}
        )
        self.driver_id = driver_id
        self.current_state = current_state


class DriverNotFoundException(OrderException):
    """Raised when the user has no driver profile."""

    def __init__(self, user_id: str | None = None, driver_id: str | None = None):
        super().__init__(
            "Driver profile not found",
            details={'user_id': user_id, 'driver_id': driver_id}
        )
        self.user_id = user_id
        self.driver_id = driver_id

