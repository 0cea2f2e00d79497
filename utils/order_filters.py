"""
Order Filter Utilities

Maps DriverOrderView enum to lists of OrderStatus for database queries.
"""
from enums.order_filter import DriverOrderView
from enums.order_status import OrderStatus

ACTIVE_ORDER_STATUSES: list[OrderStatus] = [
    OrderStatus.ASSIGNED,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.ON_ROUTE_TO_VENDOR,
    OrderStatus.ARRIVED_AT_VENDOR,
    OrderStatus.PICKED_UP,
    OrderStatus.OUT_FOR_DELIVERY,
]

HISTORY_ORDER_STATUSES: list[OrderStatus] = [
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
]


def get_status_filter_for_view(view: DriverOrderView) -> list[OrderStatus]:
    """
    Converts DriverOrderView to list of OrderStatus values for repository queries.

    Args:
        view: DriverOrderView enum value

    Returns:
        List of OrderStatus to filter by
    """
    if view == DriverOrderView.AVAILABLE:
        return [OrderStatus.READY]

    if view == DriverOrderView.ACTIVE:
        return list(ACTIVE_ORDER_STATUSES)

    if view == DriverOrderView.HISTORY:
        return list(HISTORY_ORDER_STATUSES)

    raise ValueError(f"Unknown driver order view: {view}")
