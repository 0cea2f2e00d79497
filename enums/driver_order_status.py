from enum import Enum


class DriverOrderStatus(str, Enum):
    """
    Driver-facing status of a delivery task.

    Happy path (in order):
        available -> assigned -> on_route_to_vendor -> arrived_at_vendor ->
        picked_up -> on_route_to_customer -> arrived_at_customer -> delivered

    cancelled is reachable from every non-terminal status.
    delivered and cancelled are terminal.
    """
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    ON_ROUTE_TO_VENDOR = "on_route_to_vendor"
    ARRIVED_AT_VENDOR = "arrived_at_vendor"
    PICKED_UP = "picked_up"
    ON_ROUTE_TO_CUSTOMER = "on_route_to_customer"
    ARRIVED_AT_CUSTOMER = "arrived_at_customer"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return DRIVER_ORDER_STATUS_DISPLAY_NAMES[self]

    @property
    def is_terminal(self) -> bool:
        return self in (DriverOrderStatus.DELIVERED, DriverOrderStatus.CANCELLED)


DRIVER_ORDER_STATUS_DISPLAY_NAMES: dict[DriverOrderStatus, str] = {
    DriverOrderStatus.AVAILABLE: "Available",
    DriverOrderStatus.ASSIGNED: "Assigned",
    DriverOrderStatus.ON_ROUTE_TO_VENDOR: "On Route to Vendor",
    DriverOrderStatus.ARRIVED_AT_VENDOR: "Arrived at Vendor",
    DriverOrderStatus.PICKED_UP: "Picked Up",
    DriverOrderStatus.ON_ROUTE_TO_CUSTOMER: "On Route to Customer",
    DriverOrderStatus.ARRIVED_AT_CUSTOMER: "Arrived at Customer",
    DriverOrderStatus.DELIVERED: "Delivered",
    DriverOrderStatus.CANCELLED: "Cancelled",
}
