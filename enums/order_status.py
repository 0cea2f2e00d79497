from enum import Enum


class OrderStatus(str, Enum):
    """
    Backend status of an order row (orders.status).

    Drivers see a finer-grained DriverOrderStatus; the mapping between
    the two lives in repositories/driver_order.py.
    """
    PENDING = "pending"                          # Placed, waiting for vendor
    CONFIRMED = "confirmed"                      # Vendor accepted
    PREPARING = "preparing"                      # Kitchen is preparing
    READY = "ready"                              # Waiting for a driver (own fleet)
    ASSIGNED = "assigned"                        # Driver accepted
    ON_ROUTE_TO_VENDOR = "on_route_to_vendor"
    ARRIVED_AT_VENDOR = "arrived_at_vendor"
    PICKED_UP = "picked_up"
    OUT_FOR_DELIVERY = "out_for_delivery"        # Driver has the food, heading to customer
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


ORDER_STATUS_DISPLAY_NAMES: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready for Pickup",
    OrderStatus.ASSIGNED: "Driver Assigned",
    OrderStatus.ON_ROUTE_TO_VENDOR: "Driver on Route to Vendor",
    OrderStatus.ARRIVED_AT_VENDOR: "Driver at Vendor",
    OrderStatus.PICKED_UP: "Picked Up",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.REFUNDED: "Refunded",
}
