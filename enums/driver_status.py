from enum import Enum


class DriverStatus(str, Enum):
    """Availability of a driver (drivers.status)."""
    ONLINE = "online"
    OFFLINE = "offline"
    ON_DELIVERY = "on_delivery"
