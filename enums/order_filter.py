from enum import IntEnum


class DriverOrderView(IntEnum):
    """
    Which slice of orders a driver screen shows.

    Groups backend order statuses for the driver's lists.
    """
    AVAILABLE = 1                # ready, own_fleet, unassigned
    ACTIVE = 2                   # Assigned to the driver and still in progress
    HISTORY = 3                  # Delivered or cancelled
