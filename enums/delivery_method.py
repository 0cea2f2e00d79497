from enum import Enum


class DeliveryMethod(str, Enum):
    """
    How an order reaches the customer.

    Pickup methods never carry a delivery fee; own_fleet and lalamove are
    priced by subtotal tiers (see services/delivery_fee.py).
    """
    CUSTOMER_PICKUP = "customer_pickup"
    SALES_AGENT_PICKUP = "sales_agent_pickup"
    OWN_FLEET = "own_fleet"
    LALAMOVE = "lalamove"

    @property
    def is_pickup(self) -> bool:
        return self in (DeliveryMethod.CUSTOMER_PICKUP, DeliveryMethod.SALES_AGENT_PICKUP)

    @property
    def requires_driver(self) -> bool:
        return not self.is_pickup


DELIVERY_METHOD_DISPLAY_NAMES: dict[DeliveryMethod, str] = {
    DeliveryMethod.CUSTOMER_PICKUP: "Customer Pickup",
    DeliveryMethod.SALES_AGENT_PICKUP: "Sales Agent Pickup",
    DeliveryMethod.OWN_FLEET: "Own Fleet Delivery",
    DeliveryMethod.LALAMOVE: "Lalamove Delivery",
}
