"""
Delivery Fee Calculation

Delivery fee is a pure function of (delivery method, subtotal). Delivery
methods that need a driver are priced by subtotal thresholds; pickup methods
are always free.

Fee tiers (RM):
    own_fleet:  subtotal >= 200 -> 0,  >= 100 -> 5,  else 10
    lalamove:   subtotal >= 200 -> 0,  >= 100 -> 15, else 20
"""

from enums.delivery_method import DeliveryMethod

# (min_subtotal, fee), highest threshold first
DELIVERY_FEE_TIERS: dict[DeliveryMethod, list[tuple[float, float]]] = {
    DeliveryMethod.OWN_FLEET: [(200.0, 0.0), (100.0, 5.0), (0.0, 10.0)],
    DeliveryMethod.LALAMOVE: [(200.0, 0.0), (100.0, 15.0), (0.0, 20.0)],
}


def calculate_delivery_fee(method: DeliveryMethod, subtotal: float) -> float:
    """
    Look up the delivery fee for a subtotal.

    Args:
        method: Selected delivery method
        subtotal: Cart subtotal before tax

    Returns:
        Fee in RM; 0.0 for pickup methods

    Example:
        >>> calculate_delivery_fee(DeliveryMethod.OWN_FLEET, 150.0)
        5.0
        >>> calculate_delivery_fee(DeliveryMethod.CUSTOMER_PICKUP, 20.0)
        0.0
    """
    if method.is_pickup:
        return 0.0

    for min_subtotal, fee in DELIVERY_FEE_TIERS[method]:
        if subtotal >= min_subtotal:
            return fee
    # Negative subtotals cannot come out of a cart, fall back to the top fee
    return DELIVERY_FEE_TIERS[method][-1][1]


def amount_until_free_delivery(method: DeliveryMethod, subtotal: float) -> float | None:
    """
    How much more the customer must add for free delivery.

    Returns:
        Remaining amount, 0.0 if delivery is already free, None for pickup methods
    """
    if method.is_pickup:
        return None
    free_threshold = DELIVERY_FEE_TIERS[method][0][0]
    return max(0.0, free_threshold - subtotal)
