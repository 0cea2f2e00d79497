"""
Delivery Order State Machine for validating driver order status transitions.

This module implements a finite state machine over DriverOrderStatus so that
workflow actions only request transitions the delivery flow allows, and
exposes the coarse workflow step used for progress display.
"""

import logging
from typing import Dict, List, Optional, Set

from enums.driver_order_status import DriverOrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: DriverOrderStatus, to_status: DriverOrderStatus, action: str,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.action = action
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value} ({self.action})"


class OrderStateMachine:
    """
    Finite state machine for driver order status transitions.

    Happy path:
    - AVAILABLE -> ASSIGNED (driver accepts)
    - ASSIGNED -> ON_ROUTE_TO_VENDOR (driver starts navigation to vendor)
    - ON_ROUTE_TO_VENDOR -> ARRIVED_AT_VENDOR (driver marks arrival)
    - ARRIVED_AT_VENDOR -> PICKED_UP (driver confirms pickup)
    - PICKED_UP -> ON_ROUTE_TO_CUSTOMER (driver starts navigation to customer)
    - ON_ROUTE_TO_CUSTOMER -> ARRIVED_AT_CUSTOMER (driver marks arrival)
    - ARRIVED_AT_CUSTOMER -> DELIVERED (driver confirms delivery)

    Shortcuts the workflow screen also offers:
    - ASSIGNED -> ARRIVED_AT_VENDOR (mark arrived without navigation)
    - PICKED_UP / ON_ROUTE_TO_CUSTOMER -> ARRIVED_AT_CUSTOMER, DELIVERED

    CANCELLED is reachable from every non-terminal status.
    DELIVERED and CANCELLED are final.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        OrderStatusTransition(DriverOrderStatus.AVAILABLE, DriverOrderStatus.ASSIGNED,
                              "accept", "Driver accepted the order"),
        OrderStatusTransition(DriverOrderStatus.ASSIGNED, DriverOrderStatus.ON_ROUTE_TO_VENDOR,
                              "start_navigation_to_vendor", "Driver heading to vendor"),
        OrderStatusTransition(DriverOrderStatus.ASSIGNED, DriverOrderStatus.ARRIVED_AT_VENDOR,
                              "mark_arrived_at_vendor", "Driver arrived at vendor"),
        OrderStatusTransition(DriverOrderStatus.ON_ROUTE_TO_VENDOR, DriverOrderStatus.ARRIVED_AT_VENDOR,
                              "mark_arrived_at_vendor", "Driver arrived at vendor"),
        OrderStatusTransition(DriverOrderStatus.ARRIVED_AT_VENDOR, DriverOrderStatus.PICKED_UP,
                              "confirm_pickup", "Driver picked up the order"),
        OrderStatusTransition(DriverOrderStatus.PICKED_UP, DriverOrderStatus.ON_ROUTE_TO_CUSTOMER,
                              "start_navigation_to_customer", "Driver heading to customer"),
        OrderStatusTransition(DriverOrderStatus.PICKED_UP, DriverOrderStatus.ARRIVED_AT_CUSTOMER,
                              "mark_arrived_at_customer", "Driver arrived at customer"),
        OrderStatusTransition(DriverOrderStatus.ON_ROUTE_TO_CUSTOMER, DriverOrderStatus.ARRIVED_AT_CUSTOMER,
                              "mark_arrived_at_customer", "Driver arrived at customer"),
        OrderStatusTransition(DriverOrderStatus.PICKED_UP, DriverOrderStatus.DELIVERED,
                              "confirm_delivery", "Order delivered"),
        OrderStatusTransition(DriverOrderStatus.ON_ROUTE_TO_CUSTOMER, DriverOrderStatus.DELIVERED,
                              "confirm_delivery", "Order delivered"),
        OrderStatusTransition(DriverOrderStatus.ARRIVED_AT_CUSTOMER, DriverOrderStatus.DELIVERED,
                              "confirm_delivery", "Order delivered"),
    ] + [
        OrderStatusTransition(status, DriverOrderStatus.CANCELLED, "cancel", "Delivery cancelled")
        for status in DriverOrderStatus
        if status not in (DriverOrderStatus.DELIVERED, DriverOrderStatus.CANCELLED)
    ]

    FINAL_STATUSES: Set[DriverOrderStatus] = {DriverOrderStatus.DELIVERED, DriverOrderStatus.CANCELLED}

    # Coarse progress shown by the delivery workflow screen
    WORKFLOW_STEPS: Dict[DriverOrderStatus, int] = {
        DriverOrderStatus.ASSIGNED: 0,
        DriverOrderStatus.ON_ROUTE_TO_VENDOR: 0,
        DriverOrderStatus.ARRIVED_AT_VENDOR: 1,
        DriverOrderStatus.PICKED_UP: 2,
        DriverOrderStatus.ON_ROUTE_TO_CUSTOMER: 2,
        DriverOrderStatus.ARRIVED_AT_CUSTOMER: 3,
        DriverOrderStatus.DELIVERED: 4,
    }

    # Build transition map for fast lookup
    _transition_map: Dict[DriverOrderStatus, Set[DriverOrderStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps"""
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: DriverOrderStatus, to_status: DriverOrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Staying in the same status is not a transition and is rejected, since
        every accepted transition costs a backend call.

        Args:
            from_status: Current driver order status
            to_status: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: DriverOrderStatus) -> List[DriverOrderStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda s: list(DriverOrderStatus).index(s))

    @classmethod
    def get_transition_description(cls, from_status: DriverOrderStatus, to_status: DriverOrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: DriverOrderStatus) -> bool:
        """
        Check if a status is final (no transitions allowed from it).

        Args:
            status: Driver order status to check

        Returns:
            True if status is final, False otherwise
        """
        return status in cls.FINAL_STATUSES

    @classmethod
    def get_workflow_step(cls, status: DriverOrderStatus) -> Optional[int]:
        """
        Coarse workflow step (0-4) for progress display.

        Returns:
            Step index, or None for AVAILABLE and CANCELLED
        """
        return cls.WORKFLOW_STEPS.get(status)

    @classmethod
    def validate_and_log_transition(cls, order_id: str, from_status: DriverOrderStatus,
                                    to_status: DriverOrderStatus, driver_id: Optional[str] = None) -> bool:
        """
        Validate a status transition and log it.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current driver order status
            to_status: Desired new status
            driver_id: ID of the driver performing the transition

        Returns:
            True if transition is valid, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        transition_desc = cls.get_transition_description(from_status, to_status)
        performer = f"driver {driver_id}" if driver_id else "system"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}: {transition_desc}")
        return True


def get_next_valid_statuses(current_status: DriverOrderStatus) -> List[DriverOrderStatus]:
    """
    Get all valid next statuses for a driver order.

    Args:
        current_status: Current status of the order

    Returns:
        List of valid next statuses, happy-path order
    """
    return OrderStateMachine.get_valid_transitions(current_status)
