"""
Driver Order State Machine Unit Tests

Tests utils/order_state_machine.py:
- happy path transitions
- cancellation from every non-terminal status
- terminal statuses have no outgoing transitions
- workflow step mapping

Run with:
    pytest tests/order/unit/test_order_state_machine.py -v
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from enums.driver_order_status import DriverOrderStatus
from utils.order_state_machine import OrderStateMachine, get_next_valid_statuses

HAPPY_PATH = [
    DriverOrderStatus.AVAILABLE,
    DriverOrderStatus.ASSIGNED,
    DriverOrderStatus.ON_ROUTE_TO_VENDOR,
    DriverOrderStatus.ARRIVED_AT_VENDOR,
    DriverOrderStatus.PICKED_UP,
    DriverOrderStatus.ON_ROUTE_TO_CUSTOMER,
    DriverOrderStatus.ARRIVED_AT_CUSTOMER,
    DriverOrderStatus.DELIVERED,
]

NON_TERMINAL = [status for status in DriverOrderStatus if not status.is_terminal]


class TestTransitions:

    @pytest.mark.parametrize("from_status,to_status", list(zip(HAPPY_PATH, HAPPY_PATH[1:])))
    def test_happy_path(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status)

    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_cancel_from_non_terminal(self, status):
        assert OrderStateMachine.is_valid_transition(status, DriverOrderStatus.CANCELLED)

    @pytest.mark.parametrize("terminal", [DriverOrderStatus.DELIVERED, DriverOrderStatus.CANCELLED])
    def test_terminal_has_no_transitions(self, terminal):
        assert get_next_valid_statuses(terminal) == []
        assert OrderStateMachine.is_final_status(terminal)

    def test_same_status_is_not_a_transition(self):
        assert not OrderStateMachine.is_valid_transition(DriverOrderStatus.PICKED_UP, DriverOrderStatus.PICKED_UP)

    def test_backwards_rejected(self):
        assert not OrderStateMachine.is_valid_transition(
            DriverOrderStatus.PICKED_UP, DriverOrderStatus.ARRIVED_AT_VENDOR
        )

    def test_pickup_cannot_be_skipped(self):
        assert not OrderStateMachine.is_valid_transition(
            DriverOrderStatus.ARRIVED_AT_VENDOR, DriverOrderStatus.DELIVERED
        )

    def test_next_statuses_in_happy_path_order(self):
        assert get_next_valid_statuses(DriverOrderStatus.PICKED_UP) == [
            DriverOrderStatus.ON_ROUTE_TO_CUSTOMER,
            DriverOrderStatus.ARRIVED_AT_CUSTOMER,
            DriverOrderStatus.DELIVERED,
            DriverOrderStatus.CANCELLED,
        ]

    def test_validate_and_log_rejects_invalid(self, caplog):
        assert not OrderStateMachine.validate_and_log_transition(
            "order-1", DriverOrderStatus.DELIVERED, DriverOrderStatus.PICKED_UP
        )
        assert "Invalid status transition for order order-1" in caplog.text


class TestWorkflowSteps:

    @pytest.mark.parametrize("status,step", [
        (DriverOrderStatus.ASSIGNED, 0),
        (DriverOrderStatus.ON_ROUTE_TO_VENDOR, 0),
        (DriverOrderStatus.ARRIVED_AT_VENDOR, 1),
        (DriverOrderStatus.PICKED_UP, 2),
        (DriverOrderStatus.ON_ROUTE_TO_CUSTOMER, 2),
        (DriverOrderStatus.ARRIVED_AT_CUSTOMER, 3),
        (DriverOrderStatus.DELIVERED, 4),
    ])
    def test_step(self, status, step):
        assert OrderStateMachine.get_workflow_step(status) == step

    def test_available_and_cancelled_have_no_step(self):
        assert OrderStateMachine.get_workflow_step(DriverOrderStatus.AVAILABLE) is None
        assert OrderStateMachine.get_workflow_step(DriverOrderStatus.CANCELLED) is None
