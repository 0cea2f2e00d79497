"""
Driver Order Repository Unit Tests

Tests repositories/driver_order.py against an in-memory database:
- status mapping between driver workflow and orders.status
- available pool, active order and history reads
- accept / reject / status updates and their effect on the driver row
- earnings aggregation

Run with:
    pytest tests/order/unit/test_driver_order_repository.py -v
"""

import pytest
import pytest_asyncio
import sys
import os
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from sqlalchemy import select

from enums.delivery_method import DeliveryMethod
from enums.driver_order_status import DriverOrderStatus
from enums.driver_status import DriverStatus
from enums.order_filter import DriverOrderView
from enums.order_status import OrderStatus
from exceptions.auth import PermissionDeniedException
from exceptions.order import (
    DriverNotAvailableException,
    DriverNotFoundException,
    InvalidOrderStateException,
    OrderNotFoundException
)
from models.driver import Driver, DeliveryTracking
from models.order import Order, DriverOrderRejection
from repositories.driver_order import DriverOrderRepository, map_order_status, map_driver_status


@pytest.fixture
def repository(test_session, driver_auth):
    return DriverOrderRepository(test_session, driver_auth)


@pytest_asyncio.fixture
async def world(make_vendor, make_driver):
    await make_vendor()
    return await make_driver()


async def reload(session, model, row_id):
    result = await session.execute(select(model).where(model.id == row_id).execution_options(populate_existing=True))
    return result.unique().scalar()


class TestStatusMapping:

    def test_driver_to_order(self):
        assert map_driver_status(DriverOrderStatus.ASSIGNED) == OrderStatus.ASSIGNED
        assert map_driver_status(DriverOrderStatus.ON_ROUTE_TO_CUSTOMER) == OrderStatus.OUT_FOR_DELIVERY
        assert map_driver_status(DriverOrderStatus.AVAILABLE) == OrderStatus.READY

    def test_arrived_at_customer_has_no_order_status(self):
        assert map_driver_status(DriverOrderStatus.ARRIVED_AT_CUSTOMER) is None

    def test_order_to_driver(self):
        assert map_order_status(OrderStatus.OUT_FOR_DELIVERY) == DriverOrderStatus.ON_ROUTE_TO_CUSTOMER
        assert map_order_status(OrderStatus.READY) == DriverOrderStatus.AVAILABLE

    def test_unknown_order_status_defaults_to_available(self):
        assert map_order_status(OrderStatus.PENDING) == DriverOrderStatus.AVAILABLE
        assert map_order_status(OrderStatus.REFUNDED) == DriverOrderStatus.AVAILABLE


class TestReads:

    @pytest.mark.asyncio
    async def test_non_driver_is_rejected(self, test_session, customer_auth):
        repository = DriverOrderRepository(test_session, customer_auth)

        with pytest.raises(PermissionDeniedException) as exc_info:
            await repository.get_available_orders()

        assert exc_info.value.message == "Only driver users can view available orders"

    @pytest.mark.asyncio
    async def test_missing_driver_profile(self, repository, make_user):
        await make_user("driver-user-1")

        with pytest.raises(DriverNotFoundException):
            await repository.get_current_driver()

    @pytest.mark.asyncio
    async def test_available_orders_only_ready_own_fleet_unassigned(self, repository, world, make_order):
        await make_order("o-ready")
        await make_order("o-lalamove", delivery_method=DeliveryMethod.LALAMOVE)
        await make_order("o-preparing", status=OrderStatus.PREPARING)

        orders = await repository.get_available_orders()

        assert [order.id for order in orders] == ["o-ready"]
        assert orders[0].status == DriverOrderStatus.AVAILABLE
        assert orders[0].vendor_address == "12 Jalan Bukit Bintang"

    @pytest.mark.asyncio
    async def test_available_orders_hidden_during_active_delivery(self, repository, world, make_order):
        await make_order("o-ready")
        await make_order("o-mine", status=OrderStatus.PICKED_UP, assigned_driver_id=world.id)

        assert await repository.get_available_orders() == []

    @pytest.mark.asyncio
    async def test_active_order_uses_granular_driver_status(self, repository, world, make_order, test_session):
        await make_order("o-mine", status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id=world.id)
        world.current_delivery_status = DriverOrderStatus.ARRIVED_AT_CUSTOMER
        await test_session.flush()

        active = await repository.get_active_order()

        assert active.id == "o-mine"
        assert active.status == DriverOrderStatus.ARRIVED_AT_CUSTOMER

    @pytest.mark.asyncio
    async def test_history_and_views(self, repository, world, make_order):
        await make_order("o-done", status=OrderStatus.DELIVERED, assigned_driver_id=world.id)
        await make_order("o-cancelled", status=OrderStatus.CANCELLED, assigned_driver_id=world.id)
        await make_order("o-active", status=OrderStatus.ASSIGNED, assigned_driver_id=world.id)

        history = await repository.get_order_history()
        active = await repository.get_driver_orders(DriverOrderView.ACTIVE)
        everything = await repository.get_driver_orders()

        assert {order.id for order in history} == {"o-done", "o-cancelled"}
        assert [order.id for order in active] == ["o-active"]
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_order_of_other_driver_is_hidden(self, repository, world, make_driver, make_order):
        other = await make_driver("driver-2", "driver-user-2")
        await make_order("o-other", status=OrderStatus.ASSIGNED, assigned_driver_id=other.id)

        with pytest.raises(OrderNotFoundException):
            await repository.get_order_details("o-other")


class TestAcceptOrder:

    @pytest.mark.asyncio
    async def test_accept_assigns_order_and_driver(self, repository, world, make_order, test_session):
        await make_order("o-1")

        accepted = await repository.accept_order("o-1")

        assert accepted.status == DriverOrderStatus.ASSIGNED
        assert accepted.assigned_at is not None
        order = await reload(test_session, Order, "o-1")
        driver = await reload(test_session, Driver, world.id)
        assert order.status == OrderStatus.ASSIGNED
        assert order.assigned_driver_id == world.id
        assert driver.status == DriverStatus.ON_DELIVERY
        assert driver.current_delivery_status == DriverOrderStatus.ASSIGNED

    @pytest.mark.asyncio
    async def test_offline_driver_cannot_accept(self, repository, make_vendor, make_driver, make_order):
        await make_vendor()
        await make_driver(status=DriverStatus.OFFLINE)
        await make_order("o-1")

        with pytest.raises(DriverNotAvailableException) as exc_info:
            await repository.accept_order("o-1")

        assert exc_info.value.message == "Driver must be online to accept orders. Current status: offline"

    @pytest.mark.asyncio
    async def test_taken_order_cannot_be_accepted(self, repository, world, make_driver, make_order):
        other = await make_driver("driver-2", "driver-user-2")
        await make_order("o-1", assigned_driver_id=other.id)

        with pytest.raises(InvalidOrderStateException):
            await repository.accept_order("o-1")

    @pytest.mark.asyncio
    async def test_non_ready_order_cannot_be_accepted(self, repository, world, make_order):
        await make_order("o-1", status=OrderStatus.PREPARING)

        with pytest.raises(InvalidOrderStateException) as exc_info:
            await repository.accept_order("o-1")

        assert exc_info.value.current_state == "preparing"


class TestRejectOrder:

    @pytest.mark.asyncio
    async def test_reject_returns_order_to_pool(self, repository, world, make_order, test_session):
        await make_order("o-1")
        await repository.accept_order("o-1")

        await repository.reject_order("o-1", "Too far")

        order = await reload(test_session, Order, "o-1")
        driver = await reload(test_session, Driver, world.id)
        rejections = (await test_session.execute(select(DriverOrderRejection))).scalars().all()
        assert order.status == OrderStatus.READY
        assert order.assigned_driver_id is None
        assert driver.status == DriverStatus.ONLINE
        assert driver.current_delivery_status is None
        assert [(r.order_id, r.reason) for r in rejections] == [("o-1", "Too far")]


class TestUpdateOrderStatus:

    @pytest.mark.asyncio
    async def test_pickup_stamps_timestamp(self, repository, world, make_order, test_session):
        await make_order("o-1", status=OrderStatus.ARRIVED_AT_VENDOR, assigned_driver_id=world.id)

        await repository.update_order_status("o-1", DriverOrderStatus.PICKED_UP)

        order = await reload(test_session, Order, "o-1")
        driver = await reload(test_session, Driver, world.id)
        assert order.status == OrderStatus.PICKED_UP
        assert order.picked_up_at is not None
        assert driver.current_delivery_status == DriverOrderStatus.PICKED_UP

    @pytest.mark.asyncio
    async def test_arrived_at_customer_only_touches_driver(self, repository, world, make_order, test_session):
        await make_order("o-1", status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id=world.id)

        await repository.update_order_status("o-1", DriverOrderStatus.ARRIVED_AT_CUSTOMER)

        order = await reload(test_session, Order, "o-1")
        driver = await reload(test_session, Driver, world.id)
        assert order.status == OrderStatus.OUT_FOR_DELIVERY
        assert driver.current_delivery_status == DriverOrderStatus.ARRIVED_AT_CUSTOMER

    @pytest.mark.asyncio
    async def test_delivery_frees_driver(self, repository, world, make_order, test_session):
        await make_order("o-1", status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id=world.id)

        await repository.update_order_status("o-1", DriverOrderStatus.DELIVERED)

        order = await reload(test_session, Order, "o-1")
        driver = await reload(test_session, Driver, world.id)
        assert order.status == OrderStatus.DELIVERED
        assert order.delivered_at is not None
        assert driver.status == DriverStatus.ONLINE
        assert driver.current_delivery_status is None

    @pytest.mark.asyncio
    async def test_unassigned_order_is_not_found(self, repository, world, make_order):
        await make_order("o-1")

        with pytest.raises(OrderNotFoundException):
            await repository.update_order_status("o-1", DriverOrderStatus.PICKED_UP)


class TestDriverRow:

    @pytest.mark.asyncio
    async def test_location_update_records_breadcrumb(self, repository, world, make_order, test_session):
        await make_order("o-1", status=OrderStatus.PICKED_UP, assigned_driver_id=world.id)

        await repository.update_driver_location("o-1", 3.139, 101.6869, speed=32.5)

        driver = await reload(test_session, Driver, world.id)
        tracking = (await test_session.execute(select(DeliveryTracking))).scalars().all()
        assert driver.last_latitude == 3.139
        assert len(tracking) == 1
        assert tracking[0].speed == 32.5

    @pytest.mark.asyncio
    async def test_driver_status_update(self, repository, world, test_session):
        await repository.update_driver_status(DriverStatus.OFFLINE)

        driver = await reload(test_session, Driver, world.id)
        assert driver.status == DriverStatus.OFFLINE


class TestEarnings:

    @pytest.mark.asyncio
    async def test_sums_delivered_fees_in_range(self, repository, world, make_order):
        await make_order("o-1", status=OrderStatus.DELIVERED, assigned_driver_id=world.id,
                         delivery_fee=5.0, delivered_at=datetime(2026, 3, 1, 12, 0))
        await make_order("o-2", status=OrderStatus.DELIVERED, assigned_driver_id=world.id,
                         delivery_fee=10.0, delivered_at=datetime(2026, 3, 2, 12, 0))
        await make_order("o-3", status=OrderStatus.DELIVERED, assigned_driver_id=world.id,
                         delivery_fee=20.0, delivered_at=datetime(2026, 4, 1, 12, 0))
        await make_order("o-4", status=OrderStatus.CANCELLED, assigned_driver_id=world.id, delivery_fee=7.0)

        earnings = await repository.get_driver_earnings(datetime(2026, 3, 1), datetime(2026, 3, 31))

        assert earnings.total_earnings == 15.0
        assert earnings.total_deliveries == 2
        assert earnings.average_per_delivery == 7.5

    @pytest.mark.asyncio
    async def test_no_deliveries(self, repository, world):
        earnings = await repository.get_driver_earnings()

        assert earnings.total_earnings == 0.0
        assert earnings.average_per_delivery == 0.0
