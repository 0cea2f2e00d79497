import logging
from datetime import datetime

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.delivery_method import DeliveryMethod
from enums.driver_order_status import DriverOrderStatus
from enums.driver_status import DriverStatus
from enums.order_filter import DriverOrderView
from enums.order_status import OrderStatus
from exceptions.auth import PermissionDeniedException
from exceptions.order import (
    OrderNotFoundException,
    InvalidOrderStateException,
    DriverNotAvailableException,
    DriverNotFoundException
)
from models.auth_session import AuthSession
from models.base import utcnow
from models.driver import Driver, DeliveryTracking, DriverDTO, DriverEarningsDTO
from models.order import Order, DriverOrderRejection, DriverOrderDTO
from utils.order_filters import get_status_filter_for_view, ACTIVE_ORDER_STATUSES, HISTORY_ORDER_STATUSES
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)

# Driver workflow status -> orders.status
DRIVER_TO_ORDER_STATUS: dict[DriverOrderStatus, OrderStatus] = {
    DriverOrderStatus.AVAILABLE: OrderStatus.READY,
    DriverOrderStatus.ASSIGNED: OrderStatus.ASSIGNED,
    DriverOrderStatus.ON_ROUTE_TO_VENDOR: OrderStatus.ON_ROUTE_TO_VENDOR,
    DriverOrderStatus.ARRIVED_AT_VENDOR: OrderStatus.ARRIVED_AT_VENDOR,
    DriverOrderStatus.PICKED_UP: OrderStatus.PICKED_UP,
    DriverOrderStatus.ON_ROUTE_TO_CUSTOMER: OrderStatus.OUT_FOR_DELIVERY,
    DriverOrderStatus.DELIVERED: OrderStatus.DELIVERED,
    DriverOrderStatus.CANCELLED: OrderStatus.CANCELLED,
}

# orders.status -> driver workflow status
ORDER_TO_DRIVER_STATUS: dict[OrderStatus, DriverOrderStatus] = {
    OrderStatus.READY: DriverOrderStatus.AVAILABLE,
    OrderStatus.ASSIGNED: DriverOrderStatus.ASSIGNED,
    OrderStatus.CONFIRMED: DriverOrderStatus.ASSIGNED,
    OrderStatus.PREPARING: DriverOrderStatus.ASSIGNED,
    OrderStatus.ON_ROUTE_TO_VENDOR: DriverOrderStatus.ON_ROUTE_TO_VENDOR,
    OrderStatus.ARRIVED_AT_VENDOR: DriverOrderStatus.ARRIVED_AT_VENDOR,
    OrderStatus.PICKED_UP: DriverOrderStatus.PICKED_UP,
    OrderStatus.OUT_FOR_DELIVERY: DriverOrderStatus.ON_ROUTE_TO_CUSTOMER,
    OrderStatus.DELIVERED: DriverOrderStatus.DELIVERED,
    OrderStatus.CANCELLED: DriverOrderStatus.CANCELLED,
}


def map_order_status(status: OrderStatus) -> DriverOrderStatus:
    return ORDER_TO_DRIVER_STATUS.get(status, DriverOrderStatus.AVAILABLE)


def map_driver_status(status: DriverOrderStatus) -> OrderStatus | None:
    """orders.status for a driver status; None for arrived_at_customer, which only the driver row tracks."""
    return DRIVER_TO_ORDER_STATUS.get(status)


class DriverOrderRepository:
    """
    Delivery orders as seen by the authenticated driver.

    Writes are flushed, never committed; the caller owns the transaction.
    """

    DEFAULT_HISTORY_LIMIT = 20

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    def _require_driver(self, action: str) -> None:
        if not self.auth.is_driver:
            role = self.auth.role.value if self.auth.role else None
            logger.warning(f"User {self.auth.user_id} with role {role} tried to {action}")
            raise PermissionDeniedException(action, role, "driver")

    async def _get_driver_row(self) -> Driver:
        stmt = (select(Driver)
                .where(Driver.user_id == self.auth.user_id)
                .execution_options(populate_existing=True))
        driver = await session_execute(stmt, self.session)
        driver = driver.scalar()
        if driver is None:
            raise DriverNotFoundException(user_id=self.auth.user_id)
        return driver

    async def _get_order_row(self, order_id: str) -> Order:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = await session_execute(stmt, self.session)
        order = order.unique().scalar()
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    @staticmethod
    def _effective_status(order: Order, driver: Driver | None) -> DriverOrderStatus:
        """
        The driver's granular status wins for the driver's own in-flight order;
        everything else is derived from orders.status.
        """
        if (driver is not None
                and order.assigned_driver_id == driver.id
                and order.status not in HISTORY_ORDER_STATUSES
                and driver.current_delivery_status is not None):
            return driver.current_delivery_status
        return map_order_status(order.status)

    @staticmethod
    def _to_driver_order(order: Order, status: DriverOrderStatus) -> DriverOrderDTO:
        return DriverOrderDTO(
            id=order.id,
            order_number=order.order_number,
            vendor_name=order.vendor_name,
            vendor_address=order.vendor.business_address if order.vendor else None,
            customer_name=order.customer_name,
            customer_phone=order.contact_phone,
            delivery_address=order.delivery_address,
            total_amount=order.total_amount,
            delivery_fee=order.delivery_fee,
            special_instructions=order.special_instructions,
            status=status,
            estimated_delivery_time=order.estimated_delivery_time,
            created_at=order.created_at,
            assigned_at=order.assigned_at,
            picked_up_at=order.picked_up_at,
            delivered_at=order.delivered_at
        )

    async def _fetch_orders(self, stmt, driver: Driver | None) -> list[DriverOrderDTO]:
        orders = await session_execute(stmt.execution_options(populate_existing=True), self.session)
        return [self._to_driver_order(order, self._effective_status(order, driver))
                for order in orders.unique().scalars().all()]

    @TransactionManager.backend_call("get_current_driver")
    async def get_current_driver(self) -> DriverDTO:
        self._require_driver("view driver profile")
        driver = await self._get_driver_row()
        return DriverDTO.model_validate(driver, from_attributes=True)

    @TransactionManager.backend_call("get_active_order")
    async def get_active_order(self) -> DriverOrderDTO | None:
        self._require_driver("view orders")
        driver = await self._get_driver_row()
        stmt = (select(Order)
                .where(Order.assigned_driver_id == driver.id,
                       Order.status.in_(ACTIVE_ORDER_STATUSES))
                .order_by(Order.assigned_at.desc())
                .limit(1))
        orders = await self._fetch_orders(stmt, driver)
        return orders[0] if orders else None

    @TransactionManager.backend_call("get_available_orders")
    async def get_available_orders(self) -> list[DriverOrderDTO]:
        """
        Orders waiting for an own-fleet driver, oldest first.

        Empty while the driver still has an active delivery.
        """
        self._require_driver("view available orders")
        if await self.get_active_order() is not None:
            logger.info(f"Driver {self.auth.user_id} has an active order, hiding available orders")
            return []
        stmt = (select(Order)
                .where(Order.status == OrderStatus.READY,
                       Order.delivery_method == DeliveryMethod.OWN_FLEET,
                       Order.assigned_driver_id.is_(None))
                .order_by(Order.created_at.asc()))
        return await self._fetch_orders(stmt, None)

    @TransactionManager.backend_call("get_driver_orders")
    async def get_driver_orders(self, view: DriverOrderView | None = None) -> list[DriverOrderDTO]:
        """Orders assigned to the driver, newest first, optionally narrowed to a view."""
        self._require_driver("view orders")
        driver = await self._get_driver_row()
        conditions = [Order.assigned_driver_id == driver.id]
        if view is not None and view != DriverOrderView.AVAILABLE:
            conditions.append(Order.status.in_(get_status_filter_for_view(view)))
        stmt = select(Order).where(*conditions).order_by(Order.created_at.desc())
        return await self._fetch_orders(stmt, driver)

    @TransactionManager.backend_call("get_order_history")
    async def get_order_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[DriverOrderDTO]:
        self._require_driver("view order history")
        driver = await self._get_driver_row()
        stmt = (select(Order)
                .where(Order.assigned_driver_id == driver.id,
                       Order.status.in_(HISTORY_ORDER_STATUSES))
                .order_by(Order.created_at.desc())
                .limit(limit))
        return await self._fetch_orders(stmt, driver)

    @TransactionManager.backend_call("get_order_details")
    async def get_order_details(self, order_id: str) -> DriverOrderDTO:
        """
        A single order the driver may see: their own, or one still in the pool.

        Raises:
            OrderNotFoundException: unknown order or assigned to another driver
        """
        self._require_driver("view orders")
        driver = await self._get_driver_row()
        order = await self._get_order_row(order_id)
        if order.assigned_driver_id not in (None, driver.id):
            raise OrderNotFoundException(order_id)
        return self._to_driver_order(order, self._effective_status(order, driver))

    @TransactionManager.backend_call("accept_order")
    async def accept_order(self, order_id: str) -> DriverOrderDTO:
        """
        Claim a ready own-fleet order.

        The update is conditional on the order still being ready and
        unassigned, so two drivers racing for the same order cannot both win.

        Raises:
            DriverNotAvailableException: driver is inactive or not online
            InvalidOrderStateException: order is not ready, not own-fleet or already taken
        """
        self._require_driver("accept orders")
        driver = await self._get_driver_row()
        if not driver.is_active or driver.status != DriverStatus.ONLINE:
            state = driver.status.value if driver.is_active else "inactive"
            raise DriverNotAvailableException(driver.id, state)

        order = await self._get_order_row(order_id)
        if order.status != OrderStatus.READY:
            raise InvalidOrderStateException(
                f"Order is not available for pickup. Current status: {order.status.value}",
                order_id, order.status.value
            )
        if order.delivery_method != DeliveryMethod.OWN_FLEET:
            raise InvalidOrderStateException(
                "Order is not assigned to the own fleet", order_id, order.status.value
            )
        if order.assigned_driver_id is not None:
            raise InvalidOrderStateException(
                "Order has already been assigned to another driver", order_id, order.status.value
            )

        now = utcnow()
        stmt = (update(Order)
                .where(Order.id == order_id,
                       Order.status == OrderStatus.READY,
                       Order.assigned_driver_id.is_(None))
                .values(status=OrderStatus.ASSIGNED, assigned_driver_id=driver.id,
                        assigned_at=now, updated_at=now))
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise InvalidOrderStateException(
                "Order has already been assigned to another driver", order_id, OrderStatus.READY.value
            )

        stmt = (update(Driver)
                .where(Driver.id == driver.id)
                .values(status=DriverStatus.ON_DELIVERY,
                        current_delivery_status=DriverOrderStatus.ASSIGNED,
                        last_seen=now, updated_at=now))
        await session_execute(stmt, self.session)
        await session_flush(self.session)
        logger.info(f"Driver {driver.id} accepted order {order_id}")

        driver = await self._get_driver_row()
        order = await self._get_order_row(order_id)
        return self._to_driver_order(order, self._effective_status(order, driver))

    @TransactionManager.backend_call("reject_order")
    async def reject_order(self, order_id: str, reason: str = "Driver declined") -> None:
        """Record a rejection and hand the order back to the pool."""
        self._require_driver("reject orders")
        driver = await self._get_driver_row()
        await self._get_order_row(order_id)

        self.session.add(DriverOrderRejection(driver_id=driver.id, order_id=order_id, reason=reason))

        now = utcnow()
        stmt = (update(Order)
                .where(Order.id == order_id, Order.assigned_driver_id == driver.id)
                .values(status=OrderStatus.READY, assigned_driver_id=None, assigned_at=None,
                        out_for_delivery_at=None, updated_at=now))
        await session_execute(stmt, self.session)

        stmt = (update(Driver)
                .where(Driver.id == driver.id, Driver.status == DriverStatus.ON_DELIVERY)
                .values(status=DriverStatus.ONLINE, current_delivery_status=None, updated_at=now))
        await session_execute(stmt, self.session)
        await session_flush(self.session)
        logger.info(f"Driver {driver.id} rejected order {order_id}: {reason}")

    @TransactionManager.backend_call("update_order_status")
    async def update_order_status(self, order_id: str, new_status: DriverOrderStatus) -> None:
        """
        Persist a driver workflow status.

        orders.status receives the mapped backend status and the matching
        timestamp; arrived_at_customer has no backend order status and only
        updates the driver row. A terminal status frees the driver.
        """
        self._require_driver("update order status")
        driver = await self._get_driver_row()
        order = await self._get_order_row(order_id)
        if order.assigned_driver_id != driver.id:
            raise OrderNotFoundException(order_id)

        now = utcnow()
        order_status = map_driver_status(new_status)
        if order_status is not None:
            values = {"status": order_status, "updated_at": now, "last_modified_by": self.auth.user_id}
            if new_status == DriverOrderStatus.PICKED_UP:
                values["picked_up_at"] = now
            elif new_status == DriverOrderStatus.ON_ROUTE_TO_CUSTOMER:
                values["out_for_delivery_at"] = now
            elif new_status == DriverOrderStatus.DELIVERED:
                values["delivered_at"] = now
            stmt = update(Order).where(Order.id == order_id).values(**values)
            await session_execute(stmt, self.session)

        if new_status.is_terminal:
            driver_values = {"current_delivery_status": None, "status": DriverStatus.ONLINE}
        else:
            driver_values = {"current_delivery_status": new_status}
        stmt = (update(Driver)
                .where(Driver.id == driver.id)
                .values(last_seen=now, updated_at=now, **driver_values))
        await session_execute(stmt, self.session)
        await session_flush(self.session)
        logger.info(f"Order {order_id} driver status -> {new_status.value} "
                    f"(order status {order_status.value if order_status else 'unchanged'})")

    @TransactionManager.backend_call("update_driver_status")
    async def update_driver_status(self, status: DriverStatus) -> None:
        self._require_driver("update driver status")
        driver = await self._get_driver_row()
        now = utcnow()
        stmt = update(Driver).where(Driver.id == driver.id).values(status=status, last_seen=now, updated_at=now)
        await session_execute(stmt, self.session)
        await session_flush(self.session)
        logger.info(f"Driver {driver.id} status -> {status.value}")

    @TransactionManager.backend_call("update_driver_location")
    async def update_driver_location(self, order_id: str, latitude: float, longitude: float,
                                     speed: float | None = None, heading: float | None = None,
                                     accuracy: float | None = None) -> None:
        self._require_driver("update location")
        driver = await self._get_driver_row()
        now = utcnow()
        self.session.add(DeliveryTracking(
            order_id=order_id,
            driver_id=driver.id,
            latitude=latitude,
            longitude=longitude,
            speed=speed,
            heading=heading,
            accuracy=accuracy,
            recorded_at=now
        ))
        stmt = (update(Driver)
                .where(Driver.id == driver.id)
                .values(last_latitude=latitude, last_longitude=longitude, last_seen=now))
        await session_execute(stmt, self.session)
        await session_flush(self.session)
        logger.debug(f"Driver {driver.id} location for order {order_id}: {latitude}, {longitude}")

    @TransactionManager.backend_call("get_driver_earnings")
    async def get_driver_earnings(self, start_date: datetime | None = None,
                                  end_date: datetime | None = None) -> DriverEarningsDTO:
        """Delivery fees earned on delivered orders, optionally within [start_date, end_date]."""
        self._require_driver("view earnings")
        driver = await self._get_driver_row()
        conditions = [Order.assigned_driver_id == driver.id, Order.status == OrderStatus.DELIVERED]
        if start_date is not None:
            conditions.append(Order.delivered_at >= start_date)
        if end_date is not None:
            conditions.append(Order.delivered_at <= end_date)
        stmt = select(func.coalesce(func.sum(Order.delivery_fee), 0.0), func.count(Order.id)).where(*conditions)
        result = await session_execute(stmt, self.session)
        total, count = result.one()
        total = float(total)
        return DriverEarningsDTO(
            total_earnings=total,
            total_deliveries=count,
            average_per_delivery=total / count if count else 0.0,
            period_start=start_date,
            period_end=end_date
        )
