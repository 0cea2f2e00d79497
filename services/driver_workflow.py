import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
from enums.driver_order_status import DriverOrderStatus
from enums.realtime_event import RealtimeEvent
from exceptions.backend import BackendException
from exceptions.base import GigaEatsException
from exceptions.order import InvalidOrderStateException, OrderStatusUpdateException, OrderNotFoundException
from models.auth_session import AuthSession
from models.order import DriverOrderDTO
from repositories.driver_order import DriverOrderRepository
from services.realtime import RealtimePublisher
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class DriverWorkflowService:
    """
    Driver actions on a delivery.

    Each action validates against the state machine using the status the
    driver is looking at, applies exactly one backend status update, commits,
    and returns the order re-read from the backend. Nothing is changed
    locally: on failure the caller keeps showing the previous status.
    """

    def __init__(self, session: AsyncSession | Session, auth: AuthSession,
                 publisher: RealtimePublisher | None = None):
        self.session = session
        self.auth = auth
        self.publisher = publisher
        self.repository = DriverOrderRepository(session, auth)

    @staticmethod
    def _ensure_not_terminal(order: DriverOrderDTO, action: str) -> None:
        if order.is_terminal:
            logger.warning(f"Rejected {action} on {order.status.value} order {order.id}")
            raise InvalidOrderStateException(
                f"Order is already {order.status.display_name.lower()}",
                order.id, order.status.value
            )

    async def _publish(self, order_id: str) -> None:
        if self.publisher is not None:
            await self.publisher.publish("orders", RealtimeEvent.UPDATE, order_id, user_id=self.auth.user_id)

    async def _apply(self, order: DriverOrderDTO, new_status: DriverOrderStatus, action: str) -> DriverOrderDTO:
        self._ensure_not_terminal(order, action)
        if not OrderStateMachine.validate_and_log_transition(order.id, order.status, new_status, self.auth.user_id):
            raise InvalidOrderStateException(
                f"Cannot {action.replace('_', ' ')} from current status: {order.status.display_name}",
                order.id, order.status.value
            )
        try:
            await self.repository.update_order_status(order.id, new_status)
            await session_commit(self.session)
        except (BackendException, OrderNotFoundException) as e:
            await session_rollback(self.session)
            reason = e.reason if isinstance(e, BackendException) and e.reason else e.message
            logger.error(f"Status update {order.status.value} -> {new_status.value} failed for order {order.id}: "
                         f"{reason}")
            raise OrderStatusUpdateException(order.id, reason) from e

        await self._publish(order.id)
        return await self.repository.get_order_details(order.id)

    async def accept_order(self, order: DriverOrderDTO) -> DriverOrderDTO:
        self._ensure_not_terminal(order, "accept")
        try:
            accepted = await self.repository.accept_order(order.id)
            await session_commit(self.session)
        except BackendException as e:
            await session_rollback(self.session)
            raise OrderStatusUpdateException(order.id, e.reason or e.message) from e
        except GigaEatsException:
            await session_rollback(self.session)
            raise
        await self._publish(order.id)
        return accepted

    async def reject_order(self, order: DriverOrderDTO, reason: str = "Driver declined") -> None:
        self._ensure_not_terminal(order, "reject")
        try:
            await self.repository.reject_order(order.id, reason)
            await session_commit(self.session)
        except BackendException as e:
            await session_rollback(self.session)
            raise OrderStatusUpdateException(order.id, e.reason or e.message) from e
        except GigaEatsException:
            await session_rollback(self.session)
            raise
        await self._publish(order.id)

    async def start_navigation_to_vendor(self, order: DriverOrderDTO) -> DriverOrderDTO:
        if order.status == DriverOrderStatus.ON_ROUTE_TO_VENDOR:
            return order
        return await self._apply(order, DriverOrderStatus.ON_ROUTE_TO_VENDOR, "start_navigation")

    async def mark_arrived_at_vendor(self, order: DriverOrderDTO) -> DriverOrderDTO:
        return await self._apply(order, DriverOrderStatus.ARRIVED_AT_VENDOR, "mark_arrived_at_vendor")

    async def confirm_pickup(self, order: DriverOrderDTO) -> DriverOrderDTO:
        return await self._apply(order, DriverOrderStatus.PICKED_UP, "confirm_pickup")

    async def start_navigation_to_customer(self, order: DriverOrderDTO) -> DriverOrderDTO:
        """
        picked_up moves to on_route_to_customer; on_route_to_customer only
        re-opens navigation. Anything else is rejected before any backend call.
        """
        self._ensure_not_terminal(order, "start_navigation")
        if order.status == DriverOrderStatus.ON_ROUTE_TO_CUSTOMER:
            logger.info(f"Order {order.id} already on route to customer, re-opening navigation")
            return order
        if order.status != DriverOrderStatus.PICKED_UP:
            raise InvalidOrderStateException(
                f"Cannot start navigation from current status: {order.status.display_name}",
                order.id, order.status.value
            )
        return await self._apply(order, DriverOrderStatus.ON_ROUTE_TO_CUSTOMER, "start_navigation")

    async def mark_arrived_at_customer(self, order: DriverOrderDTO) -> DriverOrderDTO:
        return await self._apply(order, DriverOrderStatus.ARRIVED_AT_CUSTOMER, "mark_arrived_at_customer")

    async def confirm_delivery(self, order: DriverOrderDTO) -> DriverOrderDTO:
        return await self._apply(order, DriverOrderStatus.DELIVERED, "confirm_delivery")

    async def cancel_delivery(self, order: DriverOrderDTO) -> DriverOrderDTO:
        return await self._apply(order, DriverOrderStatus.CANCELLED, "cancel")
