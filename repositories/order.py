import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from enums.order_status import OrderStatus
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import OrderFilter
from models.order import Order, OrderDTO
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class OrderRepository:
    """Admin-side access to orders."""

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    @TransactionManager.backend_call("get_orders")
    async def get_orders(self, filters: OrderFilter | None = None) -> list[OrderDTO]:
        filters = filters or OrderFilter()
        conditions = []
        if filters.search_query:
            conditions.append(Order.order_number.ilike(f"%{filters.search_query}%"))
        if filters.status is not None:
            conditions.append(Order.status == filters.status)
        if filters.vendor_id is not None:
            conditions.append(Order.vendor_id == filters.vendor_id)
        if filters.customer_id is not None:
            conditions.append(Order.customer_id == filters.customer_id)
        if filters.start_date is not None:
            conditions.append(Order.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Order.created_at <= filters.end_date)

        stmt = select(Order).where(*conditions).order_by(Order.created_at.desc())
        stmt = apply_page(stmt, filters)
        orders = await session_execute(stmt, self.session)
        return [OrderDTO.model_validate(order, from_attributes=True) for order in orders.unique().scalars().all()]

    @TransactionManager.backend_call("get_order")
    async def get_by_id(self, order_id: str) -> OrderDTO:
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = await session_execute(stmt, self.session)
        order = order.unique().scalar()
        if order is None:
            raise OrderNotFoundException(order_id)
        return OrderDTO.model_validate(order, from_attributes=True)

    @TransactionManager.backend_call("admin_update_order_status")
    async def admin_update_status(self, order_id: str, new_status: OrderStatus,
                                  admin_notes: str | None = None, priority_level: int | None = None) -> OrderStatus:
        """
        Set an order's status on behalf of an admin.

        Returns:
            The status the order had before the update
        """
        order = await self.get_by_id(order_id)
        now = utcnow()
        values = {"status": new_status, "updated_at": now, "last_modified_by": self.auth.user_id}
        if admin_notes is not None:
            values["admin_notes"] = admin_notes
        if priority_level is not None:
            values["priority_level"] = priority_level
        if new_status == OrderStatus.DELIVERED and order.delivered_at is None:
            values["delivered_at"] = now
        stmt = update(Order).where(Order.id == order_id).values(**values)
        await session_execute(stmt, self.session)
        logger.info(f"Order {order_id} status {order.status.value} -> {new_status.value} by admin {self.auth.user_id}")
        return order.status

    @TransactionManager.backend_call("process_order_refund")
    async def process_refund(self, order_id: str, refund_amount: float, refund_reason: str) -> None:
        """
        Refund an order and mark it refunded.

        Raises:
            InvalidOrderStateException: amount not in (0, total_amount] or already refunded
        """
        order = await self.get_by_id(order_id)
        if order.status == OrderStatus.REFUNDED:
            raise InvalidOrderStateException("Order has already been refunded", order_id, order.status.value)
        if refund_amount <= 0 or refund_amount > order.total_amount:
            raise InvalidOrderStateException(
                f"Refund amount must be between 0 and {order.total_amount:.2f}", order_id, order.status.value
            )
        now = utcnow()
        stmt = (update(Order)
                .where(Order.id == order_id)
                .values(status=OrderStatus.REFUNDED, refund_amount=refund_amount, refund_reason=refund_reason,
                        refunded_at=now, refunded_by=self.auth.user_id, updated_at=now,
                        last_modified_by=self.auth.user_id))
        await session_execute(stmt, self.session)
        logger.info(f"Order {order_id} refunded {refund_amount:.2f} by admin {self.auth.user_id}: {refund_reason}")
