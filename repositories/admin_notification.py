import logging

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.notification_type import NotificationType, NotificationPriority
from exceptions.admin import NotificationNotFoundException
from models.admin_notification import AdminNotification, AdminNotificationDTO
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import NotificationFilter
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class AdminNotificationRepository:
    """
    Notifications addressed to the authenticated admin.

    An admin sees rows addressed to them plus every broadcast.
    """

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    def _visible(self):
        return or_(AdminNotification.admin_user_id == self.auth.user_id,
                   AdminNotification.is_broadcast.is_(True))

    @TransactionManager.backend_call("get_notifications")
    async def get_notifications(self, filters: NotificationFilter | None = None) -> list[AdminNotificationDTO]:
        filters = filters or NotificationFilter()
        conditions = [self._visible()]
        if filters.type is not None:
            conditions.append(AdminNotification.type == filters.type)
        if filters.is_read is not None:
            conditions.append(AdminNotification.is_read.is_(filters.is_read))
        if filters.min_priority is not None:
            conditions.append(AdminNotification.priority >= filters.min_priority)
        if filters.max_priority is not None:
            conditions.append(AdminNotification.priority <= filters.max_priority)
        if filters.category is not None:
            conditions.append(AdminNotification.category == filters.category)
        if filters.start_date is not None:
            conditions.append(AdminNotification.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(AdminNotification.created_at <= filters.end_date)

        stmt = select(AdminNotification).where(*conditions).order_by(AdminNotification.created_at.desc())
        stmt = apply_page(stmt, filters)
        notifications = await session_execute(stmt, self.session)
        return [AdminNotificationDTO.model_validate(notification, from_attributes=True)
                for notification in notifications.scalars().all()]

    @TransactionManager.backend_call("get_notification")
    async def get_by_id(self, notification_id: str) -> AdminNotificationDTO:
        stmt = select(AdminNotification).where(AdminNotification.id == notification_id, self._visible())
        notification = await session_execute(stmt, self.session)
        notification = notification.scalar()
        if notification is None:
            raise NotificationNotFoundException(notification_id)
        return AdminNotificationDTO.model_validate(notification, from_attributes=True)

    @TransactionManager.backend_call("create_notification")
    async def create(
        self,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        priority: int = NotificationPriority.NORMAL.value,
        category: str | None = None,
        admin_user_id: str | None = None,
        is_broadcast: bool = False,
        metadata: dict | None = None,
        expires_at=None
    ) -> str:
        """
        Create a notification.

        Args:
            admin_user_id: Recipient admin; None together with is_broadcast=True reaches every admin

        Returns:
            ID of the new notification
        """
        notification = AdminNotification(
            title=title,
            message=message,
            type=type,
            priority=int(priority),
            category=category,
            admin_user_id=None if is_broadcast else admin_user_id,
            is_broadcast=is_broadcast,
            extra_metadata=metadata or {},
            expires_at=expires_at
        )
        self.session.add(notification)
        await session_flush(self.session)
        logger.info(f"Notification {notification.id} created "
                    f"({'broadcast' if is_broadcast else 'for ' + str(admin_user_id)}): {title}")
        return notification.id

    @TransactionManager.backend_call("mark_notification_read")
    async def mark_as_read(self, notification_id: str) -> None:
        stmt = (update(AdminNotification)
                .where(AdminNotification.id == notification_id, self._visible())
                .values(is_read=True, read_at=utcnow()))
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise NotificationNotFoundException(notification_id)

    @TransactionManager.backend_call("mark_all_notifications_read")
    async def mark_all_as_read(self) -> int:
        """Mark every unread notification addressed to the current admin as read."""
        stmt = (update(AdminNotification)
                .where(AdminNotification.admin_user_id == self.auth.user_id,
                       AdminNotification.is_read.is_(False))
                .values(is_read=True, read_at=utcnow()))
        result = await session_execute(stmt, self.session)
        logger.info(f"Admin {self.auth.user_id} marked {result.rowcount} notifications as read")
        return result.rowcount

    @TransactionManager.backend_call("get_unread_count")
    async def get_unread_count(self) -> int:
        stmt = (select(func.count(AdminNotification.id))
                .where(self._visible(), AdminNotification.is_read.is_(False)))
        count = await session_execute(stmt, self.session)
        return count.scalar_one()

    @TransactionManager.backend_call("get_total_count")
    async def get_total_count(self) -> int:
        stmt = select(func.count(AdminNotification.id)).where(self._visible())
        count = await session_execute(stmt, self.session)
        return count.scalar_one()
