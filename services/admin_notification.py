import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from enums.notification_type import NotificationType, NotificationPriority
from enums.realtime_event import RealtimeEvent
from models.admin_notification import AdminNotificationDTO
from models.auth_session import AuthSession
from models.filters import NotificationFilter
from repositories.admin_notification import AdminNotificationRepository
from services.audit import AdminServiceBase, AuditTrail
from services.realtime import RealtimePublisher, ADMIN_NOTIFICATIONS

logger = logging.getLogger(__name__)


class AdminNotificationService(AdminServiceBase):
    def __init__(self, session: AsyncSession | Session, auth: AuthSession,
                 publisher: RealtimePublisher | None = None, audit: AuditTrail | None = None):
        super().__init__(session, auth, publisher, audit)
        self.notifications = AdminNotificationRepository(session, auth)

    async def get_notifications(self, filters: NotificationFilter | None = None) -> list[AdminNotificationDTO]:
        return await self.notifications.get_notifications(filters)

    async def get_unread_count(self) -> int:
        return await self.notifications.get_unread_count()

    async def get_total_count(self) -> int:
        return await self.notifications.get_total_count()

    async def create_notification(
        self,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        category: str | None = None,
        admin_user_id: str | None = None,
        is_broadcast: bool = False,
        metadata: dict | None = None,
        expires_at=None
    ) -> str:
        async with self.admin_transaction():
            notification_id = await self.notifications.create(
                title, message, type, int(priority), category, admin_user_id, is_broadcast, metadata, expires_at
            )
            await self.audit.record(AdminActionType.NOTIFICATION_SENT, AdminTargetType.NOTIFICATION,
                                    notification_id, {
                                        "title": title,
                                        "type": type.value,
                                        "recipient": admin_user_id,
                                        "is_broadcast": is_broadcast,
                                    })
        await self.publish(ADMIN_NOTIFICATIONS, RealtimeEvent.INSERT, notification_id,
                           user_id=admin_user_id, is_broadcast=is_broadcast)
        return notification_id

    async def mark_as_read(self, notification_id: str) -> None:
        async with self.admin_transaction():
            await self.notifications.mark_as_read(notification_id)
        await self.publish(ADMIN_NOTIFICATIONS, RealtimeEvent.UPDATE, notification_id, user_id=self.auth.user_id)

    async def mark_all_as_read(self) -> int:
        async with self.admin_transaction():
            count = await self.notifications.mark_all_as_read()
        if count:
            await self.publish(ADMIN_NOTIFICATIONS, RealtimeEvent.UPDATE, None, user_id=self.auth.user_id)
        return count
