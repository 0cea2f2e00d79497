from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, DateTime, String, Boolean, Integer, Text, JSON, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.notification_type import NotificationType, NotificationPriority
from models.base import Base, generate_uuid, utcnow


class AdminNotification(Base):
    __tablename__ = 'admin_notifications'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(SQLEnum(NotificationType), nullable=False, default=NotificationType.INFO)
    priority = Column(Integer, nullable=False, default=NotificationPriority.NORMAL.value)
    category = Column(String, nullable=True)

    # admin_user_id is None for broadcasts
    admin_user_id = Column(String(36), nullable=True)
    is_broadcast = Column(Boolean, nullable=False, default=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)

    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON, nullable=False, default=dict)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('priority BETWEEN 1 AND 4', name='check_notification_priority_range'),
    )


class AdminNotificationDTO(BaseModel):
    id: str | None = None
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    priority: int = NotificationPriority.NORMAL.value
    category: str | None = None
    admin_user_id: str | None = None
    is_broadcast: bool = False
    is_read: bool = False
    read_at: datetime | None = None
    extra_metadata: dict = Field(default_factory=dict)
    expires_at: datetime | None = None
    created_at: datetime | None = None
