from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, DateTime, String, JSON

from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from models.base import Base, generate_uuid, utcnow


class AdminActivityLog(Base):
    """
    Append-only audit record of an admin action.

    action_type and target_type hold AdminActionType / AdminTargetType values
    as plain strings so the log stays filterable with simple equality.
    """
    __tablename__ = 'admin_activity_logs'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    admin_user_id = Column(String(36), nullable=False)
    action_type = Column(String(64), nullable=False)
    target_type = Column(String(32), nullable=False)
    target_id = Column(String, nullable=True)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class AdminActivityLogDTO(BaseModel):
    id: str | None = None
    admin_user_id: str
    action_type: AdminActionType
    target_type: AdminTargetType
    target_id: str | None = None
    details: dict = Field(default_factory=dict)
    created_at: datetime | None = None
