from datetime import datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Column, String, DateTime, Boolean, Text, JSON

from models.base import Base, generate_uuid, utcnow


class SystemSetting(Base):
    """
    Key-value store for runtime-configurable platform settings.
    Allows changing settings without a redeploy.

    Examples:
        - min_order_amount: 25.0
        - maintenance_mode: false
        - max_delivery_radius_km: 15
    """
    __tablename__ = 'system_settings'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    setting_key = Column(String, nullable=False, unique=True)
    setting_value = Column(JSON, nullable=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, default="general")
    is_public = Column(Boolean, nullable=False, default=False)
    updated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class SystemSettingDTO(BaseModel):
    id: str | None = None
    setting_key: str
    setting_value: Any = None
    description: str | None = None
    category: str = "general"
    is_public: bool = False
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
