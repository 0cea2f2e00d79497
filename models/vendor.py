from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, String, Boolean, ForeignKey
from sqlalchemy import Enum as SQLEnum

from enums.approval_status import ApprovalStatus
from models.base import Base, generate_uuid, utcnow


class Vendor(Base):
    __tablename__ = 'vendors'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    business_name = Column(String, nullable=False)
    business_address = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Admin verification
    verification_status = Column(SQLEnum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING)
    admin_notes = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)
    approved_by = Column(String(36), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class VendorDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    business_name: str | None = None
    business_address: str | None = None
    is_active: bool | None = None
    verification_status: ApprovalStatus | None = None
    admin_notes: str | None = None
    rejection_reason: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
