from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, DateTime, String, Text, JSON
from sqlalchemy import Enum as SQLEnum

from enums.ticket_status import TicketStatus, TicketPriority
from models.base import Base, generate_uuid, utcnow


class SupportTicket(Base):
    __tablename__ = 'support_tickets'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    ticket_number = Column(String, nullable=False, unique=True)
    user_id = Column(String(36), nullable=True)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, default="general")
    priority = Column(SQLEnum(TicketPriority), nullable=False, default=TicketPriority.MEDIUM)
    status = Column(SQLEnum(TicketStatus), nullable=False, default=TicketStatus.OPEN)
    assigned_admin_id = Column(String(36), nullable=True)
    resolution_notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    extra_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class SupportTicketDTO(BaseModel):
    id: str | None = None
    ticket_number: str | None = None
    user_id: str | None = None
    subject: str
    description: str
    category: str = "general"
    priority: TicketPriority = TicketPriority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    assigned_admin_id: str | None = None
    resolution_notes: str | None = None
    resolved_at: datetime | None = None
    extra_metadata: dict = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TicketStatisticsDTO(BaseModel):
    total_tickets: int = 0
    open_tickets: int = 0
    in_progress_tickets: int = 0
    resolved_tickets: int = 0
    closed_tickets: int = 0
    urgent_tickets: int = 0
    high_priority_tickets: int = 0
    unassigned_tickets: int = 0
