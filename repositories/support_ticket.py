import logging
import uuid

from sqlalchemy import select, update, func, or_, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.ticket_status import TicketStatus, TicketPriority
from exceptions.admin import TicketNotFoundException
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import TicketFilter
from models.support_ticket import SupportTicket, SupportTicketDTO, TicketStatisticsDTO
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


def generate_ticket_number() -> str:
    """Human-readable ticket number, e.g. TKT-20261019-3F9A1C."""
    return f"TKT-{utcnow():%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


class SupportTicketRepository:
    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    @TransactionManager.backend_call("get_support_tickets")
    async def get_tickets(self, filters: TicketFilter | None = None) -> list[SupportTicketDTO]:
        filters = filters or TicketFilter()
        conditions = []
        if filters.status is not None:
            conditions.append(SupportTicket.status == filters.status)
        if filters.priority is not None:
            conditions.append(SupportTicket.priority == filters.priority)
        if filters.category is not None:
            conditions.append(SupportTicket.category == filters.category)
        if filters.assigned_admin_id is not None:
            conditions.append(SupportTicket.assigned_admin_id == filters.assigned_admin_id)
        if filters.user_id is not None:
            conditions.append(SupportTicket.user_id == filters.user_id)
        if filters.search_query:
            pattern = f"%{filters.search_query}%"
            conditions.append(or_(SupportTicket.subject.ilike(pattern),
                                  SupportTicket.description.ilike(pattern),
                                  SupportTicket.ticket_number.ilike(pattern)))
        if filters.start_date is not None:
            conditions.append(SupportTicket.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(SupportTicket.created_at <= filters.end_date)

        stmt = select(SupportTicket).where(*conditions).order_by(SupportTicket.created_at.desc())
        stmt = apply_page(stmt, filters)
        tickets = await session_execute(stmt, self.session)
        return [SupportTicketDTO.model_validate(ticket, from_attributes=True)
                for ticket in tickets.scalars().all()]

    @TransactionManager.backend_call("get_support_ticket")
    async def get_by_id(self, ticket_id: str) -> SupportTicketDTO:
        stmt = select(SupportTicket).where(SupportTicket.id == ticket_id).execution_options(populate_existing=True)
        ticket = await session_execute(stmt, self.session)
        ticket = ticket.scalar()
        if ticket is None:
            raise TicketNotFoundException(ticket_id)
        return SupportTicketDTO.model_validate(ticket, from_attributes=True)

    @TransactionManager.backend_call("create_support_ticket")
    async def create(self, subject: str, description: str, category: str = "general",
                     priority: TicketPriority = TicketPriority.MEDIUM, user_id: str | None = None) -> str:
        ticket = SupportTicket(
            ticket_number=generate_ticket_number(),
            user_id=user_id or self.auth.user_id,
            subject=subject,
            description=description,
            category=category,
            priority=priority
        )
        self.session.add(ticket)
        await session_flush(self.session)
        logger.info(f"Support ticket {ticket.ticket_number} created ({priority.value}): {subject}")
        return ticket.id

    @TransactionManager.backend_call("assign_support_ticket")
    async def assign(self, ticket_id: str, admin_id: str) -> None:
        """Assign a ticket to an admin; the ticket moves to in_progress."""
        stmt = (update(SupportTicket)
                .where(SupportTicket.id == ticket_id)
                .values(assigned_admin_id=admin_id, status=TicketStatus.IN_PROGRESS, updated_at=utcnow()))
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise TicketNotFoundException(ticket_id)

    @TransactionManager.backend_call("update_support_ticket_status")
    async def update_status(self, ticket_id: str, status: TicketStatus,
                            resolution_notes: str | None = None) -> None:
        """resolved/closed also stamp resolved_at and store the resolution notes."""
        now = utcnow()
        values = {"status": status, "updated_at": now}
        if status.is_final:
            values["resolved_at"] = now
            values["resolution_notes"] = resolution_notes
        stmt = update(SupportTicket).where(SupportTicket.id == ticket_id).values(**values)
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise TicketNotFoundException(ticket_id)

    @TransactionManager.backend_call("get_ticket_statistics")
    async def get_statistics(self) -> TicketStatisticsDTO:
        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(SupportTicket.id),
            count_where(SupportTicket.status == TicketStatus.OPEN),
            count_where(SupportTicket.status == TicketStatus.IN_PROGRESS),
            count_where(SupportTicket.status == TicketStatus.RESOLVED),
            count_where(SupportTicket.status == TicketStatus.CLOSED),
            count_where(SupportTicket.priority == TicketPriority.URGENT),
            count_where(SupportTicket.priority == TicketPriority.HIGH),
            count_where(SupportTicket.assigned_admin_id.is_(None)),
        )
        result = await session_execute(stmt, self.session)
        total, open_, in_progress, resolved, closed, urgent, high, unassigned = result.one()
        return TicketStatisticsDTO(
            total_tickets=total,
            open_tickets=open_,
            in_progress_tickets=in_progress,
            resolved_tickets=resolved,
            closed_tickets=closed,
            urgent_tickets=urgent,
            high_priority_tickets=high,
            unassigned_tickets=unassigned
        )
