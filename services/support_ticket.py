import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from enums.realtime_event import RealtimeEvent
from enums.ticket_status import TicketStatus, TicketPriority
from models.auth_session import AuthSession
from models.filters import TicketFilter
from models.support_ticket import SupportTicketDTO, TicketStatisticsDTO
from repositories.support_ticket import SupportTicketRepository
from services.audit import AdminServiceBase, AuditTrail
from services.realtime import RealtimePublisher, SUPPORT_TICKETS

logger = logging.getLogger(__name__)

# Audit action for a status change, by target status
TICKET_STATUS_ACTIONS: dict[TicketStatus, AdminActionType] = {
    TicketStatus.RESOLVED: AdminActionType.TICKET_RESOLVED,
    TicketStatus.CLOSED: AdminActionType.TICKET_CLOSED,
}


class SupportTicketService(AdminServiceBase):
    def __init__(self, session: AsyncSession | Session, auth: AuthSession,
                 publisher: RealtimePublisher | None = None, audit: AuditTrail | None = None):
        super().__init__(session, auth, publisher, audit)
        self.tickets = SupportTicketRepository(session, auth)

    async def get_tickets(self, filters: TicketFilter | None = None) -> list[SupportTicketDTO]:
        return await self.tickets.get_tickets(filters)

    async def get_ticket(self, ticket_id: str) -> SupportTicketDTO:
        return await self.tickets.get_by_id(ticket_id)

    async def get_statistics(self) -> TicketStatisticsDTO:
        return await self.tickets.get_statistics()

    async def create_ticket(self, subject: str, description: str, category: str = "general",
                            priority: TicketPriority = TicketPriority.MEDIUM, user_id: str | None = None) -> str:
        async with self.admin_transaction():
            ticket_id = await self.tickets.create(subject, description, category, priority, user_id)
        await self.publish(SUPPORT_TICKETS, RealtimeEvent.INSERT, ticket_id, is_broadcast=True)
        return ticket_id

    async def assign_ticket(self, ticket_id: str, admin_id: str | None = None,
                            reason: str | None = None) -> SupportTicketDTO:
        """Assign to admin_id, or to the acting admin when omitted."""
        admin_id = admin_id or self.auth.user_id
        async with self.admin_transaction():
            await self.tickets.assign(ticket_id, admin_id)
            await self.audit.record(AdminActionType.TICKET_ASSIGNED, AdminTargetType.TICKET, ticket_id,
                                    {"assigned_admin_id": admin_id, "reason": reason})
        await self.publish(SUPPORT_TICKETS, RealtimeEvent.UPDATE, ticket_id, is_broadcast=True)
        return await self.tickets.get_by_id(ticket_id)

    async def update_ticket_status(self, ticket_id: str, status: TicketStatus,
                                   resolution_notes: str | None = None) -> SupportTicketDTO:
        action_type = TICKET_STATUS_ACTIONS.get(status, AdminActionType.TICKET_STATUS_CHANGED)
        async with self.admin_transaction():
            await self.tickets.update_status(ticket_id, status, resolution_notes)
            await self.audit.record(action_type, AdminTargetType.TICKET, ticket_id,
                                    {"new_status": status.value, "notes": resolution_notes})
        logger.info(f"Ticket {ticket_id} -> {status.value} by admin {self.auth.user_id}")
        await self.publish(SUPPORT_TICKETS, RealtimeEvent.UPDATE, ticket_id, is_broadcast=True)
        return await self.tickets.get_by_id(ticket_id)
