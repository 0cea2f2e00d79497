"""
Support Ticket Service Unit Tests

Tests services/support_ticket.py and repositories/support_ticket.py:
- ticket numbers
- assignment moves a ticket to in_progress
- resolving stamps resolved_at and the audit action depends on the status
- statistics

Run with:
    pytest tests/admin/unit/test_support_tickets.py -v
"""

import re
import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from enums.ticket_status import TicketStatus, TicketPriority
from exceptions.admin import TicketNotFoundException
from models.filters import TicketFilter, ActivityLogFilter
from repositories.admin_activity_log import AdminActivityLogRepository
from repositories.support_ticket import generate_ticket_number
from services.support_ticket import SupportTicketService


async def service_logs(service):
    return await AdminActivityLogRepository(service.session, service.auth).get_activity_logs(ActivityLogFilter())


@pytest.fixture
def service(test_session, admin_auth):
    return SupportTicketService(test_session, admin_auth)


class TestTicketNumber:

    def test_format(self):
        assert re.fullmatch(r"TKT-\d{8}-[0-9A-F]{6}", generate_ticket_number())


class TestTickets:

    @pytest.mark.asyncio
    async def test_create_defaults(self, service):
        ticket_id = await service.create_ticket("Refund not received", "Order GE-0001 was cancelled",
                                                user_id="customer-1")

        ticket = await service.get_ticket(ticket_id)
        assert ticket.status == TicketStatus.OPEN
        assert ticket.priority == TicketPriority.MEDIUM
        assert ticket.user_id == "customer-1"

    @pytest.mark.asyncio
    async def test_assign_to_self(self, service):
        ticket_id = await service.create_ticket("Driver late", "Waited 90 minutes")

        ticket = await service.assign_ticket(ticket_id)

        assert ticket.assigned_admin_id == "admin-1"
        assert ticket.status == TicketStatus.IN_PROGRESS
        logs = await service_logs(service)
        assert [log.action_type.value for log in logs] == ["ticket_assigned"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,action", [
        (TicketStatus.RESOLVED, "ticket_resolved"),
        (TicketStatus.CLOSED, "ticket_closed"),
        (TicketStatus.WAITING_CUSTOMER, "ticket_status_changed"),
    ])
    async def test_status_update_action(self, service, status, action):
        ticket_id = await service.create_ticket("Wrong item", "Got roti instead of nasi")

        ticket = await service.update_ticket_status(ticket_id, status, "Handled")

        assert ticket.status == status
        assert (ticket.resolved_at is not None) == status.is_final
        logs = await service_logs(service)
        assert [log.action_type.value for log in logs] == [action]

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, service):
        with pytest.raises(TicketNotFoundException):
            await service.assign_ticket("missing")

    @pytest.mark.asyncio
    async def test_search(self, service):
        await service.create_ticket("Payment failed", "Card declined twice")
        await service.create_ticket("Late delivery", "Food arrived cold")

        tickets = await service.get_tickets(TicketFilter(search_query="declined"))

        assert [ticket.subject for ticket in tickets] == ["Payment failed"]

    @pytest.mark.asyncio
    async def test_statistics(self, service):
        first = await service.create_ticket("A", "a", priority=TicketPriority.URGENT)
        await service.create_ticket("B", "b", priority=TicketPriority.HIGH)
        await service.create_ticket("C", "c")
        await service.assign_ticket(first)

        stats = await service.get_statistics()

        assert stats.total_tickets == 3
        assert stats.open_tickets == 2
        assert stats.in_progress_tickets == 1
        assert stats.urgent_tickets == 1
        assert stats.high_priority_tickets == 1
        assert stats.unassigned_tickets == 2
