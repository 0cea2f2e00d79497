"""
Filter DTOs for admin list queries.

Every field left as None is not applied. limit/offset follow
range(offset, offset + limit - 1) semantics; a None limit falls back to the
resource's default page size.
"""
from datetime import datetime

from pydantic import BaseModel

from enums.approval_status import ApprovalStatus
from enums.notification_type import NotificationType
from enums.order_status import OrderStatus
from enums.ticket_status import TicketStatus, TicketPriority
from enums.user_role import UserRole


class PageFilter(BaseModel):
    limit: int | None = None
    offset: int = 0


class UserFilter(PageFilter):
    search_query: str | None = None
    role: UserRole | None = None
    is_verified: bool | None = None
    is_active: bool | None = None


class ActivityLogFilter(PageFilter):
    action_type: str | None = None
    target_type: str | None = None
    admin_user_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class NotificationFilter(PageFilter):
    type: NotificationType | None = None
    is_read: bool | None = None
    min_priority: int | None = None
    max_priority: int | None = None
    category: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class TicketFilter(PageFilter):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    category: str | None = None
    assigned_admin_id: str | None = None
    user_id: str | None = None
    search_query: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class SettingsFilter(PageFilter):
    category: str | None = None
    is_public: bool | None = None
    search_query: str | None = None


class VendorFilter(PageFilter):
    search_query: str | None = None
    verification_status: ApprovalStatus | None = None
    is_active: bool | None = None


class OrderFilter(PageFilter):
    search_query: str | None = None
    status: OrderStatus | None = None
    vendor_id: str | None = None
    customer_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
