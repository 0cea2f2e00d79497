from enum import Enum


class AdminActionType(str, Enum):
    """
    Fixed vocabulary of audit-log action types.

    Stored as plain strings in admin_activity_logs.action_type so the log
    stays filterable; never write free text into that column.
    """
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    USER_STATUS_CHANGED = "user_status_changed"
    ROLE_CHANGED = "role_changed"
    VENDOR_APPROVED = "vendor_approved"
    VENDOR_REJECTED = "vendor_rejected"
    VENDOR_STATUS_CHANGED = "vendor_status_changed"
    ORDER_STATUS_UPDATED = "order_status_updated"
    ORDER_REFUNDED = "order_refunded"
    TICKET_ASSIGNED = "ticket_assigned"
    TICKET_STATUS_CHANGED = "ticket_status_changed"
    TICKET_RESOLVED = "ticket_resolved"
    TICKET_CLOSED = "ticket_closed"
    SYSTEM_SETTING_UPDATED = "system_setting_updated"
    NOTIFICATION_SENT = "notification_sent"

    @property
    def display_name(self) -> str:
        return ADMIN_ACTION_TYPE_DISPLAY_NAMES[self]


ADMIN_ACTION_TYPE_DISPLAY_NAMES: dict[AdminActionType, str] = {
    AdminActionType.USER_CREATED: "User Created",
    AdminActionType.USER_UPDATED: "User Updated",
    AdminActionType.USER_DELETED: "User Deleted",
    AdminActionType.USER_STATUS_CHANGED: "User Status Changed",
    AdminActionType.ROLE_CHANGED: "Role Changed",
    AdminActionType.VENDOR_APPROVED: "Vendor Approved",
    AdminActionType.VENDOR_REJECTED: "Vendor Rejected",
    AdminActionType.VENDOR_STATUS_CHANGED: "Vendor Status Changed",
    AdminActionType.ORDER_STATUS_UPDATED: "Order Status Updated",
    AdminActionType.ORDER_REFUNDED: "Order Refunded",
    AdminActionType.TICKET_ASSIGNED: "Ticket Assigned",
    AdminActionType.TICKET_STATUS_CHANGED: "Ticket Status Changed",
    AdminActionType.TICKET_RESOLVED: "Ticket Resolved",
    AdminActionType.TICKET_CLOSED: "Ticket Closed",
    AdminActionType.SYSTEM_SETTING_UPDATED: "System Setting Updated",
    AdminActionType.NOTIFICATION_SENT: "Notification Sent",
}
