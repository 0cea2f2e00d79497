from enum import Enum


class AdminTargetType(str, Enum):
    USER = "user"
    VENDOR = "vendor"
    ORDER = "order"
    TICKET = "ticket"
    SETTING = "setting"
    NOTIFICATION = "notification"
    SYSTEM = "system"

    @property
    def display_name(self) -> str:
        return ADMIN_TARGET_TYPE_DISPLAY_NAMES[self]


ADMIN_TARGET_TYPE_DISPLAY_NAMES: dict[AdminTargetType, str] = {
    AdminTargetType.USER: "User",
    AdminTargetType.VENDOR: "Vendor",
    AdminTargetType.ORDER: "Order",
    AdminTargetType.TICKET: "Support Ticket",
    AdminTargetType.SETTING: "System Setting",
    AdminTargetType.NOTIFICATION: "Notification",
    AdminTargetType.SYSTEM: "System",
}
