from enum import Enum


class NotificationType(str, Enum):
    """Type of an admin notification (admin_notifications.type)."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    SYSTEM_ALERT = "system_alert"


class NotificationPriority(int, Enum):
    LOW = 1
    NORMAL = 2
    HIGH = 3
    CRITICAL = 4


NOTIFICATION_TYPE_DISPLAY_NAMES: dict[NotificationType, str] = {
    NotificationType.INFO: "Information",
    NotificationType.WARNING: "Warning",
    NotificationType.ERROR: "Error",
    NotificationType.SUCCESS: "Success",
    NotificationType.SYSTEM_ALERT: "System Alert",
}
