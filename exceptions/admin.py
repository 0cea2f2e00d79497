"""
Admin-related exceptions.
"""

from .base import GigaEatsException


class AdminException(GigaEatsException):
    """Base exception for admin resource errors."""
    pass


class UserNotFoundException(AdminException):
    """Raised when user is not found in database."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User {user_id} not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class TicketNotFoundException(AdminException):
    def __init__(self, ticket_id: str):
        super().__init__(
            f"Support ticket {ticket_id} not found",
            details={'ticket_id': ticket_id}
        )
        self.ticket_id = ticket_id


class SettingNotFoundException(AdminException):
    def __init__(self, setting_key: str):
        super().__init__(
            f"System setting '{setting_key}' not found",
            details={'setting_key': setting_key}
        )
        self.setting_key = setting_key


class SettingAlreadyExistsException(AdminException):
    def __init__(self, setting_key: str):
        super().__init__(
            f"System setting '{setting_key}' already exists",
            details={'setting_key': setting_key}
        )
        self.setting_key = setting_key


class NotificationNotFoundException(AdminException):
    def __init__(self, notification_id: str):
        super().__init__(
            f"Notification {notification_id} not found",
            details={'notification_id': notification_id}
        )
        self.notification_id = notification_id


class VendorNotFoundException(AdminException):
    def __init__(self, vendor_id: str):
        super().__init__(
            f"Vendor {vendor_id} not found",
            details={'vendor_id': vendor_id}
        )
        self.vendor_id = vendor_id


class InvalidPreferenceKeyException(AdminException):
    """Raised when toggling a notification preference that does not exist."""

    def __init__(self, key: str):
        super().__init__(
            f"Unknown notification preference '{key}'",
            details={'key': key}
        )
        self.key = key
