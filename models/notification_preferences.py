"""
Driver notification preferences.

Stored on users.notification_preferences as camelCase JSON. Rows written by
older clients use a flat snake_case format with coarse switches
(order_notifications, earnings_notifications, ...); from_storage() detects
that format and expands each coarse switch onto the fine-grained fields.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Legacy coarse switch -> fine-grained fields it controls
LEGACY_KEY_MAPPING: dict[str, list[str]] = {
    "order_notifications": ["order_assignments", "order_updates", "order_cancellations", "status_reminders"],
    "earnings_notifications": ["earnings_updates", "payout_notifications", "bonus_alerts"],
    "system_notifications": ["system_announcements", "fleet_announcements"],
    "promotion_notifications": ["promotions"],
    "push_notifications": ["push_notifications"],
    "email_notifications": ["email_notifications"],
    "sms_notifications": ["sms_notifications"],
}

PREFERENCE_DISPLAY_NAMES: dict[str, str] = {
    "order_assignments": "Order Assignments",
    "order_updates": "Order Updates",
    "order_cancellations": "Order Cancellations",
    "status_reminders": "Status Reminders",
    "earnings_updates": "Earnings Updates",
    "payout_notifications": "Payout Notifications",
    "bonus_alerts": "Bonus Alerts",
    "fleet_announcements": "Fleet Announcements",
    "system_announcements": "System Announcements",
    "promotions": "Promotions",
    "push_notifications": "Push Notifications",
    "email_notifications": "Email Notifications",
    "sms_notifications": "SMS Notifications",
    "quiet_hours_enabled": "Quiet Hours",
}

PREFERENCE_CATEGORIES: dict[str, list[str]] = {
    "Order Notifications": ["order_assignments", "order_updates", "order_cancellations", "status_reminders"],
    "Earnings & Payments": ["earnings_updates", "payout_notifications", "bonus_alerts"],
    "Fleet & System": ["fleet_announcements", "system_announcements", "promotions"],
    "Delivery Methods": ["push_notifications", "email_notifications", "sms_notifications"],
    "Quiet Hours": ["quiet_hours_enabled"],
}


class DriverNotificationPreferences(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Orders
    order_assignments: bool = True
    order_updates: bool = True
    order_cancellations: bool = True
    status_reminders: bool = True

    # Earnings & payments
    earnings_updates: bool = True
    payout_notifications: bool = True
    bonus_alerts: bool = True

    # Fleet & system
    fleet_announcements: bool = True
    system_announcements: bool = True
    promotions: bool = False

    # Delivery channels
    push_notifications: bool = True
    email_notifications: bool = False
    sms_notifications: bool = False

    # Quiet hours (HH:MM, local time)
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "07:00"

    @classmethod
    def toggle_keys(cls) -> list[str]:
        return [name for name, field in cls.model_fields.items() if field.annotation is bool]

    @classmethod
    def from_legacy(cls, data: dict[str, Any]) -> "DriverNotificationPreferences":
        values: dict[str, Any] = {}
        for legacy_key, fields in LEGACY_KEY_MAPPING.items():
            if legacy_key in data and data[legacy_key] is not None:
                for field in fields:
                    values[field] = bool(data[legacy_key])
        if data.get("quiet_hours_enabled") is not None:
            values["quiet_hours_enabled"] = bool(data["quiet_hours_enabled"])
        return cls(**values)

    @classmethod
    def from_storage(cls, data: dict[str, Any] | None) -> "DriverNotificationPreferences":
        if not data:
            return cls()
        if "orderAssignments" in data:
            return cls.model_validate(data)
        return cls.from_legacy(data)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def is_valid(self) -> bool:
        """At least one channel must be on, and order assignments or cancellations must stay on."""
        if not (self.push_notifications or self.email_notifications or self.sms_notifications):
            return False
        if not (self.order_assignments or self.order_cancellations):
            return False
        return True
