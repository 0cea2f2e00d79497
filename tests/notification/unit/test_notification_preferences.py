"""
Driver Notification Preferences Unit Tests

Tests models/notification_preferences.py and services/notification.py:
- camelCase storage format
- legacy snake_case rows are expanded onto the fine-grained fields
- toggle persists exactly one flipped flag
- invalid sets are saved with a warning

Run with:
    pytest tests/notification/unit/test_notification_preferences.py -v
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from enums.user_role import UserRole
from exceptions.admin import InvalidPreferenceKeyException, UserNotFoundException
from models.notification_preferences import (
    DriverNotificationPreferences, PREFERENCE_CATEGORIES, PREFERENCE_DISPLAY_NAMES
)
from services.notification import NotificationPreferencesService


@pytest.fixture
def service(test_session, driver_auth):
    return NotificationPreferencesService(test_session, driver_auth)


class TestStorageFormat:

    def test_defaults(self):
        prefs = DriverNotificationPreferences.from_storage(None)

        assert prefs.order_assignments is True
        assert prefs.promotions is False
        assert prefs.quiet_hours_start == "22:00"
        assert prefs.is_valid()

    def test_camel_case_round_trip(self):
        stored = DriverNotificationPreferences(sms_notifications=True).to_storage()

        assert stored["smsNotifications"] is True
        assert "quietHoursEnabled" in stored
        assert DriverNotificationPreferences.from_storage(stored).sms_notifications is True

    def test_legacy_switches_expand(self):
        prefs = DriverNotificationPreferences.from_storage({
            "order_notifications": False,
            "earnings_notifications": True,
            "promotion_notifications": True,
            "quiet_hours_enabled": True,
        })

        assert prefs.order_assignments is False
        assert prefs.order_updates is False
        assert prefs.order_cancellations is False
        assert prefs.status_reminders is False
        assert prefs.bonus_alerts is True
        assert prefs.promotions is True
        assert prefs.quiet_hours_enabled is True
        # Untouched fields keep defaults
        assert prefs.system_announcements is True

    @pytest.mark.parametrize("changes", [
        {"push_notifications": False, "email_notifications": False, "sms_notifications": False},
        {"order_assignments": False, "order_cancellations": False},
    ])
    def test_invalid_sets(self, changes):
        assert not DriverNotificationPreferences(**changes).is_valid()

    def test_toggle_keys_are_booleans_only(self):
        keys = DriverNotificationPreferences.toggle_keys()

        assert "quiet_hours_enabled" in keys
        assert "quiet_hours_start" not in keys


class TestPreferencesService:

    @pytest.mark.asyncio
    async def test_legacy_row_is_converted_on_read(self, service, make_user):
        await make_user("driver-user-1", UserRole.DRIVER, notification_preferences={"sms_notifications": True})

        prefs = await service.get_preferences()

        assert prefs.sms_notifications is True

    @pytest.mark.asyncio
    async def test_toggle_persists_camel_case(self, service, make_user, test_session):
        await make_user("driver-user-1", UserRole.DRIVER)

        updated = await service.toggle("promotions")

        assert updated.promotions is True
        stored = await service.users.get_notification_preferences("driver-user-1")
        assert stored["promotions"] is True
        assert stored["orderAssignments"] is True

    @pytest.mark.asyncio
    async def test_toggle_unknown_key(self, service):
        with pytest.raises(InvalidPreferenceKeyException):
            await service.toggle("quiet_hours_start")

    @pytest.mark.asyncio
    async def test_invalid_set_saved_with_warning(self, service, make_user, caplog):
        await make_user("driver-user-1", UserRole.DRIVER)
        prefs = DriverNotificationPreferences(push_notifications=False)

        saved = await service.update_preferences(prefs)

        assert saved == prefs
        assert "no channel or no order alerts" in caplog.text
        assert (await service.get_preferences()).push_notifications is False

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(UserNotFoundException):
            await service.get_preferences()

    def test_categories(self):
        categories = NotificationPreferencesService.get_categories(DriverNotificationPreferences())

        assert list(categories) == list(PREFERENCE_CATEGORIES)
        assert categories["Delivery Methods"] == {
            "push_notifications": True,
            "email_notifications": False,
            "sms_notifications": False,
        }

    def test_every_toggle_has_display_name(self):
        assert set(PREFERENCE_DISPLAY_NAMES) == set(DriverNotificationPreferences.toggle_keys())
