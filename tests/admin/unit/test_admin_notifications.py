"""
Admin Notification Service Unit Tests

Tests services/admin_notification.py and repositories/admin_notification.py:
- visibility: own notifications plus broadcasts
- mark as read / mark all as read
- unread and total counts
- creation is audited and published to the recipient

Run with:
    pytest tests/admin/unit/test_admin_notifications.py -v
"""

import pytest
import sys
import os
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from enums.notification_type import NotificationType, NotificationPriority
from enums.user_role import UserRole
from exceptions.admin import NotificationNotFoundException
from models.auth_session import AuthSession
from models.filters import NotificationFilter
from services.admin_notification import AdminNotificationService
from services.realtime import ADMIN_NOTIFICATIONS


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.publish = AsyncMock(return_value=True)
    return publisher


@pytest.fixture
def service(test_session, admin_auth, publisher):
    return AdminNotificationService(test_session, admin_auth, publisher)


@pytest.fixture
def other_admin_service(test_session):
    return AdminNotificationService(test_session, AuthSession(user_id="admin-2", role=UserRole.ADMIN))


class TestVisibility:

    @pytest.mark.asyncio
    async def test_own_and_broadcast_only(self, service, other_admin_service):
        await service.create_notification("Mine", "for admin-1", admin_user_id="admin-1")
        await service.create_notification("Theirs", "for admin-2", admin_user_id="admin-2")
        await service.create_notification("Everyone", "broadcast", is_broadcast=True)

        mine = {n.title for n in await service.get_notifications()}
        theirs = {n.title for n in await other_admin_service.get_notifications()}

        assert mine == {"Mine", "Everyone"}
        assert theirs == {"Theirs", "Everyone"}

    @pytest.mark.asyncio
    async def test_filters(self, service):
        await service.create_notification("Low", "x", admin_user_id="admin-1", priority=NotificationPriority.LOW)
        await service.create_notification("Alert", "x", admin_user_id="admin-1", type=NotificationType.SYSTEM_ALERT,
                                          priority=NotificationPriority.CRITICAL, category="system")

        high = await service.get_notifications(NotificationFilter(min_priority=3))
        system = await service.get_notifications(NotificationFilter(category="system"))

        assert [n.title for n in high] == ["Alert"]
        assert [n.title for n in system] == ["Alert"]


class TestReadState:

    @pytest.mark.asyncio
    async def test_counts_and_mark_as_read(self, service):
        first = await service.create_notification("One", "x", admin_user_id="admin-1")
        await service.create_notification("Two", "x", admin_user_id="admin-1")

        assert await service.get_unread_count() == 2
        await service.mark_as_read(first)

        assert await service.get_unread_count() == 1
        assert await service.get_total_count() == 2

    @pytest.mark.asyncio
    async def test_mark_all_only_touches_own(self, service, other_admin_service):
        await service.create_notification("One", "x", admin_user_id="admin-1")
        await service.create_notification("Two", "x", admin_user_id="admin-1")
        await service.create_notification("Theirs", "x", admin_user_id="admin-2")

        count = await service.mark_all_as_read()

        assert count == 2
        assert await other_admin_service.get_unread_count() == 1

    @pytest.mark.asyncio
    async def test_invisible_notification_cannot_be_read(self, service, other_admin_service):
        theirs = await service.create_notification("Theirs", "x", admin_user_id="admin-2")

        with pytest.raises(NotificationNotFoundException):
            await service.mark_as_read(theirs)


class TestPublishing:

    @pytest.mark.asyncio
    async def test_recipient_targeted_event(self, service, publisher):
        notification_id = await service.create_notification("Hi", "x", admin_user_id="admin-2")

        first = publisher.publish.await_args_list[0]
        assert first.args[0] == ADMIN_NOTIFICATIONS
        assert first.args[2] == notification_id
        assert first.kwargs == {"user_id": "admin-2", "is_broadcast": False}

    @pytest.mark.asyncio
    async def test_no_event_when_nothing_marked(self, service, publisher):
        assert await service.mark_all_as_read() == 0

        publisher.publish.assert_not_called()
