"""
Admin Service Unit Tests

Tests services/admin.py against an in-memory database:
- user management with matching audit records
- vendor approval and rejection
- admin order status updates and refunds
- system settings CRUD
- realtime events published after commit

Run with:
    pytest tests/admin/unit/test_admin_service.py -v
"""

import pytest
import sys
import os
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../../..')))

from enums.approval_status import ApprovalStatus
from enums.order_status import OrderStatus
from enums.realtime_event import RealtimeEvent
from enums.user_role import UserRole
from exceptions.admin import UserNotFoundException, SettingAlreadyExistsException, SettingNotFoundException
from exceptions.order import InvalidOrderStateException
from models.filters import UserFilter, ActivityLogFilter, SettingsFilter, OrderFilter
from models.user import UserCreateDTO, UserDTO
from services.admin import AdminService
from services.realtime import ADMIN_ACTIVITY_LOGS


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.publish = AsyncMock(return_value=True)
    return publisher


@pytest.fixture
def service(test_session, admin_auth, publisher):
    return AdminService(test_session, admin_auth, publisher)


async def last_log(service):
    logs = await service.get_activity_logs(ActivityLogFilter(limit=1))
    return logs[0]


class TestUsers:

    @pytest.mark.asyncio
    async def test_create_user_is_audited(self, service):
        user_id = await service.create_user(UserCreateDTO(email="siti@example.com", full_name="Siti",
                                                          role=UserRole.SALES_AGENT))

        user = await service.get_user(user_id)
        log = await last_log(service)
        assert user.role == UserRole.SALES_AGENT
        assert log.action_type.value == "user_created"
        assert log.target_id == user_id
        assert log.details == {"email": "siti@example.com", "role": "sales_agent"}

    @pytest.mark.asyncio
    async def test_update_user_writes_only_given_fields(self, service, make_user):
        await make_user("user-1", full_name="Old Name", phone_number="0123456789")

        updated = await service.update_user(UserDTO(id="user-1", full_name="New Name"))

        assert updated.full_name == "New Name"
        assert updated.phone_number == "0123456789"
        assert (await last_log(service)).details == {"changes": {"full_name": "New Name"}}

    @pytest.mark.asyncio
    async def test_role_change(self, service, make_user):
        await make_user("user-1")

        await service.update_user_role("user-1", UserRole.VENDOR, "Opened a stall")

        assert (await service.get_user("user-1")).role == UserRole.VENDOR
        log = await last_log(service)
        assert log.action_type.value == "role_changed"
        assert log.details == {"new_role": "vendor", "reason": "Opened a stall"}

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, service, make_user):
        await make_user("user-1")

        await service.delete_user("user-1", "Requested by user")

        user = await service.get_user("user-1")
        assert user.is_active is False
        assert (await last_log(service)).details["deletion_type"] == "soft_delete"

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(UserNotFoundException):
            await service.update_user_status("missing", False)

    @pytest.mark.asyncio
    async def test_search_users(self, service, make_user):
        await make_user("user-1", full_name="Aminah Binti Ali")
        await make_user("user-2", full_name="Chong Wei")

        users = await service.get_users(UserFilter(search_query="aminah"))

        assert [user.id for user in users] == ["user-1"]

    @pytest.mark.asyncio
    async def test_mutation_publishes_row_and_activity_events(self, service, publisher, make_user):
        await make_user("user-1")

        await service.update_user_status("user-1", False)

        calls = publisher.publish.await_args_list
        assert calls[0].args[:3] == ("users", RealtimeEvent.UPDATE, "user-1")
        assert calls[1].args[0] == ADMIN_ACTIVITY_LOGS
        assert calls[1].kwargs["is_broadcast"] is True


class TestVendors:

    @pytest.mark.asyncio
    async def test_approve(self, service, make_vendor):
        await make_vendor()

        vendor = await service.approve_vendor("vendor-1", "Documents verified")

        assert vendor.verification_status == ApprovalStatus.VERIFIED
        assert vendor.approved_by == "admin-1"
        assert vendor.approved_at is not None

    @pytest.mark.asyncio
    async def test_reject(self, service, make_vendor):
        await make_vendor()

        vendor = await service.reject_vendor("vendor-1", "Missing SSM certificate")

        assert vendor.verification_status == ApprovalStatus.REJECTED
        assert vendor.rejection_reason == "Missing SSM certificate"
        assert (await last_log(service)).action_type.value == "vendor_rejected"


class TestOrders:

    @pytest.mark.asyncio
    async def test_status_update_records_old_status(self, service, make_vendor, make_order):
        await make_vendor()
        await make_order("o-1", status=OrderStatus.PREPARING)

        order = await service.update_order_status("o-1", OrderStatus.DELIVERED, "Delivered manually", 2)

        assert order.status == OrderStatus.DELIVERED
        assert order.delivered_at is not None
        assert order.priority_level == 2
        log = await last_log(service)
        assert log.details["old_status"] == "preparing"
        assert log.details["new_status"] == "delivered"

    @pytest.mark.asyncio
    async def test_refund(self, service, make_vendor, make_order):
        await make_vendor()
        await make_order("o-1", status=OrderStatus.DELIVERED, total_amount=164.0)

        order = await service.process_order_refund("o-1", 50.0, "Missing item")

        assert order.status == OrderStatus.REFUNDED
        assert order.refund_amount == 50.0
        assert order.refunded_by == "admin-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0.0, -1.0, 164.01])
    async def test_refund_amount_out_of_range(self, service, make_vendor, make_order, amount):
        await make_vendor()
        await make_order("o-1", status=OrderStatus.DELIVERED, total_amount=164.0)

        with pytest.raises(InvalidOrderStateException):
            await service.process_order_refund("o-1", amount, "Mistake")

    @pytest.mark.asyncio
    async def test_refund_twice_rejected(self, service, make_vendor, make_order):
        await make_vendor()
        await make_order("o-1", status=OrderStatus.DELIVERED)
        await service.process_order_refund("o-1", 10.0, "Late")

        with pytest.raises(InvalidOrderStateException) as exc_info:
            await service.process_order_refund("o-1", 10.0, "Late again")

        assert exc_info.value.message == "Order has already been refunded"

    @pytest.mark.asyncio
    async def test_filter_by_status(self, service, make_vendor, make_order):
        await make_vendor()
        await make_order("o-1", status=OrderStatus.READY)
        await make_order("o-2", status=OrderStatus.CANCELLED)

        orders = await service.get_orders(OrderFilter(status=OrderStatus.CANCELLED))

        assert [order.id for order in orders] == ["o-2"]


class TestSettings:

    @pytest.mark.asyncio
    async def test_create_update_delete(self, service, publisher):
        created = await service.create_setting("min_order_amount", 25.0, "Minimum basket", "orders")
        updated = await service.update_setting("min_order_amount", 30.0, "Raised for peak season")

        assert created.setting_value == 25.0
        assert updated.setting_value == 30.0
        logs = await service.get_activity_logs()
        assert sorted(log.details["action"] for log in logs) == ["created", "updated"]

        await service.delete_setting("min_order_amount")

        with pytest.raises(SettingNotFoundException):
            await service.get_setting("min_order_amount")
        assert publisher.publish.await_args_list[-2].kwargs["is_broadcast"] is True

    @pytest.mark.asyncio
    async def test_duplicate_key(self, service):
        await service.create_setting("maintenance_mode", False)

        with pytest.raises(SettingAlreadyExistsException):
            await service.create_setting("maintenance_mode", True)

    @pytest.mark.asyncio
    async def test_settings_ordered_by_category_then_key(self, service):
        await service.create_setting("b_key", 1, category="orders")
        await service.create_setting("a_key", 2, category="orders")
        await service.create_setting("z_key", 3, category="delivery")

        settings = await service.get_settings(SettingsFilter())

        assert [s.setting_key for s in settings] == ["z_key", "a_key", "b_key"]

    @pytest.mark.asyncio
    async def test_typed_accessors(self, service):
        await service.create_setting("min_order_amount", "not a number")

        assert await service.settings.get_min_order_amount(default=5.0) == 5.0
        assert await service.settings.is_maintenance_mode() is False
        assert await service.settings.get_max_delivery_radius_km() == 15.0
