import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from enums.order_status import OrderStatus
from enums.realtime_event import RealtimeEvent
from enums.user_role import UserRole
from models.admin_activity_log import AdminActivityLogDTO
from models.auth_session import AuthSession
from models.filters import UserFilter, VendorFilter, OrderFilter, SettingsFilter, ActivityLogFilter
from models.order import OrderDTO
from models.system_settings import SystemSettingDTO
from models.user import UserDTO, UserCreateDTO
from models.vendor import VendorDTO
from repositories.admin_activity_log import AdminActivityLogRepository
from repositories.order import OrderRepository
from repositories.system_settings import SystemSettingsRepository
from repositories.user import UserRepository
from repositories.vendor import VendorRepository
from services.audit import AdminServiceBase, AuditTrail
from services.realtime import RealtimePublisher

logger = logging.getLogger(__name__)


class AdminService(AdminServiceBase):
    """
    Admin management of users, vendors, orders and system settings.

    Every mutation is committed together with its audit-log record.
    """

    def __init__(self, session: AsyncSession | Session, auth: AuthSession,
                 publisher: RealtimePublisher | None = None, audit: AuditTrail | None = None):
        super().__init__(session, auth, publisher, audit)
        self.users = UserRepository(session, auth)
        self.vendors = VendorRepository(session, auth)
        self.orders = OrderRepository(session, auth)
        self.settings = SystemSettingsRepository(session, auth)
        self.activity_logs = AdminActivityLogRepository(session, auth)

    # Users

    async def get_users(self, filters: UserFilter | None = None) -> list[UserDTO]:
        return await self.users.get_users(filters)

    async def get_user(self, user_id: str) -> UserDTO:
        return await self.users.get_by_id(user_id)

    async def create_user(self, user_create_dto: UserCreateDTO) -> str:
        async with self.admin_transaction():
            user_id = await self.users.create(user_create_dto)
            await self.audit.record(AdminActionType.USER_CREATED, AdminTargetType.USER, user_id, {
                "email": user_create_dto.email,
                "role": user_create_dto.role.value,
            })
        await self.publish("users", RealtimeEvent.INSERT, user_id)
        return user_id

    async def update_user(self, user_dto: UserDTO) -> UserDTO:
        async with self.admin_transaction():
            await self.users.update(user_dto)
            changed = user_dto.model_dump(mode="json", exclude_none=True, exclude={"id"})
            await self.audit.record(AdminActionType.USER_UPDATED, AdminTargetType.USER, user_dto.id,
                                    {"changes": changed})
        await self.publish("users", RealtimeEvent.UPDATE, user_dto.id)
        return await self.users.get_by_id(user_dto.id)

    async def update_user_status(self, user_id: str, is_active: bool, reason: str | None = None) -> None:
        async with self.admin_transaction():
            await self.users.update_status(user_id, is_active)
            await self.audit.record(AdminActionType.USER_STATUS_CHANGED, AdminTargetType.USER, user_id,
                                    {"is_active": is_active, "reason": reason})
        await self.publish("users", RealtimeEvent.UPDATE, user_id)

    async def update_user_role(self, user_id: str, new_role: UserRole, reason: str | None = None) -> None:
        async with self.admin_transaction():
            await self.users.update_role(user_id, new_role)
            await self.audit.record(AdminActionType.ROLE_CHANGED, AdminTargetType.USER, user_id,
                                    {"new_role": new_role.value, "reason": reason})
        await self.publish("users", RealtimeEvent.UPDATE, user_id)

    async def delete_user(self, user_id: str, reason: str | None = None) -> None:
        """Soft delete: the user is deactivated, never removed."""
        async with self.admin_transaction():
            await self.users.soft_delete(user_id)
            await self.audit.record(AdminActionType.USER_DELETED, AdminTargetType.USER, user_id,
                                    {"reason": reason, "deletion_type": "soft_delete"})
        await self.publish("users", RealtimeEvent.UPDATE, user_id)

    # Vendors

    async def get_vendors(self, filters: VendorFilter | None = None) -> list[VendorDTO]:
        return await self.vendors.get_vendors(filters)

    async def approve_vendor(self, vendor_id: str, admin_notes: str | None = None) -> VendorDTO:
        async with self.admin_transaction():
            await self.vendors.approve(vendor_id, admin_notes)
            await self.audit.record(AdminActionType.VENDOR_APPROVED, AdminTargetType.VENDOR, vendor_id,
                                    {"admin_notes": admin_notes})
        await self.publish("vendors", RealtimeEvent.UPDATE, vendor_id)
        return await self.vendors.get_by_id(vendor_id)

    async def reject_vendor(self, vendor_id: str, rejection_reason: str, admin_notes: str | None = None) -> VendorDTO:
        async with self.admin_transaction():
            await self.vendors.reject(vendor_id, rejection_reason, admin_notes)
            await self.audit.record(AdminActionType.VENDOR_REJECTED, AdminTargetType.VENDOR, vendor_id,
                                    {"rejection_reason": rejection_reason, "admin_notes": admin_notes})
        await self.publish("vendors", RealtimeEvent.UPDATE, vendor_id)
        return await self.vendors.get_by_id(vendor_id)

    async def toggle_vendor_status(self, vendor_id: str, is_active: bool, reason: str | None = None) -> None:
        async with self.admin_transaction():
            await self.vendors.set_active(vendor_id, is_active)
            await self.audit.record(AdminActionType.VENDOR_STATUS_CHANGED, AdminTargetType.VENDOR, vendor_id,
                                    {"is_active": is_active, "reason": reason})
        await self.publish("vendors", RealtimeEvent.UPDATE, vendor_id)

    # Orders

    async def get_orders(self, filters: OrderFilter | None = None) -> list[OrderDTO]:
        return await self.orders.get_orders(filters)

    async def update_order_status(self, order_id: str, new_status: OrderStatus, admin_notes: str | None = None,
                                  priority_level: int | None = None) -> OrderDTO:
        async with self.admin_transaction():
            old_status = await self.orders.admin_update_status(order_id, new_status, admin_notes, priority_level)
            await self.audit.record(AdminActionType.ORDER_STATUS_UPDATED, AdminTargetType.ORDER, order_id, {
                "old_status": old_status.value,
                "new_status": new_status.value,
                "admin_notes": admin_notes,
                "priority_level": priority_level,
            })
        await self.publish("orders", RealtimeEvent.UPDATE, order_id)
        return await self.orders.get_by_id(order_id)

    async def process_order_refund(self, order_id: str, refund_amount: float, refund_reason: str) -> OrderDTO:
        async with self.admin_transaction():
            await self.orders.process_refund(order_id, refund_amount, refund_reason)
            await self.audit.record(AdminActionType.ORDER_REFUNDED, AdminTargetType.ORDER, order_id,
                                    {"refund_amount": refund_amount, "refund_reason": refund_reason})
        await self.publish("orders", RealtimeEvent.UPDATE, order_id)
        return await self.orders.get_by_id(order_id)

    # System settings

    async def get_settings(self, filters: SettingsFilter | None = None) -> list[SystemSettingDTO]:
        return await self.settings.get_settings(filters)

    async def get_setting(self, key: str) -> SystemSettingDTO:
        return await self.settings.get(key)

    async def create_setting(self, key: str, value: Any, description: str | None = None,
                             category: str = "general", is_public: bool = False) -> SystemSettingDTO:
        async with self.admin_transaction():
            setting = await self.settings.create(key, value, description, category, is_public)
            await self.audit.record(AdminActionType.SYSTEM_SETTING_UPDATED, AdminTargetType.SETTING, setting.id, {
                "setting_key": key,
                "new_value": value,
                "action": "created",
            })
        await self.publish("system_settings", RealtimeEvent.INSERT, setting.id, is_broadcast=True)
        return setting

    async def update_setting(self, key: str, value: Any, reason: str | None = None) -> SystemSettingDTO:
        async with self.admin_transaction():
            await self.settings.update(key, value)
            setting = await self.settings.get(key)
            await self.audit.record(AdminActionType.SYSTEM_SETTING_UPDATED, AdminTargetType.SETTING, setting.id, {
                "setting_key": key,
                "new_value": value,
                "reason": reason,
                "action": "updated",
            })
        await self.publish("system_settings", RealtimeEvent.UPDATE, setting.id, is_broadcast=True)
        return setting

    async def delete_setting(self, key: str, reason: str | None = None) -> None:
        async with self.admin_transaction():
            setting = await self.settings.get(key)
            await self.settings.delete(key)
            await self.audit.record(AdminActionType.SYSTEM_SETTING_UPDATED, AdminTargetType.SETTING, setting.id, {
                "setting_key": key,
                "reason": reason,
                "action": "deleted",
            })
        await self.publish("system_settings", RealtimeEvent.DELETE, setting.id, is_broadcast=True)

    # Activity log

    async def get_activity_logs(self, filters: ActivityLogFilter | None = None) -> list[AdminActivityLogDTO]:
        return await self.activity_logs.get_activity_logs(filters)
