import logging
from typing import Any

from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from exceptions.admin import SettingNotFoundException, SettingAlreadyExistsException
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import SettingsFilter
from models.system_settings import SystemSetting, SystemSettingDTO
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class SystemSettingsRepository:
    """
    Repository for platform-wide runtime configuration.

    Provides CRUD operations for the key-value system_settings store, used
    for configuration that can change without a redeploy.
    """

    DEFAULT_LIMIT = 100

    # Well-known keys and their defaults
    MIN_ORDER_AMOUNT = "min_order_amount"
    MAINTENANCE_MODE = "maintenance_mode"
    MAX_DELIVERY_RADIUS_KM = "max_delivery_radius_km"

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    async def _get_row(self, key: str) -> SystemSetting | None:
        stmt = select(SystemSetting).where(SystemSetting.setting_key == key).execution_options(populate_existing=True)
        result = await session_execute(stmt, self.session)
        return result.scalar()

    @TransactionManager.backend_call("get_system_settings")
    async def get_settings(self, filters: SettingsFilter | None = None) -> list[SystemSettingDTO]:
        """
        List settings ordered by category, then key.

        search_query matches setting_key or description (case-insensitive).
        """
        filters = filters or SettingsFilter()
        conditions = []
        if filters.category is not None:
            conditions.append(SystemSetting.category == filters.category)
        if filters.is_public is not None:
            conditions.append(SystemSetting.is_public.is_(filters.is_public))
        if filters.search_query:
            pattern = f"%{filters.search_query}%"
            conditions.append(or_(SystemSetting.setting_key.ilike(pattern),
                                  SystemSetting.description.ilike(pattern)))

        stmt = (select(SystemSetting)
                .where(*conditions)
                .order_by(SystemSetting.category.asc(), SystemSetting.setting_key.asc()))
        stmt = apply_page(stmt, filters, self.DEFAULT_LIMIT)
        settings = await session_execute(stmt, self.session)
        return [SystemSettingDTO.model_validate(setting, from_attributes=True)
                for setting in settings.scalars().all()]

    @TransactionManager.backend_call("get_system_setting")
    async def get(self, key: str) -> SystemSettingDTO:
        """
        Get a setting by key.

        Raises:
            SettingNotFoundException: no such key
        """
        setting = await self._get_row(key)
        if setting is None:
            raise SettingNotFoundException(key)
        return SystemSettingDTO.model_validate(setting, from_attributes=True)

    @TransactionManager.backend_call("get_system_setting_value")
    async def get_value(self, key: str, default: Any = None) -> Any:
        setting = await self._get_row(key)
        if setting is None or setting.setting_value is None:
            return default
        return setting.setting_value

    @TransactionManager.backend_call("create_system_setting")
    async def create(self, key: str, value: Any, description: str | None = None,
                     category: str = "general", is_public: bool = False) -> SystemSettingDTO:
        if await self._get_row(key) is not None:
            raise SettingAlreadyExistsException(key)
        setting = SystemSetting(
            setting_key=key,
            setting_value=value,
            description=description,
            category=category,
            is_public=is_public,
            updated_by=self.auth.user_id
        )
        self.session.add(setting)
        await session_flush(self.session)
        logger.info(f"System setting {key} created in category {category}")
        return SystemSettingDTO.model_validate(setting, from_attributes=True)

    @TransactionManager.backend_call("update_system_setting")
    async def update(self, key: str, value: Any) -> None:
        stmt = (update(SystemSetting)
                .where(SystemSetting.setting_key == key)
                .values(setting_value=value, updated_by=self.auth.user_id, updated_at=utcnow()))
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise SettingNotFoundException(key)
        logger.info(f"System setting {key} updated by {self.auth.user_id}")

    @TransactionManager.backend_call("delete_system_setting")
    async def delete(self, key: str) -> None:
        stmt = delete(SystemSetting).where(SystemSetting.setting_key == key)
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise SettingNotFoundException(key)
        logger.info(f"System setting {key} deleted by {self.auth.user_id}")

    async def get_min_order_amount(self, default: float = 0.0) -> float:
        value = await self.get_value(self.MIN_ORDER_AMOUNT, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid {self.MIN_ORDER_AMOUNT} setting {value!r}, using {default}")
            return default

    async def is_maintenance_mode(self) -> bool:
        return bool(await self.get_value(self.MAINTENANCE_MODE, False))

    async def get_max_delivery_radius_km(self, default: float = 15.0) -> float:
        value = await self.get_value(self.MAX_DELIVERY_RADIUS_KM, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid {self.MAX_DELIVERY_RADIUS_KM} setting {value!r}, using {default}")
            return default
