import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from models.admin_activity_log import AdminActivityLog, AdminActivityLogDTO
from models.auth_session import AuthSession
from models.filters import ActivityLogFilter
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class AdminActivityLogRepository:
    """Append-only admin audit trail."""

    STREAM_SNAPSHOT_LIMIT = 50

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    @TransactionManager.backend_call("log_admin_activity")
    async def log_admin_activity(self, action_type: AdminActionType, target_type: AdminTargetType,
                                 target_id: str | None = None, details: dict | None = None) -> str:
        """
        Append an audit row for the authenticated admin.

        Returns:
            ID of the new log row
        """
        log = AdminActivityLog(
            admin_user_id=self.auth.user_id,
            action_type=action_type.value,
            target_type=target_type.value,
            target_id=target_id,
            details=details or {}
        )
        self.session.add(log)
        await session_flush(self.session)
        logger.info(f"ADMIN_ACTIVITY: {self.auth.user_id} {action_type.value} "
                    f"{target_type.value}:{target_id}")
        return log.id

    @TransactionManager.backend_call("get_activity_logs")
    async def get_activity_logs(self, filters: ActivityLogFilter | None = None) -> list[AdminActivityLogDTO]:
        filters = filters or ActivityLogFilter()
        conditions = []
        if filters.action_type is not None:
            conditions.append(AdminActivityLog.action_type == filters.action_type)
        if filters.target_type is not None:
            conditions.append(AdminActivityLog.target_type == filters.target_type)
        if filters.admin_user_id is not None:
            conditions.append(AdminActivityLog.admin_user_id == filters.admin_user_id)
        if filters.start_date is not None:
            conditions.append(AdminActivityLog.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(AdminActivityLog.created_at <= filters.end_date)

        stmt = select(AdminActivityLog).where(*conditions).order_by(AdminActivityLog.created_at.desc())
        stmt = apply_page(stmt, filters)
        logs = await session_execute(stmt, self.session)
        return [AdminActivityLogDTO.model_validate(log, from_attributes=True) for log in logs.scalars().all()]

    async def get_recent_activity(self) -> list[AdminActivityLogDTO]:
        """Snapshot backing the realtime activity stream."""
        return await self.get_activity_logs(ActivityLogFilter(limit=self.STREAM_SNAPSHOT_LIMIT))
