import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import get_db_session, session_commit, session_rollback
from enums.admin_action_type import AdminActionType
from enums.admin_target_type import AdminTargetType
from enums.realtime_event import RealtimeEvent
from exceptions.auth import PermissionDeniedException
from exceptions.backend import BackendException, AuditLogException
from exceptions.base import GigaEatsException
from models.auth_session import AuthSession
from repositories.admin_activity_log import AdminActivityLogRepository
from services.realtime import RealtimePublisher, ADMIN_ACTIVITY_LOGS
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class AuditTrail:
    """
    Writes the audit-log row that accompanies every admin mutation.

    Strict mode writes into the caller's session, so the audit row commits or
    rolls back together with the mutation, and a failed write raises
    AuditLogException. Best-effort mode writes in a separate transaction once
    the admin transaction has committed, and only logs a failure with the
    AUDIT_LOG_WRITE_FAILED marker.
    """

    def __init__(self, session: AsyncSession | Session, auth: AuthSession, strict: bool | None = None,
                 session_factory=get_db_session):
        self.session = session
        self.auth = auth
        self.strict = config.AUDIT_LOG_STRICT if strict is None else strict
        self.session_factory = session_factory
        self.last_log_id: str | None = None
        self._pending: list[tuple] | None = None

    async def record(self, action_type: AdminActionType, target_type: AdminTargetType,
                     target_id: str | None = None, details: dict | None = None) -> str | None:
        """
        Returns:
            ID of the audit row, or None when a best-effort write failed or was deferred
        """
        self.last_log_id = None
        if self.strict:
            try:
                self.last_log_id = await AdminActivityLogRepository(self.session, self.auth).log_admin_activity(
                    action_type, target_type, target_id, details
                )
                return self.last_log_id
            except BackendException as e:
                logger.error(f"AUDIT_LOG_WRITE_FAILED (strict): {action_type.value} "
                             f"{target_type.value}:{target_id}: {e.reason or e.message}")
                raise AuditLogException(action_type.value, reason=e.reason or e.message) from e

        if self._pending is not None:
            self._pending.append((action_type, target_type, target_id, details))
            return None
        return await self._write_best_effort(action_type, target_type, target_id, details)

    async def _write_best_effort(self, action_type: AdminActionType, target_type: AdminTargetType,
                                 target_id: str | None, details: dict | None) -> str | None:
        try:
            async with TransactionManager.atomic_transaction(self.session_factory) as audit_session:
                self.last_log_id = await AdminActivityLogRepository(audit_session, self.auth).log_admin_activity(
                    action_type, target_type, target_id, details
                )
            return self.last_log_id
        except (BackendException, SQLAlchemyError) as e:
            logger.error(f"AUDIT_LOG_WRITE_FAILED: {action_type.value} {target_type.value}:{target_id} "
                         f"by {self.auth.user_id}: {str(e)}")
            return None

    @asynccontextmanager
    async def deferred(self):
        """
        Hold best-effort records made inside the block and write them only
        when the block exits cleanly. Strict records are never deferred.
        """
        self._pending = []
        try:
            yield
        except BaseException:
            if self._pending:
                logger.info(f"Discarding {len(self._pending)} audit record(s) of a failed admin transaction")
            self._pending = None
            raise
        pending, self._pending = self._pending, None
        for action_type, target_type, target_id, details in pending:
            await self._write_best_effort(action_type, target_type, target_id, details)


class AdminServiceBase:
    """
    Shared plumbing for admin services.

    Mutations run inside admin_transaction(): the mutation and its audit
    record share one commit, and any failure rolls the session back.
    Realtime events are published only after the commit succeeded.
    """

    def __init__(self, session: AsyncSession | Session, auth: AuthSession,
                 publisher: RealtimePublisher | None = None, audit: AuditTrail | None = None):
        if not auth.is_admin:
            role = auth.role.value if auth.role else None
            logger.warning(f"User {auth.user_id} with role {role} tried to use {type(self).__name__}")
            raise PermissionDeniedException("manage the platform", role, "admin")
        self.session = session
        self.auth = auth
        self.publisher = publisher
        self.audit = audit or AuditTrail(session, auth)

    @asynccontextmanager
    async def admin_transaction(self):
        async with self.audit.deferred():
            try:
                yield
                await session_commit(self.session)
            except GigaEatsException:
                await session_rollback(self.session)
                raise
            except SQLAlchemyError as e:
                await session_rollback(self.session)
                logger.error(f"Admin transaction failed: {str(e)}")
                raise BackendException("Unable to save changes. Please try again.",
                                       operation="commit", reason=str(e)) from e

    async def publish(self, table: str, event: RealtimeEvent, record_id: str | None = None,
                      user_id: str | None = None, is_broadcast: bool = False) -> None:
        if self.publisher is None:
            return
        await self.publisher.publish(table, event, record_id, user_id=user_id, is_broadcast=is_broadcast)
        if self.audit.last_log_id is not None:
            await self.publisher.publish(ADMIN_ACTIVITY_LOGS, RealtimeEvent.INSERT, self.audit.last_log_id,
                                         user_id=self.auth.user_id, is_broadcast=True)
            self.audit.last_log_id = None
