import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Awaitable, Callable

from pydantic import BaseModel, ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

import config
from db import get_db_session
from enums.realtime_event import RealtimeEvent
from exceptions.base import GigaEatsException
from models.auth_session import AuthSession
from models.filters import NotificationFilter, TicketFilter
from repositories.admin_activity_log import AdminActivityLogRepository
from repositories.admin_notification import AdminNotificationRepository
from repositories.support_ticket import SupportTicketRepository

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "realtime:"
SNAPSHOT_LIMIT = 50

ADMIN_NOTIFICATIONS = "admin_notifications"
ADMIN_ACTIVITY_LOGS = "admin_activity_logs"
SUPPORT_TICKETS = "support_tickets"
DEFAULT_TABLES = (ADMIN_NOTIFICATIONS, ADMIN_ACTIVITY_LOGS, SUPPORT_TICKETS)

SnapshotListener = Callable[[str, list], Awaitable[None] | None]
CountsListener = Callable[[int, int], Awaitable[None] | None]


def get_redis() -> Redis:
    return Redis(host=config.REDIS_HOST, port=config.REDIS_PORT, password=config.REDIS_PASSWORD)


def channel_for(table: str) -> str:
    return f"{CHANNEL_PREFIX}{table}"


class RealtimeChangeEvent(BaseModel):
    table: str
    event: RealtimeEvent
    record_id: str | None = None
    user_id: str | None = None
    is_broadcast: bool = False

    def matches(self, user_id: str) -> bool:
        return self.is_broadcast or self.user_id == user_id


class RealtimePublisher:
    """Publishes row change events after a mutation has been committed."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, table: str, event: RealtimeEvent, record_id: str | None = None,
                      user_id: str | None = None, is_broadcast: bool = False) -> bool:
        """
        Returns:
            False when the event could not be published; the committed row is unaffected
        """
        change = RealtimeChangeEvent(table=table, event=event, record_id=record_id,
                                     user_id=user_id, is_broadcast=is_broadcast)
        try:
            await self.redis.publish(channel_for(table), change.model_dump_json())
            return True
        except RedisError as e:
            logger.error(f"Failed to publish {event.value} on {table} for {record_id}: {str(e)}")
            return False


async def _notify(listener: Callable, *args) -> None:
    result = listener(*args)
    if asyncio.iscoroutine(result):
        await result


class RealtimeNotificationService:
    """
    Keeps the admin's notifications, activity log and tickets fresh.

    Every matching change event triggers a full snapshot refetch that
    replaces the in-memory list; counts are refreshed on a timer. A dropped
    subscription is retried after REALTIME_RECONNECT_DELAY_SECONDS until
    stop() is called.
    """

    def __init__(
        self,
        redis: Redis,
        auth: AuthSession,
        tables: tuple[str, ...] = DEFAULT_TABLES,
        session_factory: Callable[[], AbstractAsyncContextManager] = get_db_session,
        reconnect_delay: float | None = None,
        counts_refresh_interval: float | None = None
    ):
        self.redis = redis
        self.auth = auth
        self.tables = tables
        self.session_factory = session_factory
        self.reconnect_delay = (config.REALTIME_RECONNECT_DELAY_SECONDS if reconnect_delay is None
                                else reconnect_delay)
        self.counts_refresh_interval = (config.REALTIME_COUNTS_REFRESH_SECONDS if counts_refresh_interval is None
                                        else counts_refresh_interval)

        self.snapshots: dict[str, list] = {table: [] for table in tables}
        self.unread_count = 0
        self.total_count = 0
        self.is_connected = False

        self._snapshot_listeners: list[SnapshotListener] = []
        self._counts_listeners: list[CountsListener] = []
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def notifications(self) -> list:
        return self.snapshots.get(ADMIN_NOTIFICATIONS, [])

    @property
    def activity_logs(self) -> list:
        return self.snapshots.get(ADMIN_ACTIVITY_LOGS, [])

    @property
    def tickets(self) -> list:
        return self.snapshots.get(SUPPORT_TICKETS, [])

    def add_snapshot_listener(self, listener: SnapshotListener) -> None:
        self._snapshot_listeners.append(listener)

    def add_counts_listener(self, listener: CountsListener) -> None:
        self._counts_listeners.append(listener)

    async def _fetch_snapshot(self, table: str, session) -> list:
        if table == ADMIN_NOTIFICATIONS:
            return await AdminNotificationRepository(session, self.auth).get_notifications(
                NotificationFilter(limit=SNAPSHOT_LIMIT)
            )
        if table == ADMIN_ACTIVITY_LOGS:
            return await AdminActivityLogRepository(session, self.auth).get_recent_activity()
        if table == SUPPORT_TICKETS:
            return await SupportTicketRepository(session, self.auth).get_tickets(TicketFilter(limit=SNAPSHOT_LIMIT))
        raise ValueError(f"No snapshot query for table {table}")

    async def refresh_snapshot(self, table: str) -> list:
        async with self.session_factory() as session:
            snapshot = await self._fetch_snapshot(table, session)
        self.snapshots[table] = snapshot
        logger.debug(f"Realtime snapshot of {table} replaced ({len(snapshot)} rows)")
        for listener in self._snapshot_listeners:
            await _notify(listener, table, snapshot)
        return snapshot

    async def refresh_counts(self) -> tuple[int, int]:
        async with self.session_factory() as session:
            repository = AdminNotificationRepository(session, self.auth)
            total = await repository.get_total_count()
            unread = await repository.get_unread_count()
        self.total_count, self.unread_count = total, unread
        for listener in self._counts_listeners:
            await _notify(listener, total, unread)
        return total, unread

    async def handle_message(self, data: bytes | str) -> bool:
        """
        Process one raw pub/sub payload.

        Returns:
            True when the event matched and the snapshot was refetched
        """
        try:
            event = RealtimeChangeEvent.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed realtime event: {str(e)}")
            return False

        if event.table not in self.snapshots or not event.matches(self.auth.user_id):
            return False

        logger.info(f"Realtime {event.event.value} on {event.table} ({event.record_id})")
        await self.refresh_snapshot(event.table)
        if event.table == ADMIN_NOTIFICATIONS:
            await self.refresh_counts()
        return True

    async def _listen(self) -> None:
        channels = [channel_for(table) for table in self.tables]
        while self._running:
            pubsub = self.redis.pubsub()
            try:
                await pubsub.subscribe(*channels)
                self.is_connected = True
                logger.info(f"Realtime subscribed to {', '.join(channels)}")
                async for message in pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    try:
                        await self.handle_message(message["data"])
                    except GigaEatsException as e:
                        logger.error(f"Realtime snapshot refresh failed: {e.message}")
                    except Exception as e:
                        logger.error(f"Error handling realtime event: {str(e)}")
            except (RedisError, OSError) as e:
                logger.warning(f"Realtime connection lost: {str(e)}; reconnecting in {self.reconnect_delay}s")
            finally:
                self.is_connected = False
                await pubsub.aclose()
            if self._running:
                await asyncio.sleep(self.reconnect_delay)

    async def _refresh_counts_periodically(self) -> None:
        while self._running:
            try:
                await self.refresh_counts()
            except GigaEatsException as e:
                logger.error(f"Periodic notification counts refresh failed: {e.message}")
            except Exception as e:
                logger.error(f"Error in notification counts refresh: {str(e)}")
            await asyncio.sleep(self.counts_refresh_interval)

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        for table in self.tables:
            try:
                await self.refresh_snapshot(table)
            except GigaEatsException as e:
                logger.error(f"Initial snapshot of {table} failed: {e.message}")
        self._tasks = [
            asyncio.create_task(self._listen()),
            asyncio.create_task(self._refresh_counts_periodically()),
        ]
        logger.info(f"Realtime notification service started for admin {self.auth.user_id}")

    async def stop(self) -> None:
        self._running = False
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Realtime notification service stopped")
