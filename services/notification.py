import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit, session_rollback
from exceptions.admin import InvalidPreferenceKeyException
from exceptions.base import GigaEatsException
from models.auth_session import AuthSession
from models.notification_preferences import DriverNotificationPreferences, PREFERENCE_CATEGORIES
from repositories.user import UserRepository

logger = logging.getLogger(__name__)


class NotificationPreferencesService:
    """Driver notification preferences of the authenticated user."""

    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth
        self.users = UserRepository(session, auth)

    async def get_preferences(self) -> DriverNotificationPreferences:
        """Stored preferences; legacy rows are converted, missing rows yield defaults."""
        stored = await self.users.get_notification_preferences(self.auth.user_id)
        return DriverNotificationPreferences.from_storage(stored)

    async def update_preferences(self, preferences: DriverNotificationPreferences) -> DriverNotificationPreferences:
        """Persist the full preference set in the camelCase format."""
        try:
            await self.users.update_notification_preferences(self.auth.user_id, preferences.to_storage())
            await session_commit(self.session)
        except GigaEatsException:
            await session_rollback(self.session)
            raise
        if not preferences.is_valid():
            logger.warning(f"User {self.auth.user_id} saved preferences with no channel or no order alerts")
        logger.info(f"Notification preferences updated for user {self.auth.user_id}")
        return preferences

    async def toggle(self, key: str) -> DriverNotificationPreferences:
        """
        Flip one boolean preference and persist it.

        Raises:
            InvalidPreferenceKeyException: key is not a boolean preference
        """
        if key not in DriverNotificationPreferences.toggle_keys():
            raise InvalidPreferenceKeyException(key)
        current = await self.get_preferences()
        updated = current.model_copy(update={key: not getattr(current, key)})
        logger.info(f"User {self.auth.user_id} toggled {key} -> {getattr(updated, key)}")
        return await self.update_preferences(updated)

    @staticmethod
    def get_categories(preferences: DriverNotificationPreferences) -> dict[str, dict[str, bool]]:
        """Preference values grouped by display category."""
        return {
            category: {key: getattr(preferences, key) for key in keys}
            for category, keys in PREFERENCE_CATEGORIES.items()
        }
