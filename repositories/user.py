import logging

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.user_role import UserRole
from exceptions.admin import UserNotFoundException
from models.auth_session import AuthSession
from models.base import utcnow
from models.filters import UserFilter
from models.user import User, UserDTO, UserCreateDTO
from repositories.pagination import apply_page
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession | Session, auth: AuthSession):
        self.session = session
        self.auth = auth

    async def _update_values(self, user_id: str, **values) -> None:
        stmt = update(User).where(User.id == user_id).values(updated_at=utcnow(), **values)
        result = await session_execute(stmt, self.session)
        if result.rowcount == 0:
            raise UserNotFoundException(user_id)

    @TransactionManager.backend_call("get_users")
    async def get_users(self, filters: UserFilter | None = None) -> list[UserDTO]:
        """Users newest first; search_query matches email or full name."""
        filters = filters or UserFilter()
        conditions = []
        if filters.search_query:
            pattern = f"%{filters.search_query}%"
            conditions.append(or_(User.email.ilike(pattern), User.full_name.ilike(pattern)))
        if filters.role is not None:
            conditions.append(User.role == filters.role)
        if filters.is_verified is not None:
            conditions.append(User.is_verified.is_(filters.is_verified))
        if filters.is_active is not None:
            conditions.append(User.is_active.is_(filters.is_active))

        stmt = select(User).where(*conditions).order_by(User.created_at.desc())
        stmt = apply_page(stmt, filters)
        users = await session_execute(stmt, self.session)
        return [UserDTO.model_validate(user, from_attributes=True) for user in users.scalars().all()]

    @TransactionManager.backend_call("get_user")
    async def get_by_id(self, user_id: str) -> UserDTO:
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        user = await session_execute(stmt, self.session)
        user = user.scalar()
        if user is None:
            raise UserNotFoundException(user_id)
        return UserDTO.model_validate(user, from_attributes=True)

    @TransactionManager.backend_call("create_user")
    async def create(self, user_create_dto: UserCreateDTO) -> str:
        user = User(**user_create_dto.model_dump())
        self.session.add(user)
        await session_flush(self.session)
        logger.info(f"User {user.id} created with role {user.role.value}")
        return user.id

    @TransactionManager.backend_call("update_user")
    async def update(self, user_dto: UserDTO) -> None:
        """Write every non-None field of user_dto; id selects the row."""
        user_dto_dict = user_dto.model_dump(exclude={"id", "created_at", "updated_at"})
        none_keys = [k for k, v in user_dto_dict.items() if v is None]
        for k in none_keys:
            user_dto_dict.pop(k)
        await self._update_values(user_dto.id, **user_dto_dict)

    @TransactionManager.backend_call("update_user_status")
    async def update_status(self, user_id: str, is_active: bool) -> None:
        await self._update_values(user_id, is_active=is_active)

    @TransactionManager.backend_call("update_user_role")
    async def update_role(self, user_id: str, role: UserRole) -> None:
        await self._update_values(user_id, role=role)

    @TransactionManager.backend_call("delete_user")
    async def soft_delete(self, user_id: str) -> None:
        """Deactivate the user; rows are never removed."""
        await self._update_values(user_id, is_active=False)

    @TransactionManager.backend_call("get_notification_preferences")
    async def get_notification_preferences(self, user_id: str) -> dict | None:
        """Raw preference JSON as stored; None when the user has never saved any."""
        stmt = select(User.notification_preferences).where(User.id == user_id)
        result = await session_execute(stmt, self.session)
        row = result.first()
        if row is None:
            raise UserNotFoundException(user_id)
        return row[0]

    @TransactionManager.backend_call("update_notification_preferences")
    async def update_notification_preferences(self, user_id: str, preferences: dict) -> None:
        await self._update_values(user_id, notification_preferences=preferences)
