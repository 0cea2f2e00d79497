from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, String, Boolean, JSON
from sqlalchemy import Enum as SQLEnum

from enums.user_role import UserRole
from models.base import Base, generate_uuid, utcnow


class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.CUSTOMER)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    # Driver notification preferences (camelCase JSON, legacy snake_case rows still exist)
    notification_preferences = Column(JSON, nullable=True)

    last_sign_in_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class UserDTO(BaseModel):
    id: str | None = None
    email: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
    is_verified: bool | None = None
    last_sign_in_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserCreateDTO(BaseModel):
    """Payload for admin-side user creation."""
    email: str
    full_name: str
    phone_number: str | None = None
    role: UserRole = UserRole.CUSTOMER
    is_active: bool = True
    is_verified: bool = False
