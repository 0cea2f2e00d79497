from pydantic import BaseModel

from enums.user_role import UserRole


class AuthSession(BaseModel):
    """
    The authenticated actor.

    Passed explicitly into every repository and service that needs to know
    who is acting, instead of being read from a process-wide singleton.
    """
    user_id: str
    role: UserRole
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER
