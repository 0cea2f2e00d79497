"""
Authorization exceptions.
"""

from .base import GigaEatsException


class AuthException(GigaEatsException):
    """Base exception for authorization errors."""
    pass


class PermissionDeniedException(AuthException):
    """Raised when the authenticated role may not perform an action."""

    def __init__(self, action: str, role: str | None, required_role: str):
        super().__init__(
            f"Only {required_role} users can {action}",
            details={'action': action, 'role': role, 'required_role': required_role}
        )
        self.action = action
        self.role = role
        self.required_role = required_role
