"""
Backend access exceptions.

Repositories catch SQLAlchemy, redis and pydantic errors once and re-raise
them as one of these, so callers never see raw driver exceptions.
"""

from .base import GigaEatsException


class BackendException(GigaEatsException):
    """Raised when a backend call fails."""

    def __init__(self, message: str = "Backend request failed", operation: str | None = None,
                 reason: str | None = None):
        super().__init__(
            message,
            details={'operation': operation, 'reason': reason}
        )
        self.operation = operation
        self.reason = reason


class BackendFormatException(BackendException):
    """Raised when a backend row or JSON payload cannot be parsed."""

    def __init__(self, field: str, reason: str | None = None):
        super().__init__(
            f"Malformed backend data in field '{field}'",
            operation="parse",
            reason=reason
        )
        self.field = field
        self.details['field'] = field


class AuditLogException(BackendException):
    """Raised when an audit-log row cannot be written in strict mode."""

    def __init__(self, action_type: str, reason: str | None = None):
        super().__init__(
            f"Failed to write audit log for '{action_type}'",
            operation="log_admin_activity",
            reason=reason
        )
        self.action_type = action_type
        self.details['action_type'] = action_type
