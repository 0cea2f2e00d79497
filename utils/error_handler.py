"""
Error Handler Utility

Maps domain exceptions to user-facing messages through one lookup table, so
every screen shows the same wording for the same failure.

Usage:
    from utils.error_handler import handle_service_error

    try:
        await workflow.confirm_pickup(order)
    except GigaEatsException as e:
        state = AsyncValue.failure(handle_service_error(e))
"""

import logging

from exceptions import (
    GigaEatsException,
    EmptyCartException,
    CartItemNotFoundException,
    InvalidCartQuantityException,
    OrderNotFoundException,
    InvalidOrderStateException,
    OrderStatusUpdateException,
    DriverNotAvailableException,
    DriverNotFoundException,
    PermissionDeniedException,
    UserNotFoundException,
    TicketNotFoundException,
    SettingNotFoundException,
    SettingAlreadyExistsException,
    NotificationNotFoundException,
    VendorNotFoundException,
    InvalidPreferenceKeyException,
    BackendException,
    BackendFormatException,
    AuditLogException,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Failed to load data. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."

# None means the exception's own message is already user-facing
ERROR_MESSAGES: dict[type[GigaEatsException], str | None] = {
    # Cart
    EmptyCartException: "Your cart is empty.",
    CartItemNotFoundException: "This item is no longer in your cart.",
    InvalidCartQuantityException: None,

    # Orders and drivers
    OrderNotFoundException: "Order not found.",
    InvalidOrderStateException: None,
    OrderStatusUpdateException: None,
    DriverNotAvailableException: None,
    DriverNotFoundException: "Driver profile not found.",
    PermissionDeniedException: None,

    # Admin
    UserNotFoundException: "User not found.",
    TicketNotFoundException: "Support ticket not found.",
    SettingNotFoundException: "Setting not found.",
    SettingAlreadyExistsException: "A setting with this key already exists.",
    NotificationNotFoundException: "Notification not found.",
    VendorNotFoundException: "Vendor not found.",
    InvalidPreferenceKeyException: "Unknown notification preference.",

    # Backend
    BackendException: "Unable to reach the server. Please check your connection and try again.",
    BackendFormatException: "Received unexpected data from the server. Please try again later.",
    AuditLogException: "The change could not be recorded in the audit log and was not saved.",
}


def handle_service_error(exception: GigaEatsException) -> str:
    """
    Convert a domain exception to a user-facing message.

    The lookup is by exact type; unmapped types get the generic
    "Failed to load data" message.
    """
    logger.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")

    if type(exception) not in ERROR_MESSAGES:
        logger.error(f"Unmapped exception type: {type(exception).__name__}")
        return GENERIC_ERROR_MESSAGE

    message = ERROR_MESSAGES[type(exception)]
    return message if message is not None else exception.message


def handle_unexpected_error(exception: Exception) -> str:
    """
    Handle exceptions outside the GigaEatsException hierarchy.

    Logs the full traceback and returns a generic message.
    """
    logger.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return UNEXPECTED_ERROR_MESSAGE
