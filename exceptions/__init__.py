"""
Custom exceptions for GigaEats.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
GigaEatsException (base)
├── CartException
│   ├── EmptyCartException
│   ├── CartItemNotFoundException
│   └── InvalidCartQuantityException
├── OrderException
│   ├── OrderNotFoundException
│   ├── InvalidOrderStateException
│   ├── OrderStatusUpdateException
│   ├── DriverNotAvailableException
│   └── DriverNotFoundException
├── AuthException
│   └── PermissionDeniedException
├── AdminException
│   ├── UserNotFoundException
│   ├── TicketNotFoundException
│   ├── SettingNotFoundException
│   ├── SettingAlreadyExistsException
│   ├── NotificationNotFoundException
│   ├── VendorNotFoundException
│   └── InvalidPreferenceKeyException
└── BackendException
    ├── BackendFormatException
    └── AuditLogException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id="ord-1")

Front ends catch and display user-friendly messages:
    try:
        await workflow.start_navigation_to_customer(order)
    except GigaEatsException as e:
        message = handle_service_error(e)
"""

from .base import GigaEatsException
from .cart import CartException, EmptyCartException, CartItemNotFoundException, InvalidCartQuantityException
from .order import (
    OrderException,
    OrderNotFoundException,
    InvalidOrderStateException,
    OrderStatusUpdateException,
    DriverNotAvailableException,
    DriverNotFoundException
)
from .auth import AuthException, PermissionDeniedException
from .admin import (
    AdminException,
    UserNotFoundException,
    TicketNotFoundException,
    SettingNotFoundException,
    SettingAlreadyExistsException,
    NotificationNotFoundException,
    VendorNotFoundException,
    InvalidPreferenceKeyException
)
from .backend import BackendException, BackendFormatException, AuditLogException

__all__ = [
    # Base
    'GigaEatsException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartItemNotFoundException',
    'InvalidCartQuantityException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidOrderStateException',
    'OrderStatusUpdateException',
    'DriverNotAvailableException',
    'DriverNotFoundException',

    # Auth
    'AuthException',
    'PermissionDeniedException',

    # Admin
    'AdminException',
    'UserNotFoundException',
    'TicketNotFoundException',
    'SettingNotFoundException',
    'SettingAlreadyExistsException',
    'NotificationNotFoundException',
    'VendorNotFoundException',
    'InvalidPreferenceKeyException',

    # Backend
    'BackendException',
    'BackendFormatException',
    'AuditLogException',
]
