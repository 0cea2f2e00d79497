"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.user import User
from models.vendor import Vendor
from models.driver import Driver, DeliveryTracking
from models.order import Order, DriverOrderRejection
from models.admin_activity_log import AdminActivityLog
from models.admin_notification import AdminNotification
from models.support_ticket import SupportTicket
from models.system_settings import SystemSetting

__all__ = [
    'Base',
    'User',
    'Vendor',
    'Driver',
    'DeliveryTracking',
    'Order',
    'DriverOrderRejection',
    'AdminActivityLog',
    'AdminNotification',
    'SupportTicket',
    'SystemSetting',
]
