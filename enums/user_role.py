from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES_AGENT = "sales_agent"
    VENDOR = "vendor"
    DRIVER = "driver"
    CUSTOMER = "customer"
