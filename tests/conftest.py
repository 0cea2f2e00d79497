"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# config.py reads the environment at import time
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("AUDIT_LOG_STRICT", "true")
os.environ.setdefault("LOG_MASK_SECRETS", "true")

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from enums.user_role import UserRole
from models.auth_session import AuthSession


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest.fixture
def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    """Create test database session."""
    async with test_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


# ============================================================================
# Auth Fixtures
# ============================================================================

@pytest.fixture
def admin_auth():
    return AuthSession(user_id="admin-1", role=UserRole.ADMIN, email="admin@gigaeats.test")


@pytest.fixture
def driver_auth():
    return AuthSession(user_id="driver-user-1", role=UserRole.DRIVER, email="driver@gigaeats.test")


@pytest.fixture
def customer_auth():
    return AuthSession(user_id="customer-1", role=UserRole.CUSTOMER, email="customer@gigaeats.test")


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def make_user(test_session):
    """Factory inserting a user row; returns the ORM object."""
    from models.user import User

    async def _make_user(user_id: str, role: UserRole = UserRole.CUSTOMER, **kwargs):
        user = User(
            id=user_id,
            email=kwargs.pop("email", f"{user_id}@gigaeats.test"),
            full_name=kwargs.pop("full_name", user_id.replace("-", " ").title()),
            role=role,
            **kwargs
        )
        test_session.add(user)
        await test_session.flush()
        return user

    return _make_user


@pytest.fixture
def make_vendor(test_session):
    from models.vendor import Vendor

    async def _make_vendor(vendor_id: str = "vendor-1", **kwargs):
        vendor = Vendor(
            id=vendor_id,
            business_name=kwargs.pop("business_name", "Nasi Lemak Corner"),
            business_address=kwargs.pop("business_address", "12 Jalan Bukit Bintang"),
            **kwargs
        )
        test_session.add(vendor)
        await test_session.flush()
        return vendor

    return _make_vendor


@pytest.fixture
def make_driver(test_session, make_user):
    """Factory inserting a user with role driver plus its driver profile."""
    from enums.driver_status import DriverStatus
    from models.driver import Driver

    async def _make_driver(driver_id: str = "driver-1", user_id: str = "driver-user-1",
                           status: DriverStatus = DriverStatus.ONLINE, **kwargs):
        await make_user(user_id, UserRole.DRIVER)
        driver = Driver(
            id=driver_id,
            user_id=user_id,
            full_name=kwargs.pop("full_name", "Ahmad Driver"),
            status=status,
            **kwargs
        )
        test_session.add(driver)
        await test_session.flush()
        return driver

    return _make_driver


@pytest.fixture
def make_order(test_session):
    """Factory inserting an order; the vendor row must already exist."""
    from enums.delivery_method import DeliveryMethod
    from enums.order_status import OrderStatus
    from models.order import Order

    async def _make_order(order_id: str, status: OrderStatus = OrderStatus.READY, vendor_id: str = "vendor-1",
                          delivery_method: DeliveryMethod = DeliveryMethod.OWN_FLEET, **kwargs):
        order = Order(
            id=order_id,
            order_number=kwargs.pop("order_number", f"GE-{order_id}"),
            vendor_id=vendor_id,
            vendor_name=kwargs.pop("vendor_name", "Nasi Lemak Corner"),
            customer_name=kwargs.pop("customer_name", "Siti Customer"),
            status=status,
            delivery_method=delivery_method,
            total_amount=kwargs.pop("total_amount", 164.0),
            delivery_fee=kwargs.pop("delivery_fee", 5.0),
            **kwargs
        )
        test_session.add(order)
        await test_session.flush()
        return order

    return _make_order
