from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, String, Boolean, Float, Integer, ForeignKey
from sqlalchemy import Enum as SQLEnum

from enums.driver_order_status import DriverOrderStatus
from enums.driver_status import DriverStatus
from models.base import Base, generate_uuid, utcnow


class Driver(Base):
    __tablename__ = 'drivers'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    status = Column(SQLEnum(DriverStatus), nullable=False, default=DriverStatus.OFFLINE)
    is_active = Column(Boolean, nullable=False, default=True)

    # Granular workflow position; arrived_at_customer only ever lives here
    current_delivery_status = Column(SQLEnum(DriverOrderStatus), nullable=True)

    last_latitude = Column(Float, nullable=True)
    last_longitude = Column(Float, nullable=True)
    last_seen = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class DeliveryTracking(Base):
    """Location breadcrumb recorded while a driver is on a delivery."""
    __tablename__ = 'delivery_tracking'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    driver_id = Column(String(36), ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    speed = Column(Float, nullable=True)
    heading = Column(Float, nullable=True)
    accuracy = Column(Float, nullable=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)


class DriverDTO(BaseModel):
    id: str | None = None
    user_id: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    status: DriverStatus | None = None
    is_active: bool | None = None
    current_delivery_status: DriverOrderStatus | None = None
    last_latitude: float | None = None
    last_longitude: float | None = None
    last_seen: datetime | None = None


class DriverEarningsDTO(BaseModel):
    total_earnings: float
    total_deliveries: int
    average_per_delivery: float
    period_start: datetime | None = None
    period_end: datetime | None = None
