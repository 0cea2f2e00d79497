from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, Text, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.delivery_method import DeliveryMethod
from enums.driver_order_status import DriverOrderStatus
from enums.order_status import OrderStatus
from models.base import Base, generate_uuid, utcnow


class Order(Base):
    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_number = Column(String, nullable=False, unique=True)
    vendor_id = Column(String(36), ForeignKey('vendors.id'), nullable=False)
    customer_id = Column(String(36), nullable=True)
    sales_agent_id = Column(String(36), nullable=True)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    delivery_method = Column(SQLEnum(DeliveryMethod), nullable=False, default=DeliveryMethod.OWN_FLEET)
    assigned_driver_id = Column(String(36), ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True)

    # Denormalized display fields (orders outlive vendor/customer edits)
    vendor_name = Column(String, nullable=False)
    customer_name = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True)
    delivery_address = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)

    subtotal = Column(Float, nullable=False, default=0.0)
    tax_amount = Column(Float, nullable=False, default=0.0)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False)

    estimated_delivery_time = Column(DateTime, nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    picked_up_at = Column(DateTime, nullable=True)
    out_for_delivery_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    # Admin tracking
    admin_notes = Column(Text, nullable=True)
    priority_level = Column(Integer, nullable=True)
    last_modified_by = Column(String(36), nullable=True)

    # Refunds
    refund_amount = Column(Float, nullable=True)
    refund_reason = Column(Text, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    refunded_by = Column(String(36), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Many-to-one, eager so async sessions never lazy-load
    vendor = relationship('Vendor', lazy='joined')
    driver = relationship('Driver', lazy='joined')

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_positive'),
    )


class DriverOrderRejection(Base):
    __tablename__ = 'driver_order_rejections'

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(String(36), ForeignKey('drivers.id', ondelete="CASCADE"), nullable=False)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete="CASCADE"), nullable=False)
    reason = Column(Text, nullable=False, default="Driver declined")
    rejected_at = Column(DateTime, default=utcnow, nullable=False)


class OrderDTO(BaseModel):
    id: str | None = None
    order_number: str | None = None
    vendor_id: str | None = None
    customer_id: str | None = None
    sales_agent_id: str | None = None
    status: OrderStatus | None = None
    delivery_method: DeliveryMethod | None = None
    assigned_driver_id: str | None = None
    vendor_name: str | None = None
    customer_name: str | None = None
    contact_phone: str | None = None
    delivery_address: str | None = None
    special_instructions: str | None = None
    subtotal: float | None = None
    tax_amount: float | None = None
    delivery_fee: float | None = None
    total_amount: float | None = None
    estimated_delivery_time: datetime | None = None
    assigned_at: datetime | None = None
    picked_up_at: datetime | None = None
    out_for_delivery_at: datetime | None = None
    delivered_at: datetime | None = None
    admin_notes: str | None = None
    priority_level: int | None = None
    last_modified_by: str | None = None
    refund_amount: float | None = None
    refund_reason: str | None = None
    refunded_at: datetime | None = None
    refunded_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DriverOrderDTO(BaseModel):
    """A delivery task as the driver sees it."""
    id: str
    order_number: str
    vendor_name: str
    vendor_address: str | None = None
    customer_name: str
    customer_phone: str | None = None
    delivery_address: str | None = None
    total_amount: float
    delivery_fee: float = 0.0
    special_instructions: str | None = None
    status: DriverOrderStatus
    estimated_delivery_time: datetime | None = None
    created_at: datetime | None = None
    assigned_at: datetime | None = None
    picked_up_at: datetime | None = None
    delivered_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
