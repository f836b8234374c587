"""
Order Module - Models
======================
Order with a per-item snapshot (name, variant, sku, price) for the audit trail.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, BigInteger, Numeric, Text, JSON,
    ForeignKey, DateTime, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_uuid


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_number = Column(String, unique=True, nullable=False, index=True)
    status = Column(String, default=OrderStatus.PENDING.value, nullable=False)

    # Contact
    customer_email = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)

    # {line1, line2, city, province, postal_code, country}
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=False)

    # Amounts
    subtotal = Column(BigInteger, nullable=False)
    shipping_cost = Column(BigInteger, default=0, nullable=False)
    discount_amount = Column(BigInteger, default=0, nullable=False)
    tax_rate = Column(Numeric(5, 2), default=0, nullable=False)
    tax_amount = Column(BigInteger, default=0, nullable=False)
    total_amount = Column(BigInteger, nullable=False)

    # Payment (cash on delivery: no intent)
    payment_method = Column(String, nullable=False)
    payment_intent_id = Column(String, nullable=True)

    notes = Column(Text, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_order_total"),
    )

    @property
    def grand_total(self) -> int:
        """subtotal + shipping + tax - discount (the value stored as total_amount)."""
        return max(0, self.subtotal + (self.shipping_cost or 0) + (self.tax_amount or 0) - (self.discount_amount or 0))


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id", ondelete="SET NULL"), nullable=True)

    # Snapshot at time of purchase
    product_name = Column(String, nullable=False)
    variant_description = Column(String, nullable=True)
    sku = Column(String, nullable=False)
    unit_price = Column(BigInteger, nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(BigInteger, nullable=False)

    order = relationship("Order", back_populates="items")
    variant = relationship("ProductVariant")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_qty"),
    )
