"""
Custom Order Module - Models
===============================
Bespoke artwork requests: a reference image plus contact and preferences.
"""

import enum
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_uuid


class CustomOrderStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    QUOTED = "quoted"
    CLOSED = "closed"


class CustomOrderRequest(Base):
    __tablename__ = "custom_orders"

    id = Column(String(36), primary_key=True, default=new_uuid)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    customer_phone = Column(String, nullable=True)
    image_url = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    preferred_material = Column(String, nullable=True)
    preferred_size = Column(String, nullable=True)
    preferred_thickness = Column(String, nullable=True)
    status = Column(String, default=CustomOrderStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
