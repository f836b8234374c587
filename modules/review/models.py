"""
Review Module - Models
========================
Product reviews (star rating + text), shown after moderation.
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_uuid


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    display_name = Column(String, nullable=True)
    rating = Column(Integer, nullable=False)  # 1-5
    title = Column(String, nullable=True)
    body = Column(Text, nullable=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product", foreign_keys=[product_id])

    __table_args__ = (
        Index("ix_review_product", "product_id"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating"),
    )
