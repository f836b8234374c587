"""
Newsletter Module - Models
=============================
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_uuid


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
