"""
Custom Order Module - Form Schema
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from common.helpers import EMAIL_RE



class CustomOrderForm(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_email: str
    customer_phone: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)
    preferred_material: Optional[str] = None
    preferred_size: Optional[str] = None
    preferred_thickness: Optional[str] = None
    image_path: Optional[str] = None

    @field_validator("customer_name", mode="before")
    @classmethod
    def _name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("customer_email", mode="before")
    @classmethod
    def _email(cls, v):
        v = v.strip().lower() if isinstance(v, str) else ""
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address")
        return v
