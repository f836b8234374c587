"""
Order Module - Checkout Form Schemas
=======================================
"""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from config.settings import DEFAULT_COUNTRY
from common.helpers import EMAIL_RE

PHONE_RE = re.compile(r"^(03\d{9}|(\+92|0092)3\d{9})$")
POSTAL_CODE_RE = re.compile(r"^\d{5}$")


class AddressForm(BaseModel):
    line1: str = Field(..., min_length=5, max_length=200)
    line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    province: str = Field(..., min_length=2, max_length=100)
    postal_code: str

    @field_validator("line1", "city", "province", "postal_code", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("line2", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, v: str) -> str:
        if not POSTAL_CODE_RE.match(v):
            raise ValueError("Postal code must be 5 digits")
        return v

    def to_record(self) -> dict:
        """Address JSON as stored on the order."""
        return {
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "province": self.province,
            "postal_code": self.postal_code,
            "country": DEFAULT_COUNTRY,
        }


class CheckoutItem(BaseModel):
    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0)


class CheckoutForm(BaseModel):
    email: str
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: str
    shipping_address: AddressForm
    use_same_address: bool = True
    billing_address: Optional[AddressForm] = None
    order_notes: Optional[str] = Field(None, max_length=500)
    items: List[CheckoutItem] = Field(default_factory=list)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        v = v.strip().lower() if isinstance(v, str) else ""
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("full_name", mode="before")
    @classmethod
    def _name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, v):
        v = re.sub(r"[\s-]", "", v) if isinstance(v, str) else v
        if not isinstance(v, str) or not PHONE_RE.match(v):
            raise ValueError("Please enter a valid Pakistani phone number")
        return v

    @model_validator(mode="after")
    def _billing_required(self):
        if not self.use_same_address and self.billing_address is None:
            raise ValueError("Billing address is required")
        return self

    def billing_record(self) -> dict:
        if self.use_same_address or self.billing_address is None:
            return self.shipping_address.to_record()
        return self.billing_address.to_record()
