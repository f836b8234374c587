"""
Cart Module - Models
=====================
Line items held in the shopper's client-side cart. One item per variant.
"""

from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class CartImage:
    """Image reference shown next to a cart line."""
    storage_path: str
    alt_text: Optional[str] = None
    display_order: int = 0
    blurhash: Optional[str] = None


@dataclass
class CartItem:
    variant_id: str                 # unique key within a cart
    product_name: str
    variant_description: str
    sku: str
    price: int                      # unit price
    quantity: int = 1
    image: Optional[CartImage] = None

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        image = data.get("image")
        return cls(
            variant_id=str(data["variant_id"]),
            product_name=data.get("product_name", ""),
            variant_description=data.get("variant_description", ""),
            sku=data.get("sku", ""),
            price=data.get("price", 0),
            quantity=int(data.get("quantity", 1)),
            image=CartImage(**image) if image else None,
        )
