"""
Catalog Module - Models
========================
Category, Product, attribute values, ProductVariant, Inventory, ProductImage
and the homepage configuration row.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, BigInteger, Boolean, Text,
    ForeignKey, DateTime, UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_uuid


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class ImageProcessingStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# ==========================================
# 🗂️ Category
# ==========================================

class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    parent_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    image_path = Column(String, nullable=True)
    product_count = Column(Integer, default=0, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)

    parent = relationship("Category", remote_side=[id])
    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category {self.slug}>"


# ==========================================
# 📦 Product
# ==========================================

class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    seo_description = Column(String, nullable=True)
    status = Column(String, default=ProductStatus.DRAFT.value, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    featured_order = Column(Integer, default=0, nullable=False)
    total_sold = Column(Integer, default=0, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    category = relationship("Category", back_populates="products")
    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan")
    images = relationship(
        "ProductImage", back_populates="product",
        cascade="all, delete-orphan", order_by="ProductImage.display_order",
    )

    __table_args__ = (
        Index("ix_product_status", "status"),
    )

    @property
    def primary_image(self):
        return self.images[0] if self.images else None

    def __repr__(self):
        return f"<Product {self.slug}>"


# ==========================================
# 🏷️ Attributes (material / size / thickness)
# ==========================================

class ProductAttribute(Base):
    __tablename__ = "product_attributes"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)   # material, size, thickness

    values = relationship("ProductAttributeValue", back_populates="attribute", cascade="all, delete-orphan")


class ProductAttributeValue(Base):
    __tablename__ = "product_attribute_values"

    id = Column(Integer, primary_key=True)
    attribute_id = Column(Integer, ForeignKey("product_attributes.id", ondelete="CASCADE"), nullable=False)
    value = Column(String, nullable=False)               # acrylic, 2x2, 3 ...

    attribute = relationship("ProductAttribute", back_populates="values")

    __table_args__ = (
        UniqueConstraint("attribute_id", "value", name="uq_attribute_value"),
    )

    def as_dict(self) -> dict:
        return {"value": self.value, "attribute": {"name": self.attribute.name}}


# ==========================================
# 🔀 Variant + Inventory
# ==========================================

class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    sku = Column(String, nullable=False, unique=True)
    price = Column(BigInteger, nullable=False)
    compare_at_price = Column(BigInteger, nullable=True)
    material_id = Column(Integer, ForeignKey("product_attribute_values.id", ondelete="SET NULL"), nullable=True)
    size_id = Column(Integer, ForeignKey("product_attribute_values.id", ondelete="SET NULL"), nullable=True)
    thickness_id = Column(Integer, ForeignKey("product_attribute_values.id", ondelete="SET NULL"), nullable=True)

    product = relationship("Product", back_populates="variants")
    material = relationship("ProductAttributeValue", foreign_keys=[material_id])
    size = relationship("ProductAttributeValue", foreign_keys=[size_id])
    thickness = relationship("ProductAttributeValue", foreign_keys=[thickness_id])
    inventory = relationship("Inventory", back_populates="variant", uselist=False, cascade="all, delete-orphan")

    @property
    def attribute_values(self) -> list:
        return [v for v in (self.material, self.size, self.thickness) if v is not None]

    @property
    def description(self) -> str:
        """Human label, e.g. 'acrylic / 2x2 / 3'."""
        return " / ".join(v.value for v in self.attribute_values)

    @property
    def quantity_available(self) -> int:
        return self.inventory.quantity_available if self.inventory else 0


class Inventory(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False, unique=True)
    quantity_available = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    variant = relationship("ProductVariant", back_populates="inventory")

    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_inventory_qty"),
    )


# ==========================================
# 🖼️ Product Image
# ==========================================

class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id", ondelete="SET NULL"), nullable=True)
    storage_path = Column(String, nullable=False)
    alt_text = Column(String, nullable=True)
    display_order = Column(Integer, default=0, nullable=False)

    # Written only by the image pipeline
    processing_status = Column(String, default=ImageProcessingStatus.PENDING.value, nullable=False)
    processing_error = Column(Text, nullable=True)
    blurhash = Column(String, nullable=True)
    thumbnail_path = Column(String, nullable=True)
    medium_path = Column(String, nullable=True)
    large_path = Column(String, nullable=True)
    original_width = Column(Integer, nullable=True)
    original_height = Column(Integer, nullable=True)
    file_size_bytes = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="images")


# ==========================================
# 🏠 Homepage Config (single row)
# ==========================================

class HomepageConfig(Base):
    __tablename__ = "homepage_config"

    id = Column(Integer, primary_key=True)
    hero_headline = Column(String, nullable=True)
    hero_subheadline = Column(String, nullable=True)
    hero_cta_text = Column(String, nullable=True)
    hero_cta_link = Column(String, nullable=True)
    hero_image_path = Column(String, nullable=True)
    promo_is_active = Column(Boolean, default=False, nullable=False)
    promo_headline = Column(String, nullable=True)
    promo_subheadline = Column(String, nullable=True)
    promo_cta_text = Column(String, nullable=True)
    promo_cta_link = Column(String, nullable=True)
    promo_bg_color = Column(String, nullable=True)
