"""
Catalog Module - Service Layer
================================
Storefront read queries (homepage, listing, product detail, related
products). Every query reads through the TTL cache; results are plain
JSON-serializable dicts so they can be cached as-is.
"""

import json
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload, aliased
from sqlalchemy import func, desc, asc

from config import settings
from config.settings import PRODUCT_IMAGES_BUCKET, PRODUCTS_PER_PAGE
from common.cache import cache
from common.storage import get_storage
from modules.catalog.models import (
    Category, Product, ProductStatus, ProductVariant, Inventory,
    ProductImage, ProductAttribute, ProductAttributeValue, HomepageConfig,
)

logger = logging.getLogger("walldecorator.catalog")

SORT_OPTIONS = ("newest", "price-asc", "price-desc", "popularity")


@dataclass
class ProductListParams:
    """Parsed product-listing query string (all fields have defaults)."""
    category: str = ""
    min_price: float = 0
    max_price: float = 0          # 0 = no upper limit
    materials: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    sort: str = "newest"
    page: int = 1
    limit: int = PRODUCTS_PER_PAGE

    @classmethod
    def parse(cls, category: str = "", min_price=0, max_price=0, materials=None, sizes=None,
              sort: str = "newest", page=1, limit=PRODUCTS_PER_PAGE) -> "ProductListParams":
        """Lenient parsing: bad values fall back to defaults instead of failing."""
        return cls(
            category=(category or "").strip(),
            min_price=max(0.0, _to_float(min_price)),
            max_price=max(0.0, _to_float(max_price)),
            materials=_split_list(materials),
            sizes=_split_list(sizes),
            sort=sort if sort in SORT_OPTIONS else "newest",
            page=max(1, _to_int(page, 1)),
            limit=min(100, max(1, _to_int(limit, PRODUCTS_PER_PAGE))),
        )

    def cache_key(self) -> str:
        return "products:list:" + json.dumps(asdict(self), sort_keys=True)


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _split_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return sorted({v.strip() for v in value if v and v.strip()})


# ==========================================
# Serializers
# ==========================================

def image_url(path: Optional[str]) -> str:
    return get_storage(PRODUCT_IMAGES_BUCKET).public_url(path)


def serialize_image(img: ProductImage, full: bool = False) -> dict:
    data = {
        "storage_path": img.storage_path,
        "alt_text": img.alt_text,
        "display_order": img.display_order,
        "blurhash": img.blurhash,
        "url": image_url(img.storage_path),
    }
    if full:
        data.update({
            "id": img.id,
            "variant_id": img.variant_id,
            "processing_status": img.processing_status,
            "thumbnail_url": image_url(img.thumbnail_path) if img.thumbnail_path else None,
            "medium_url": image_url(img.medium_path) if img.medium_path else None,
            "large_url": image_url(img.large_path) if img.large_path else None,
        })
    return data


def product_card(product: Product) -> dict:
    """Product card: primary image, lowest variant price, highest compare-at price."""
    prices = [v.price for v in product.variants]
    compare_prices = [v.compare_at_price for v in product.variants if v.compare_at_price]
    primary = product.primary_image
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "image": serialize_image(primary) if primary else None,
        "price": min(prices) if prices else 0,
        "compareAtPrice": max(compare_prices) if compare_prices else None,
    }


class CatalogService:

    # ==========================================
    # Homepage
    # ==========================================

    def get_homepage_data(self, db: Session) -> dict:
        """Hero + promo banner config, with defaults when no row exists."""
        def load():
            conf = db.query(HomepageConfig).first()
            get = (lambda attr, default: getattr(conf, attr) if conf is not None and getattr(conf, attr) is not None else default)
            return {
                "hero": {
                    "headline": get("hero_headline", "Shop the Latest Collection"),
                    "subheadline": get("hero_subheadline", "Free shipping on orders over Rs. 5,000"),
                    "ctaText": get("hero_cta_text", "Shop Now"),
                    "ctaLink": get("hero_cta_link", "/products"),
                    "imagePath": get("hero_image_path", None),
                },
                "promo": {
                    "isActive": get("promo_is_active", False),
                    "headline": get("promo_headline", ""),
                    "subheadline": get("promo_subheadline", ""),
                    "ctaText": get("promo_cta_text", ""),
                    "ctaLink": get("promo_cta_link", ""),
                    "backgroundColor": get("promo_bg_color", "#000000"),
                },
            }
        return cache.get_or_set("homepage:data", settings.CACHE_TTL_HOMEPAGE, load)

    def get_categories(self, db: Session) -> List[dict]:
        """Top-level visible categories for the homepage showcase (max 8)."""
        def load():
            rows = db.query(Category).filter(
                Category.parent_id.is_(None),
                Category.is_visible == True,
            ).order_by(Category.display_order).limit(8).all()
            return [{
                "id": c.id, "name": c.name, "slug": c.slug,
                "image_path": c.image_path, "product_count": c.product_count,
            } for c in rows]
        return cache.get_or_set("homepage:categories", settings.CACHE_TTL_CATEGORIES, load)

    def get_featured_products(self, db: Session) -> List[dict]:
        def load():
            rows = self._card_query(db).filter(
                Product.is_featured == True,
            ).order_by(Product.featured_order).limit(8).all()
            return [product_card(p) for p in rows]
        return cache.get_or_set("homepage:featured", settings.CACHE_TTL_FEATURED, load)

    def get_bestsellers(self, db: Session) -> List[dict]:
        def load():
            rows = self._card_query(db).order_by(desc(Product.total_sold)).limit(8).all()
            return [product_card(p) for p in rows]
        return cache.get_or_set("homepage:bestsellers", settings.CACHE_TTL_BESTSELLERS, load)

    # ==========================================
    # Listing
    # ==========================================

    def get_products(self, db: Session, params: ProductListParams) -> dict:
        """
        Paginated, filtered listing of active products with at least one
        in-stock variant inside the filters. Price shown is the lowest
        matching variant price.
        """
        return cache.get_or_set(
            params.cache_key(), settings.CACHE_TTL_PRODUCTS,
            lambda: self._query_products(db, params),
        )

    def _query_products(self, db: Session, params: ProductListParams) -> dict:
        variants = db.query(
            ProductVariant.product_id.label("product_id"),
            func.min(ProductVariant.price).label("min_price"),
            func.max(ProductVariant.compare_at_price).label("max_compare"),
        ).join(
            Inventory, Inventory.variant_id == ProductVariant.id,
        ).filter(Inventory.quantity_available > 0)

        if params.min_price > 0:
            variants = variants.filter(ProductVariant.price >= params.min_price)
        if params.max_price > 0:
            variants = variants.filter(ProductVariant.price <= params.max_price)
        if params.materials:
            material = aliased(ProductAttributeValue)
            variants = variants.join(material, material.id == ProductVariant.material_id).filter(
                material.value.in_(params.materials),
            )
        if params.sizes:
            size = aliased(ProductAttributeValue)
            variants = variants.join(size, size.id == ProductVariant.size_id).filter(
                size.value.in_(params.sizes),
            )
        variants = variants.group_by(ProductVariant.product_id).subquery()

        query = db.query(Product, variants.c.min_price, variants.c.max_compare).join(
            variants, variants.c.product_id == Product.id,
        ).filter(Product.status == ProductStatus.ACTIVE.value)

        if params.category:
            query = query.join(Category, Category.id == Product.category_id).filter(
                Category.slug == params.category,
            )

        total = query.count()

        if params.sort == "price-asc":
            query = query.order_by(asc(variants.c.min_price), desc(Product.created_at))
        elif params.sort == "price-desc":
            query = query.order_by(desc(variants.c.min_price), desc(Product.created_at))
        elif params.sort == "popularity":
            query = query.order_by(desc(Product.total_sold), desc(Product.created_at))
        else:
            query = query.order_by(desc(Product.created_at), asc(Product.name))

        offset = (params.page - 1) * params.limit
        rows = query.options(
            selectinload(Product.images), joinedload(Product.category),
        ).offset(offset).limit(params.limit).all()

        items = []
        for product, min_price, max_compare in rows:
            primary = product.primary_image
            items.append({
                "id": product.id,
                "name": product.name,
                "slug": product.slug,
                "price": int(min_price),
                "compareAtPrice": int(max_compare) if max_compare else None,
                "totalSold": product.total_sold,
                "image": serialize_image(primary) if primary else None,
                "category": {
                    "id": product.category.id,
                    "name": product.category.name,
                    "slug": product.category.slug,
                } if product.category else None,
            })

        return {
            "items": items,
            "totalCount": total,
            "page": params.page,
            "limit": params.limit,
            "totalPages": math.ceil(total / params.limit) if total else 0,
        }

    def get_product_categories(self, db: Session) -> List[dict]:
        """All visible categories for the filter sidebar."""
        def load():
            rows = db.query(Category).filter(Category.is_visible == True).order_by(Category.name).all()
            return [{"id": c.id, "name": c.name, "slug": c.slug, "parent_id": c.parent_id} for c in rows]
        return cache.get_or_set("products:categories", settings.CACHE_TTL_PRODUCT_CATEGORIES, load)

    def get_filter_attributes(self, db: Session, category_slug: str = "") -> List[dict]:
        """Attribute values grouped by attribute name, e.g. [{name: 'size', values: [...]}]."""
        def load():
            rows = db.query(ProductAttribute.name, ProductAttributeValue.value).join(
                ProductAttributeValue, ProductAttributeValue.attribute_id == ProductAttribute.id,
            ).all()
            grouped = {}
            for name, value in rows:
                grouped.setdefault(name, set()).add(value)
            return [{"name": name, "values": sorted(values)} for name, values in sorted(grouped.items())]
        key = f"products:attributes:{category_slug or 'all'}"
        return cache.get_or_set(key, settings.CACHE_TTL_ATTRIBUTES, load)

    # ==========================================
    # Product detail
    # ==========================================

    def get_product_by_slug(self, db: Session, slug: str) -> Optional[dict]:
        """Full product detail, or None when the slug is unknown."""
        return cache.get_or_set(
            f"product:detail:{slug}", settings.CACHE_TTL_PRODUCT_DETAIL,
            lambda: self._load_product_detail(db, slug),
        )

    def _load_product_detail(self, db: Session, slug: str) -> Optional[dict]:
        product = db.query(Product).options(
            joinedload(Product.category),
            selectinload(Product.images),
            selectinload(Product.variants).joinedload(ProductVariant.inventory),
        ).filter(Product.slug == slug).first()

        if not product:
            logger.warning(f"No product found for slug: {slug}")
            return None

        return {
            "id": product.id,
            "name": product.name,
            "slug": product.slug,
            "description": product.description,
            "seo_description": product.seo_description,
            "status": product.status,
            "category": {
                "id": product.category.id,
                "name": product.category.name,
                "slug": product.category.slug,
            } if product.category else None,
            "product_images": [serialize_image(img, full=True) for img in product.images],
            "product_variants": [{
                "id": v.id,
                "sku": v.sku,
                "price": v.price,
                "compare_at_price": v.compare_at_price,
                "description": v.description,
                "product_attribute_values": [av.as_dict() for av in v.attribute_values],
                "inventory": {"quantity_available": v.quantity_available},
            } for v in sorted(product.variants, key=lambda v: v.price)],
        }

    def get_related_products(self, db: Session, category_id: str, exclude_product_id: str) -> List[dict]:
        """Up to 4 best-selling active products from the same category."""
        def load():
            rows = self._card_query(db).filter(
                Product.category_id == category_id,
                Product.id != exclude_product_id,
            ).order_by(desc(Product.total_sold)).limit(4).all()
            return [product_card(p) for p in rows]
        key = f"related:{category_id}:{exclude_product_id}"
        return cache.get_or_set(key, settings.CACHE_TTL_RELATED, load)

    def get_top_product_slugs(self, db: Session, limit: int) -> List[str]:
        rows = db.query(Product.slug).filter(
            Product.status == ProductStatus.ACTIVE.value,
        ).order_by(desc(Product.total_sold)).limit(limit).all()
        return [r[0] for r in rows]

    def increment_view_count(self, db: Session, product_id: str) -> dict:
        """Atomic view_count + 1. Never raises."""
        try:
            updated = db.query(Product).filter(Product.id == product_id).update(
                {Product.view_count: Product.view_count + 1}, synchronize_session=False,
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error incrementing view count for {product_id}: {e}")
            return {"success": False, "error": "Internal server error"}
        if not updated:
            return {"success": False, "error": "Product not found"}
        return {"success": True}

    # ==========================================
    # Private helpers
    # ==========================================

    def _card_query(self, db: Session):
        return db.query(Product).options(
            selectinload(Product.images),
            selectinload(Product.variants),
        ).filter(Product.status == ProductStatus.ACTIVE.value)


# Singleton
catalog_service = CatalogService()
