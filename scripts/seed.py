"""
WallDecorator - Demo Catalog Seeder
=====================================
Seeds a small storefront catalog for local development.

Usage:
    python scripts/seed.py          # Seed (skips rows that already exist)
    python scripts/seed.py --reset  # Drop all data and reseed

Seeded:
  1. Attributes (material, size, thickness) and their values
  2. Categories
  3. Products with variants and inventory
  4. Homepage config
  5. A few approved reviews
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine
from modules.catalog.models import (
    Category, Product, ProductStatus, ProductAttribute, ProductAttributeValue,
    ProductVariant, Inventory, HomepageConfig,
)
from modules.review.models import Review
from modules.order.models import Order, OrderItem  # noqa: F401
from modules.newsletter.models import NewsletterSubscriber  # noqa: F401
from modules.custom_order.models import CustomOrderRequest  # noqa: F401


ATTRIBUTES = {
    "material": ["Acrylic", "Metal", "Wood"],
    "size": ["12x12", "18x18", "24x24"],
    "thickness": ["3mm", "5mm"],
}

CATEGORIES = [
    ("Islamic Art", "islamic-art"),
    ("Abstract", "abstract"),
    ("Nature", "nature"),
    ("Typography", "typography"),
]

# (name, slug, category slug, featured, [(material, size, thickness, price, compare_at, stock)])
PRODUCTS = [
    ("Ayat ul Kursi Panel", "ayat-ul-kursi-panel", "islamic-art", True, [
        ("Acrylic", "18x18", "3mm", 2600, 3200, 25),
        ("Metal", "24x24", "5mm", 5400, 6500, 10),
    ]),
    ("Golden Waves", "golden-waves", "abstract", True, [
        ("Wood", "12x12", "5mm", 1800, None, 40),
        ("Acrylic", "24x24", "3mm", 4200, 4800, 12),
    ]),
    ("Mountain Dawn", "mountain-dawn", "nature", False, [
        ("Metal", "18x18", "3mm", 3900, None, 8),
    ]),
    ("Bismillah Script", "bismillah-script", "typography", False, [
        ("Wood", "18x18", "5mm", 2900, 3500, 0),
        ("Acrylic", "12x12", "3mm", 1500, None, 30),
    ]),
]


def seed():
    db = SessionLocal()
    try:
        print("=" * 50)
        print("  WallDecorator - Demo Seeder")
        print("=" * 50)
        Base.metadata.create_all(bind=engine)

        # ==========================================
        # 1. Attributes
        # ==========================================
        print("\n[1/5] Attributes")
        values = {}
        for name, options in ATTRIBUTES.items():
            attr = db.query(ProductAttribute).filter(ProductAttribute.name == name).first()
            if not attr:
                attr = ProductAttribute(name=name)
                db.add(attr)
                db.flush()
                print(f"  + {name}")
            for option in options:
                val = db.query(ProductAttributeValue).filter(
                    ProductAttributeValue.attribute_id == attr.id,
                    ProductAttributeValue.value == option,
                ).first()
                if not val:
                    val = ProductAttributeValue(attribute_id=attr.id, value=option)
                    db.add(val)
                    db.flush()
                values[option] = val

        # ==========================================
        # 2. Categories
        # ==========================================
        print("\n[2/5] Categories")
        categories = {}
        for order, (name, slug) in enumerate(CATEGORIES):
            cat = db.query(Category).filter(Category.slug == slug).first()
            if not cat:
                cat = Category(name=name, slug=slug, display_order=order, is_visible=True)
                db.add(cat)
                db.flush()
                print(f"  + {name}")
            else:
                print(f"  = exists: {slug}")
            categories[slug] = cat

        # ==========================================
        # 3. Products, variants, inventory
        # ==========================================
        print("\n[3/5] Products")
        for featured_order, (name, slug, cat_slug, featured, variants) in enumerate(PRODUCTS):
            if db.query(Product).filter(Product.slug == slug).first():
                print(f"  = exists: {slug}")
                continue
            product = Product(
                name=name,
                slug=slug,
                description=f"{name}, handcrafted wall art.",
                status=ProductStatus.ACTIVE.value,
                category_id=categories[cat_slug].id,
                is_featured=featured,
                featured_order=featured_order,
            )
            db.add(product)
            db.flush()
            for material, size, thickness, price, compare_at, stock in variants:
                variant = ProductVariant(
                    product_id=product.id,
                    sku=f"{slug.upper()[:10]}-{material[:3].upper()}-{size}",
                    price=price,
                    compare_at_price=compare_at,
                    material_id=values[material].id,
                    size_id=values[size].id,
                    thickness_id=values[thickness].id,
                )
                db.add(variant)
                db.flush()
                db.add(Inventory(variant_id=variant.id, quantity_available=stock))
            categories[cat_slug].product_count += 1
            print(f"  + {name} ({len(variants)} variants)")

        # ==========================================
        # 4. Homepage config
        # ==========================================
        print("\n[4/5] Homepage config")
        if not db.query(HomepageConfig).first():
            db.add(HomepageConfig(
                hero_headline="Art That Defines Your Space",
                hero_subheadline="Premium wall decor, delivered across Pakistan",
                hero_cta_text="Shop Now",
                hero_cta_link="/products",
                promo_is_active=True,
                promo_headline="Free shipping over Rs 5,000",
                promo_cta_text="Browse",
                promo_cta_link="/products",
            ))
            print("  + homepage config")

        # ==========================================
        # 5. Reviews
        # ==========================================
        print("\n[5/5] Reviews")
        first = db.query(Product).filter(Product.slug == PRODUCTS[0][1]).first()
        if first and not db.query(Review).filter(Review.product_id == first.id).first():
            db.add(Review(product_id=first.id, display_name="Ayesha", rating=5,
                          title="Beautiful", body="Looks stunning in our lounge.", is_approved=True))
            db.add(Review(product_id=first.id, display_name="Bilal", rating=4,
                          title="Great quality", body="Delivery took a few days.", is_approved=True))
            print("  + 2 reviews")

        db.commit()
        print("\nSeed complete.")

    except Exception as e:
        db.rollback()
        print(f"\nSeed failed: {e}")
        raise
    finally:
        db.close()


def reset_and_seed():
    """Drop all tables and recreate + seed."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("All tables recreated")
    seed()


if __name__ == "__main__":
    if "--reset" in sys.argv:
        confirm = input("This will DELETE ALL DATA. Type 'yes' to confirm: ")
        if confirm.strip().lower() == "yes":
            reset_and_seed()
        else:
            print("Aborted.")
    else:
        seed()
