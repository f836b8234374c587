"""
Shared fixtures: in-memory SQLite, temporary storage root, fresh cache,
and a TestClient wired to the test database.
"""

import io
import os
import sys
import tempfile

# Environment must be in place before config.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["SUPABASE_WEBHOOK_SECRET"] = ""
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="wd-storage-"))

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from config.database import Base, get_db
from common.cache import cache
from common.storage import configure_storage
from main import app
from modules.catalog.models import (
    Category, Product, ProductStatus, ProductAttribute, ProductAttributeValue,
    ProductVariant, Inventory,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def storage_root(tmp_path):
    root = tmp_path / "storage"
    root.mkdir()
    configure_storage(root=str(root), public_base_url="http://testserver/static/uploads")
    yield root
    configure_storage()


@pytest.fixture(autouse=True)
def fresh_cache():
    cache.clear()
    yield cache
    cache.clear()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==========================================
# Data builders
# ==========================================

def make_image_bytes(size=(800, 500), color=(200, 120, 40), fmt="JPEG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def catalog(db):
    """
    Two active products in one category:
      wall-art  : v1 (Acrylic 18x18, Rs 2600, stock 5), v2 (Metal 24x24, Rs 5400, stock 0)
      calligraphy: v3 (Wood 12x12, Rs 1500, stock 10)
    """
    category = Category(name="Islamic Art", slug="islamic-art", display_order=0)
    db.add(category)

    material = ProductAttribute(name="material")
    size = ProductAttribute(name="size")
    db.add_all([material, size])
    db.flush()
    values = {}
    for attr, names in ((material, ["Acrylic", "Metal", "Wood"]), (size, ["12x12", "18x18", "24x24"])):
        for name in names:
            val = ProductAttributeValue(attribute_id=attr.id, value=name)
            db.add(val)
            values[name] = val
    db.flush()

    wall_art = Product(name="Wall Art", slug="wall-art", status=ProductStatus.ACTIVE.value,
                       category_id=category.id, is_featured=True, total_sold=3)
    calligraphy = Product(name="Calligraphy", slug="calligraphy", status=ProductStatus.ACTIVE.value,
                          category_id=category.id, total_sold=7)
    db.add_all([wall_art, calligraphy])
    db.flush()

    v1 = ProductVariant(product_id=wall_art.id, sku="WA-ACR-18", price=2600, compare_at_price=3000,
                        material_id=values["Acrylic"].id, size_id=values["18x18"].id)
    v2 = ProductVariant(product_id=wall_art.id, sku="WA-MET-24", price=5400,
                        material_id=values["Metal"].id, size_id=values["24x24"].id)
    v3 = ProductVariant(product_id=calligraphy.id, sku="CA-WOD-12", price=1500,
                        material_id=values["Wood"].id, size_id=values["12x12"].id)
    db.add_all([v1, v2, v3])
    db.flush()
    db.add_all([
        Inventory(variant_id=v1.id, quantity_available=5),
        Inventory(variant_id=v2.id, quantity_available=0),
        Inventory(variant_id=v3.id, quantity_available=10),
    ])
    db.commit()

    return {
        "category": category,
        "wall_art": wall_art,
        "calligraphy": calligraphy,
        "v1": v1, "v2": v2, "v3": v3,
    }


@pytest.fixture
def image_bytes():
    return make_image_bytes
