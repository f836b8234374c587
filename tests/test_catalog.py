"""Storefront catalog queries and their cache behaviour."""

from common.cache import cache
from modules.catalog.models import Product, Inventory, ProductImage
from modules.catalog.service import catalog_service, ProductListParams
from modules.review.models import Review
from modules.review.service import review_service


def test_params_parse_is_lenient():
    params = ProductListParams.parse(min_price="abc", max_price="-5", sort="weird", page="0", limit="1000",
                                     materials="Wood, Acrylic,,")
    assert params.min_price == 0
    assert params.max_price == 0
    assert params.sort == "newest"
    assert params.page == 1
    assert params.limit == 100
    assert params.materials == ["Acrylic", "Wood"]


def test_cache_key_is_stable_across_list_order():
    a = ProductListParams.parse(materials="Wood,Acrylic")
    b = ProductListParams.parse(materials="Acrylic,Wood")
    assert a.cache_key() == b.cache_key()
    assert a.cache_key().startswith("products:list:")


def test_listing_uses_in_stock_min_price(db, catalog):
    result = catalog_service.get_products(db, ProductListParams.parse(sort="price-asc"))
    assert result["totalCount"] == 2
    assert [(p["slug"], p["price"]) for p in result["items"]] == [("calligraphy", 1500), ("wall-art", 2600)]
    assert result["items"][1]["compareAtPrice"] == 3000


def test_listing_filters(db, catalog):
    by_price = catalog_service.get_products(db, ProductListParams.parse(max_price="2000"))
    assert [p["slug"] for p in by_price["items"]] == ["calligraphy"]

    out_of_stock_only = catalog_service.get_products(db, ProductListParams.parse(materials="Metal"))
    assert out_of_stock_only["totalCount"] == 0

    by_size = catalog_service.get_products(db, ProductListParams.parse(sizes="18x18"))
    assert [p["slug"] for p in by_size["items"]] == ["wall-art"]

    missing_category = catalog_service.get_products(db, ProductListParams.parse(category="nature"))
    assert missing_category["items"] == []


def test_listing_pagination_and_popularity(db, catalog):
    result = catalog_service.get_products(db, ProductListParams.parse(sort="popularity", limit="1", page="2"))
    assert result["totalPages"] == 2
    assert [p["slug"] for p in result["items"]] == ["wall-art"]


def test_listing_reads_through_cache(db, catalog):
    params = ProductListParams.parse(sort="price-asc")
    first = catalog_service.get_products(db, params)

    db.query(Inventory).update({Inventory.quantity_available: 0})
    db.commit()

    assert catalog_service.get_products(db, params) == first
    cache.delete(params.cache_key())
    assert catalog_service.get_products(db, params)["totalCount"] == 0


def test_homepage_sections(db, catalog):
    data = catalog_service.get_homepage_data(db)
    assert data["hero"]["ctaLink"] == "/products"
    assert data["promo"]["isActive"] is False

    assert [c["slug"] for c in catalog_service.get_categories(db)] == ["islamic-art"]
    assert [p["slug"] for p in catalog_service.get_featured_products(db)] == ["wall-art"]
    assert [p["slug"] for p in catalog_service.get_bestsellers(db)] == ["calligraphy", "wall-art"]

    card = catalog_service.get_featured_products(db)[0]
    assert card["price"] == 2600
    assert card["image"] is None


def test_product_detail(db, catalog):
    product = catalog["wall_art"]
    db.add(ProductImage(product_id=product.id, storage_path="originals/x/a.jpg", display_order=0,
                        processing_status="completed", thumbnail_path="thumbnail/x/a.webp"))
    db.commit()

    detail = catalog_service.get_product_by_slug(db, "wall-art")
    assert [v["sku"] for v in detail["product_variants"]] == ["WA-ACR-18", "WA-MET-24"]
    assert detail["product_variants"][0]["inventory"] == {"quantity_available": 5}
    assert detail["product_variants"][0]["product_attribute_values"][0] == {
        "value": "Acrylic", "attribute": {"name": "material"},
    }
    image = detail["product_images"][0]
    assert image["thumbnail_url"].endswith("/product-images/thumbnail/x/a.webp")
    assert image["medium_url"] is None

    assert catalog_service.get_product_by_slug(db, "missing") is None


def test_filter_attributes(db, catalog):
    attrs = catalog_service.get_filter_attributes(db)
    assert attrs == [
        {"name": "material", "values": ["Acrylic", "Metal", "Wood"]},
        {"name": "size", "values": ["12x12", "18x18", "24x24"]},
    ]


def test_related_and_top_slugs(db, catalog):
    related = catalog_service.get_related_products(db, catalog["category"].id, catalog["wall_art"].id)
    assert [p["slug"] for p in related] == ["calligraphy"]
    assert catalog_service.get_top_product_slugs(db, 1) == ["calligraphy"]


def test_increment_view_count(db, catalog):
    product_id = catalog["wall_art"].id
    assert catalog_service.increment_view_count(db, product_id) == {"success": True}
    assert catalog_service.increment_view_count(db, product_id) == {"success": True}
    db.expire_all()
    assert db.query(Product).filter(Product.id == product_id).one().view_count == 2
    assert catalog_service.increment_view_count(db, "missing")["success"] is False


def test_review_summary(db, catalog):
    product_id = catalog["wall_art"].id
    db.add_all([
        Review(product_id=product_id, rating=5, display_name="Ayesha", is_approved=True),
        Review(product_id=product_id, rating=4, is_approved=True),
        Review(product_id=product_id, rating=1, is_approved=False),
    ])
    db.commit()

    data = review_service.get_product_reviews(db, product_id)
    assert data["summary"]["total_count"] == 2
    assert data["summary"]["average_rating"] == 4.5
    assert data["summary"]["distribution"][0] == {"star": 5, "count": 1}
    assert {r["profile"]["display_name"] for r in data["reviews"]} == {"Ayesha", "Customer"}


def test_routes(client, catalog):
    assert client.get("/api/products/wall-art").status_code == 200
    assert client.get("/api/products/nope").status_code == 404

    listing = client.get("/api/products", params={"sort": "price-desc"}).json()
    assert [p["slug"] for p in listing["items"]] == ["wall-art", "calligraphy"]

    homepage = client.get("/api/homepage").json()
    assert set(homepage) == {"config", "categories", "featured", "bestsellers"}

    filters = client.get("/api/products/filters").json()
    assert filters["categories"][0]["slug"] == "islamic-art"

    assert client.get("/api/products/top-slugs", params={"limit": 1}).json() == ["calligraphy"]
    assert client.get("/api/products/top-slugs", params={"limit": 0}).status_code == 422


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
