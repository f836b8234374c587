"""
Catalog Module - Routes
=========================
Public storefront JSON API: homepage sections, product listing and detail,
reviews, view counter, and the image upload / processing endpoints.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import PRODUCT_IMAGES_BUCKET, PRODUCTS_PER_PAGE
from common.exceptions import WallDecoratorError, raise_http
from common.storage import get_storage
from common.upload import read_image_upload, unique_upload_path, CONTENT_TYPES
from modules.catalog.models import Product
from modules.catalog.service import catalog_service, ProductListParams
from modules.catalog.image_service import image_processing_service
from modules.review.service import review_service

logger = logging.getLogger("walldecorator.catalog")

router = APIRouter(prefix="/api", tags=["catalog"])


# ==========================================
# 🏠 Homepage
# ==========================================

@router.get("/homepage")
async def homepage(db: Session = Depends(get_db)):
    return {
        "config": catalog_service.get_homepage_data(db),
        "categories": catalog_service.get_categories(db),
        "featured": catalog_service.get_featured_products(db),
        "bestsellers": catalog_service.get_bestsellers(db),
    }


# ==========================================
# 🛍️ Listing
# ==========================================

@router.get("/products")
async def list_products(
    category: str = Query(""),
    minPrice: str = Query("0"),
    maxPrice: str = Query("0"),
    materials: str = Query(""),
    sizes: str = Query(""),
    sort: str = Query("newest"),
    page: str = Query("1"),
    limit: str = Query(str(PRODUCTS_PER_PAGE)),
    db: Session = Depends(get_db),
):
    params = ProductListParams.parse(
        category=category, min_price=minPrice, max_price=maxPrice,
        materials=materials, sizes=sizes, sort=sort, page=page, limit=limit,
    )
    return catalog_service.get_products(db, params)


@router.get("/products/filters")
async def product_filters(category: str = Query(""), db: Session = Depends(get_db)):
    return {
        "categories": catalog_service.get_product_categories(db),
        "attributes": catalog_service.get_filter_attributes(db, category),
    }


@router.get("/products/top-slugs")
async def top_product_slugs(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db)):
    """Slugs of the best-selling active products, for static page generation."""
    return catalog_service.get_top_product_slugs(db, limit)


# ==========================================
# 📦 Product detail
# ==========================================

@router.get("/products/{slug}")
async def product_detail(slug: str, db: Session = Depends(get_db)):
    product = catalog_service.get_product_by_slug(db, slug)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/products/{product_id}/reviews")
async def product_reviews(product_id: str, db: Session = Depends(get_db)):
    return review_service.get_product_reviews(db, product_id)


@router.get("/products/{product_id}/related")
async def related_products(product_id: str, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product or not product.category_id:
        return []
    return catalog_service.get_related_products(db, product.category_id, product.id)


@router.post("/products/{product_id}/view")
async def product_view(product_id: str, db: Session = Depends(get_db)):
    result = catalog_service.increment_view_count(db, product_id)
    return JSONResponse(result, status_code=200 if result["success"] else 404)


# ==========================================
# 🖼️ Images
# ==========================================

@router.post("/products/{product_id}/images")
async def upload_product_image(
    product_id: str,
    image: UploadFile = File(...),
    alt_text: Optional[str] = Form(None),
    display_order: int = Form(0),
    variant_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Store the raw original and create a pending image row."""
    if not db.query(Product.id).filter(Product.id == product_id).first():
        raise HTTPException(status_code=404, detail="Product not found")
    storage = get_storage(PRODUCT_IMAGES_BUCKET)
    try:
        data, ext = read_image_upload(image)
        path = unique_upload_path(f"originals/{product_id}", ext)
        storage.upload(path, data, content_type=CONTENT_TYPES[ext])
    except WallDecoratorError as e:
        raise_http(e)

    try:
        row = image_processing_service.register_upload(
            db, product_id, path, alt_text=alt_text, display_order=display_order, variant_id=variant_id,
        )
    except SQLAlchemyError as e:
        db.rollback()
        storage.remove(path)
        logger.error(f"Could not register image {path} for product {product_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save image")
    return {"imageId": row.id, "storagePath": path, "productId": product_id}


@router.post("/process-image")
async def process_image(data: Dict[str, Any], db: Session = Depends(get_db)):
    result = image_processing_service.process(
        db,
        image_id=data.get("imageId"),
        storage_path=data.get("storagePath"),
        product_id=data.get("productId"),
    )
    return JSONResponse(result.as_response(), status_code=result.status_code)
