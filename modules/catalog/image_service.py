"""
Catalog Module - Image Derivative Pipeline
============================================
Turns a freshly uploaded product image into a blur placeholder and a fixed
set of WebP size variants, then records the outcome on the image row.

Steps (sequential, one request):
  1. Claim the row: compare-and-set processing_status -> "processing"
  2. Download the original, read its dimensions and byte size
  3. BlurHash placeholder from a <=32x32 RGBA copy (4x3 components)
  4. thumbnail / medium / large: crop-to-cover, WebP, upload (overwrite)
  5. Persist derived paths + blurhash, status "completed", drop the cached
     product detail

Any failure marks the row "failed" with the error message. Variants already
uploaded in a failed run are left in place; a re-run overwrites them.
"""

import io
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import blurhash
from PIL import Image, ImageOps
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import (
    PRODUCT_IMAGES_BUCKET, IMAGE_VARIANTS, IMAGE_VARIANT_QUALITY,
    BLURHASH_BOX_SIZE, BLURHASH_COMPONENTS,
)
from common.cache import cache
from common.storage import Storage, get_storage
from modules.catalog.models import Product, ProductImage, ImageProcessingStatus

logger = logging.getLogger("walldecorator.image")

# States from which a new run may claim the row
CLAIMABLE_STATUSES = (
    ImageProcessingStatus.PENDING.value,
    ImageProcessingStatus.FAILED.value,
    ImageProcessingStatus.COMPLETED.value,
)


@dataclass
class ImageProcessingResult:
    """Result of ImageProcessingService.process()."""
    success: bool
    image_id: Optional[str] = None
    blurhash: Optional[str] = None
    variants: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None
    status_code: int = 200

    def as_response(self) -> dict:
        if not self.success:
            return {"error": self.error or "Image processing failed"}
        return {
            "success": True,
            "imageId": self.image_id,
            "blurhash": self.blurhash,
            "variants": self.variants,
            "metadata": self.metadata,
        }


def generate_blurhash(img: Image.Image) -> str:
    """Encode a BlurHash from a small, aspect-preserving RGBA copy of `img`."""
    small = ImageOps.contain(img.convert("RGBA"), (BLURHASH_BOX_SIZE, BLURHASH_BOX_SIZE))
    width, height = small.size
    pixels = list(small.getdata())
    rows = [pixels[y * width:(y + 1) * width] for y in range(height)]
    components_x, components_y = BLURHASH_COMPONENTS
    return blurhash.encode(rows, components_x=components_x, components_y=components_y)


def render_variant(img: Image.Image, width: int, height: int) -> bytes:
    """Centre crop-and-cover resize to exactly width x height, encoded as WebP."""
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "transparency" in img.info or img.mode in ("LA", "PA") else "RGB")
    fitted = ImageOps.fit(img, (width, height), method=Image.LANCZOS, centering=(0.5, 0.5))
    buf = io.BytesIO()
    fitted.save(buf, format="WEBP", quality=IMAGE_VARIANT_QUALITY)
    return buf.getvalue()


def variant_path(folder: str, product_id: str, storage_path: str) -> str:
    """e.g. thumbnail/<product-id>/<original name without ext>.webp"""
    file_name = storage_path.split("/")[-1] or "image.jpg"
    stem = os.path.splitext(file_name)[0]
    return f"{folder}/{product_id}/{stem}.webp"


class ImageProcessingService:

    def __init__(self, storage: Storage = None):
        self._storage = storage

    @property
    def storage(self) -> Storage:
        return self._storage or get_storage(PRODUCT_IMAGES_BUCKET)

    # ==========================================
    # Registration (upload -> pending row)
    # ==========================================

    def register_upload(
        self,
        db: Session,
        product_id: str,
        storage_path: str,
        alt_text: str = None,
        display_order: int = 0,
        variant_id: str = None,
    ) -> ProductImage:
        """Create the image row in "pending" state for a raw upload."""
        image = ProductImage(
            product_id=product_id,
            variant_id=variant_id,
            storage_path=storage_path,
            alt_text=alt_text,
            display_order=display_order,
            processing_status=ImageProcessingStatus.PENDING.value,
        )
        db.add(image)
        db.commit()
        return image

    # ==========================================
    # Pipeline
    # ==========================================

    def process(self, db: Session, image_id: str, storage_path: str, product_id: str) -> ImageProcessingResult:
        if not image_id or not storage_path:
            return ImageProcessingResult(
                success=False, error="Missing imageId or storagePath", status_code=400,
            )

        claimed = self._claim(db, image_id)
        if claimed is not None:
            return claimed

        logger.info(f"Processing image: {image_id} at {storage_path}")
        try:
            if not product_id:
                product_id = db.query(ProductImage.product_id).filter(ProductImage.id == image_id).scalar()

            original = self.storage.download(storage_path)
            file_size = len(original)

            with Image.open(io.BytesIO(original)) as img:
                img.load()
                original_width, original_height = img.size

                placeholder = generate_blurhash(img)
                logger.debug(f"Generated BlurHash for {image_id}: {placeholder}")

                variant_paths = {}
                for key, conf in IMAGE_VARIANTS.items():
                    data = render_variant(img, conf["width"], conf["height"])
                    path = variant_path(conf["folder"], product_id, storage_path)
                    try:
                        self.storage.upload(path, data, content_type="image/webp", upsert=True)
                    except Exception as e:
                        raise RuntimeError(f"Failed to upload {key}: {e}") from e
                    variant_paths[f"{key}_path"] = path
                    logger.debug(f"Created {key} variant at {path}")

            db.query(ProductImage).filter(ProductImage.id == image_id).update({
                **variant_paths,
                "blurhash": placeholder,
                "processing_status": ImageProcessingStatus.COMPLETED.value,
                "processing_error": None,
                "original_width": original_width,
                "original_height": original_height,
                "file_size_bytes": file_size,
            }, synchronize_session=False)
            db.commit()

        except Exception as e:
            db.rollback()
            message = str(e) or e.__class__.__name__
            logger.error(f"Image processing failed for {image_id}: {message}", exc_info=True)
            self._mark_failed(db, image_id, message)
            return ImageProcessingResult(success=False, image_id=image_id, error=message, status_code=500)

        self._invalidate_detail(db, product_id)
        logger.info(f"Image processing completed for {image_id}")
        return ImageProcessingResult(
            success=True,
            image_id=image_id,
            blurhash=placeholder,
            variants=variant_paths,
            metadata={
                "originalWidth": original_width,
                "originalHeight": original_height,
                "fileSize": file_size,
            },
        )

    # ==========================================
    # Private helpers
    # ==========================================

    def _claim(self, db: Session, image_id: str) -> Optional[ImageProcessingResult]:
        """
        Move the row to "processing" only if it isn't already there.
        Returns None when claimed, or the result to hand back otherwise.
        """
        updated = db.query(ProductImage).filter(
            ProductImage.id == image_id,
            ProductImage.processing_status.in_(CLAIMABLE_STATUSES),
        ).update({"processing_status": ImageProcessingStatus.PROCESSING.value}, synchronize_session=False)
        db.commit()
        if updated:
            return None

        exists = db.query(ProductImage.id).filter(ProductImage.id == image_id).first()
        if not exists:
            return ImageProcessingResult(
                success=False, image_id=image_id, error="Image not found", status_code=404,
            )
        logger.warning(f"Image {image_id} is already being processed; declining")
        return ImageProcessingResult(
            success=False, image_id=image_id, error="Image is already being processed", status_code=409,
        )

    def _invalidate_detail(self, db: Session, product_id: str):
        """Drop the cached detail page so new variants show up immediately."""
        try:
            slug = db.query(Product.slug).filter(Product.id == product_id).scalar()
        except SQLAlchemyError as e:
            logger.warning(f"Could not resolve slug for product {product_id}: {e}")
            return
        if slug:
            cache.delete(f"product:detail:{slug}")

    def _mark_failed(self, db: Session, image_id: str, message: str):
        try:
            db.query(ProductImage).filter(ProductImage.id == image_id).update({
                "processing_status": ImageProcessingStatus.FAILED.value,
                "processing_error": message,
            }, synchronize_session=False)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Could not record failure for image {image_id}: {e}")


# Singleton
image_processing_service = ImageProcessingService()
