"""
Custom Order Module - Service Layer
======================================
Two steps, as the storefront's "Customize" form performs them:
  1. upload_image: reference image -> custom-orders bucket (never overwrites)
  2. submit: insert the request row pointing at the uploaded image
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from config.settings import CUSTOM_ORDERS_BUCKET
from common.exceptions import StorageConflictError, StorageError
from common.helpers import clean_optional
from common.storage import Storage, get_storage
from common.upload import CONTENT_TYPES, unique_upload_path
from modules.custom_order.models import CustomOrderRequest, CustomOrderStatus
from modules.custom_order.schemas import CustomOrderForm

logger = logging.getLogger("walldecorator.custom_order")

UPLOAD_FOLDER = "requests"


@dataclass
class CustomOrderResult:
    success: bool
    request_id: Optional[str] = None
    path: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None
    status_code: int = 200

    def as_response(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        body = {"success": True}
        if self.request_id:
            body["id"] = self.request_id
        if self.path:
            body["path"] = self.path
            body["url"] = self.url
        return body


class CustomOrderService:

    def __init__(self, storage: Storage = None):
        self._storage = storage

    @property
    def storage(self) -> Storage:
        return self._storage or get_storage(CUSTOM_ORDERS_BUCKET)

    def upload_image(self, data: bytes, ext: str, path: str = None) -> CustomOrderResult:
        path = path or unique_upload_path(UPLOAD_FOLDER, ext)
        try:
            self.storage.upload(path, data, content_type=CONTENT_TYPES.get(ext, "application/octet-stream"))
        except StorageConflictError:
            logger.warning(f"Custom order upload collided with existing file: {path}")
            return CustomOrderResult(
                success=False, error="A file with this name already exists. Please try again.", status_code=409,
            )
        except StorageError as e:
            logger.error(f"Custom order upload failed: {e.message}")
            return CustomOrderResult(success=False, error="Failed to upload image. Please try again.", status_code=502)

        return CustomOrderResult(success=True, path=path, url=self.storage.public_url(path))

    def submit(self, db: Session, form: CustomOrderForm) -> CustomOrderResult:
        image_path = clean_optional(form.image_path)
        if not image_path:
            return CustomOrderResult(success=False, error="Image is required.", status_code=400)

        request = CustomOrderRequest(
            customer_name=form.customer_name.strip(),
            customer_email=form.customer_email.strip().lower(),
            customer_phone=clean_optional(form.customer_phone),
            image_url=image_path,
            description=clean_optional(form.description),
            preferred_material=clean_optional(form.preferred_material),
            preferred_size=clean_optional(form.preferred_size),
            preferred_thickness=clean_optional(form.preferred_thickness),
            status=CustomOrderStatus.PENDING.value,
        )
        try:
            db.add(request)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Custom order insert error: {e}")
            return CustomOrderResult(
                success=False, error="Failed to submit your request. Please try again.", status_code=500,
            )

        logger.info(f"Custom order request {request.id} from {request.customer_email}")
        return CustomOrderResult(success=True, request_id=request.id)


# Singleton
custom_order_service = CustomOrderService()
