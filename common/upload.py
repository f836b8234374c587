"""
WallDecorator - File Upload Utilities
======================================
Validation of incoming image uploads before they reach object storage.
"""

import io
import os
import uuid
from typing import Tuple

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from config.settings import ALLOWED_IMAGE_EXTENSIONS, MAX_FILE_SIZE
from common.exceptions import ValidationError

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


def read_image_upload(upload_file: UploadFile) -> Tuple[bytes, str]:
    """
    Validate an uploaded image and return its bytes and lower-cased extension.

    Raises ValidationError for a missing file, an oversized file, a
    disallowed extension or content Pillow can't identify as an image.
    """
    if not upload_file or not upload_file.filename:
        raise ValidationError("Image is required.")

    # Validate file size
    upload_file.file.seek(0, 2)
    file_size = upload_file.file.tell()
    upload_file.file.seek(0)
    if file_size > MAX_FILE_SIZE:
        raise ValidationError(f"File is too large (max {MAX_FILE_SIZE // (1024 * 1024)} MB).")

    # Validate extension
    ext = os.path.splitext(upload_file.filename)[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
        raise ValidationError(f"Unsupported file type. Allowed: {allowed}")

    data = upload_file.file.read()
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError("The uploaded file is not a valid image.")

    return data, ext


def unique_upload_path(folder: str, ext: str) -> str:
    """Random storage path under `folder`, e.g. requests/3f2a...c1.png"""
    return f"{folder}/{uuid.uuid4().hex}{ext}"
