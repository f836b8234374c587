"""
WallDecorator - Object Storage Gateway
=======================================
Bucket-style file storage: upload / download by path and public URLs.
Files live on local disk under STORAGE_ROOT/<bucket> and are served by
the app's /static mount.
"""

import logging
import os
from typing import Dict

from config.settings import STORAGE_ROOT, STORAGE_PUBLIC_URL, PLACEHOLDER_IMAGE_URL
from common.exceptions import StorageError, StorageConflictError

logger = logging.getLogger("walldecorator.storage")


class Storage:
    """A single bucket on local disk."""

    def __init__(self, bucket: str, root: str = None, public_base_url: str = None):
        self.bucket = bucket
        self.root = os.path.join(root or STORAGE_ROOT, bucket)
        self.public_base_url = (public_base_url or STORAGE_PUBLIC_URL).rstrip("/")

    def _full_path(self, path: str) -> str:
        if not path or os.path.isabs(path) or ".." in path.replace("\\", "/").split("/"):
            raise StorageError(f"Invalid storage path: {path!r}")
        return os.path.join(self.root, *path.split("/"))

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._full_path(path))

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream", upsert: bool = False) -> str:
        """
        Write `data` to `path`. Without `upsert`, an existing file raises
        StorageConflictError. Returns the stored path.
        """
        full_path = self._full_path(path)
        if not upsert and os.path.exists(full_path):
            raise StorageConflictError(f"The resource already exists: {self.bucket}/{path}")
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as fh:
                fh.write(data)
        except OSError as e:
            raise StorageError(f"Upload failed for {self.bucket}/{path}: {e}") from e
        logger.debug(f"Stored {self.bucket}/{path} ({len(data)} bytes, {content_type})")
        return path

    def download(self, path: str) -> bytes:
        full_path = self._full_path(path)
        try:
            with open(full_path, "rb") as fh:
                return fh.read()
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {self.bucket}/{path}") from e
        except OSError as e:
            raise StorageError(f"Download failed for {self.bucket}/{path}: {e}") from e

    def remove(self, path: str) -> bool:
        """Delete a file. Returns True if it existed."""
        full_path = self._full_path(path)
        try:
            os.remove(full_path)
            return True
        except FileNotFoundError:
            return False

    def public_url(self, path: str) -> str:
        if not path:
            return PLACEHOLDER_IMAGE_URL
        return f"{self.public_base_url}/{self.bucket}/{path}"


_BUCKETS: Dict[str, Storage] = {}
_settings = {"root": None, "public_base_url": None}


def get_storage(bucket: str) -> Storage:
    """Return the (cached) Storage for a bucket name."""
    if bucket not in _BUCKETS:
        _BUCKETS[bucket] = Storage(bucket, _settings["root"], _settings["public_base_url"])
    return _BUCKETS[bucket]


def configure_storage(root: str = None, public_base_url: str = None):
    """Re-point all buckets at a new root (tests, scripts)."""
    _settings["root"] = root
    _settings["public_base_url"] = public_base_url
    _BUCKETS.clear()
