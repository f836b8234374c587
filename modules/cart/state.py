"""
Cart Module - State Container
================================
Explicit cart state owned by a single client session.

Items are written to the configured storage after every mutation and
hydrated when the container is created. The drawer's open/closed flag is
transient and never persisted.
"""

import json
import logging
import os
from typing import Dict, List, Optional

from config.settings import FREE_SHIPPING_THRESHOLD
from modules.cart.models import CartItem

logger = logging.getLogger("walldecorator.cart")

STORAGE_KEY = "cart-storage"
STORAGE_VERSION = 0


# ==========================================
# Storage backends
# ==========================================

class MemoryCartStorage:
    """Keeps the serialized blob in a dict (tests, server-side previews)."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str):
        self.data[key] = value

    def remove_item(self, key: str):
        self.data.pop(key, None)


class JsonFileCartStorage:
    """One JSON file per key inside `directory`, surviving restarts."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get_item(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), "r", encoding="utf-8") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str):
        os.makedirs(self.directory, exist_ok=True)
        tmp = self._path(key) + ".tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            fh.write(value)
        os.replace(tmp, self._path(key))

    def remove_item(self, key: str):
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


# ==========================================
# Cart
# ==========================================

class CartState:

    def __init__(self, storage=None, key: str = STORAGE_KEY):
        self.storage = storage if storage is not None else MemoryCartStorage()
        self.key = key
        self.items: List[CartItem] = []
        self.is_open = False
        self._hydrate()

    # ---- mutations ----

    def add_item(self, item: CartItem):
        """Add a line; an existing line for the same variant gets the quantity added."""
        existing = self._find(item.variant_id)
        if existing:
            existing.quantity += item.quantity
        else:
            self.items.append(CartItem.from_dict(item.to_dict()))
        self._persist()

    def remove_item(self, variant_id: str):
        self.items = [i for i in self.items if i.variant_id != variant_id]
        self._persist()

    def update_quantity(self, variant_id: str, quantity: int):
        """Set a line's quantity; 0 removes the line. Negative values are the caller's bug."""
        if quantity == 0:
            self.remove_item(variant_id)
            return
        item = self._find(variant_id)
        if item:
            item.quantity = quantity
        self._persist()

    def clear_cart(self):
        self.items = []
        self._persist()

    def open_cart(self):
        self.is_open = True

    def close_cart(self):
        self.is_open = False

    # ---- derived ----

    def get_total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    def get_total_price(self) -> int:
        return sum(i.line_total for i in self.items)

    def free_shipping_progress(self) -> dict:
        """Amount left until free shipping and progress percentage (0-100)."""
        total = self.get_total_price()
        remaining = max(0, FREE_SHIPPING_THRESHOLD - total)
        percent = min(100, int(total * 100 / FREE_SHIPPING_THRESHOLD)) if FREE_SHIPPING_THRESHOLD else 100
        return {"qualifies": remaining == 0, "remaining": remaining, "percent": percent}

    def to_checkout_items(self) -> List[dict]:
        """Line items as the checkout endpoint expects them."""
        return [{"variant_id": i.variant_id, "quantity": i.quantity, "price": i.price} for i in self.items]

    # ---- persistence ----

    def _find(self, variant_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.variant_id == variant_id:
                return item
        return None

    def _persist(self):
        blob = json.dumps({
            "state": {"items": [i.to_dict() for i in self.items]},
            "version": STORAGE_VERSION,
        })
        self.storage.set_item(self.key, blob)

    def _hydrate(self):
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return
            data = json.loads(raw)
            self.items = [CartItem.from_dict(d) for d in data["state"]["items"]]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable persisted cart: {e}")
            self.items = []
