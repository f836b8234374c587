"""
Order Module - Pricing
=========================
Server-side subtotal and shipping. Client totals are never trusted.
"""

from typing import Iterable

from config.settings import FREE_SHIPPING_THRESHOLD, SHIPPING_COST


def calculate_subtotal(items: Iterable) -> int:
    """Sum of price x quantity. Accepts objects or dicts with price/quantity."""
    total = 0
    for item in items:
        if isinstance(item, dict):
            total += int(item["price"]) * int(item["quantity"])
        else:
            total += int(item.price) * int(item.quantity)
    return total


def calculate_shipping(subtotal: int) -> int:
    """Free at or above the threshold, flat fee below it."""
    return 0 if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_COST
