"""
WallDecorator - Order Status Tool
===================================
Back-office status change. Moving an order to "confirmed" in the database
fires the order webhook, which sends the confirmation email.

Usage:
    python scripts/set_order_status.py <order-number> <status>
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal
from common.exceptions import WallDecoratorError
from modules.catalog.models import Product  # noqa: F401
from modules.order.models import Order
from modules.order.service import order_service


def main(order_number: str, status: str) -> int:
    db = SessionLocal()
    try:
        order = db.query(Order).filter(Order.order_number == order_number).first()
        if not order:
            print(f"Order not found: {order_number}")
            return 1
        previous = order.status
        order_service.update_status(db, order.id, status)
        print(f"{order_number}: {previous} -> {status}")
        return 0
    except WallDecoratorError as e:
        print(f"Failed: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2]))
