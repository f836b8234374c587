"""
Order Module - Service Layer
===============================
Atomic order creation (inventory decrement + order + items + order number),
order lookups, and the back-office status setter.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from common.exceptions import (
    WallDecoratorError, OrderCreationError, InsufficientInventoryError, NotFoundError,
)
from common.helpers import generate_order_number, format_long_date
from modules.catalog.models import ProductVariant, Inventory
from modules.order.models import Order, OrderItem, OrderStatus

logger = logging.getLogger("walldecorator.order")


@dataclass
class OrderLine:
    """One cart line as submitted: {variant_id, quantity, price}."""
    variant_id: str
    quantity: int
    price: int


@dataclass
class CreateOrderParams:
    """Inputs of the order-creation transaction."""
    customer_email: str
    customer_name: str
    customer_phone: str
    shipping_address: dict
    billing_address: dict
    cart_items: List[OrderLine]
    payment_method: str
    shipping_cost: int
    subtotal: Optional[int] = None
    payment_intent_id: Optional[str] = None
    discount_amount: int = 0
    tax_rate: int = 0
    notes: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class OrderService:

    # ==========================================
    # Create (single transaction)
    # ==========================================

    def create_order(self, db: Session, params: CreateOrderParams) -> Order:
        """
        Given valid inputs, in one transaction:
        1. Lock the inventory rows of every ordered variant (SELECT FOR UPDATE)
        2. Check variants exist, prices match, and stock covers the quantities
        3. Decrement inventory and bump product total_sold
        4. Insert the order (status pending, fresh order number) and its items

        Any failure rolls everything back and raises OrderCreationError or
        InsufficientInventoryError; no partial rows are left behind.
        """
        if not params.cart_items:
            raise OrderCreationError("Cart is empty")

        try:
            needed: Dict[str, int] = {}
            for line in params.cart_items:
                if line.quantity < 1:
                    raise OrderCreationError(f"Invalid quantity for variant {line.variant_id}")
                needed[line.variant_id] = needed.get(line.variant_id, 0) + line.quantity

            # Lock in a stable order so two checkouts can't deadlock each other
            variant_ids = sorted(needed)
            inventories = (
                db.query(Inventory)
                .filter(Inventory.variant_id.in_(variant_ids))
                .order_by(Inventory.variant_id)
                .with_for_update()
                .all()
            )
            inv_map = {inv.variant_id: inv for inv in inventories}

            variants = db.query(ProductVariant).options(
                joinedload(ProductVariant.product),
            ).filter(ProductVariant.id.in_(variant_ids)).all()
            variant_map = {v.id: v for v in variants}

            for line in params.cart_items:
                variant = variant_map.get(line.variant_id)
                if not variant:
                    raise OrderCreationError(f"Unknown variant {line.variant_id}")
                if int(line.price) != int(variant.price):
                    raise OrderCreationError(f"Price changed for {variant.sku}")

            for variant_id, qty in needed.items():
                inv = inv_map.get(variant_id)
                if not inv or inv.quantity_available < qty:
                    raise InsufficientInventoryError(variant_map[variant_id].sku)

            subtotal = sum(int(line.price) * line.quantity for line in params.cart_items)
            if params.subtotal is not None and int(params.subtotal) != subtotal:
                raise OrderCreationError(f"Subtotal mismatch: got {params.subtotal}, computed {subtotal}")

            tax_amount = int(Decimal(subtotal) * Decimal(params.tax_rate) / 100)
            total_amount = max(0, subtotal + params.shipping_cost + tax_amount - params.discount_amount)

            order = Order(
                order_number=self._unique_order_number(db),
                status=OrderStatus.PENDING.value,
                customer_email=params.customer_email,
                customer_name=params.customer_name,
                customer_phone=params.customer_phone,
                shipping_address=params.shipping_address,
                billing_address=params.billing_address,
                subtotal=subtotal,
                shipping_cost=params.shipping_cost,
                discount_amount=params.discount_amount,
                tax_rate=params.tax_rate,
                tax_amount=tax_amount,
                total_amount=total_amount,
                payment_method=params.payment_method,
                payment_intent_id=params.payment_intent_id,
                notes=params.notes,
                ip_address=params.ip_address,
                user_agent=params.user_agent,
            )

            for line in params.cart_items:
                variant = variant_map[line.variant_id]
                order.items.append(OrderItem(
                    variant_id=variant.id,
                    product_name=variant.product.name,
                    variant_description=variant.description,
                    sku=variant.sku,
                    unit_price=int(line.price),
                    quantity=line.quantity,
                    total_price=int(line.price) * line.quantity,
                ))

            for variant_id, qty in needed.items():
                inv_map[variant_id].quantity_available -= qty
                variant_map[variant_id].product.total_sold += qty

            db.add(order)
            db.commit()

        except WallDecoratorError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise OrderCreationError(f"Order transaction failed: {e}") from e

        logger.info(f"Created order {order.order_number} ({order.id}) total={order.total_amount}")
        return order

    # ==========================================
    # Query
    # ==========================================

    def get_order(self, db: Session, order_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    def get_order_items(self, db: Session, order_id: str) -> List[OrderItem]:
        return db.query(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.id).all()

    def get_confirmation(self, db: Session, order_id: str) -> Optional[dict]:
        """Order summary for the post-checkout confirmation page."""
        order = db.query(Order).options(joinedload(Order.items)).filter(Order.id == order_id).first()
        if not order:
            return None
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "shipping_address": order.shipping_address,
            "payment_method": order.payment_method,
            "subtotal": order.subtotal,
            "shipping_cost": order.shipping_cost,
            "tax_amount": order.tax_amount,
            "total_amount": order.total_amount,
            "created_at": format_long_date(order.created_at),
            "items": [{
                "product_name": it.product_name,
                "variant_description": it.variant_description,
                "sku": it.sku,
                "quantity": it.quantity,
                "unit_price": it.unit_price,
                "total_price": it.total_price,
            } for it in sorted(order.items, key=lambda it: it.id)],
        }

    # ==========================================
    # Back-office
    # ==========================================

    def update_status(self, db: Session, order_id: str, status: str) -> Order:
        """Set a new status. Confirmation email is sent by the webhook, not here."""
        if status not in {s.value for s in OrderStatus}:
            raise WallDecoratorError(f"Unknown order status: {status}")
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        order.status = status
        db.commit()
        return order

    # ==========================================
    # Private Helpers
    # ==========================================

    def _unique_order_number(self, db: Session, max_retries: int = 10) -> str:
        for _ in range(max_retries):
            number = generate_order_number()
            exists = db.query(Order.id).filter(Order.order_number == number).first()
            if not exists:
                return number
        raise OrderCreationError("Failed to generate unique order number after retries")


# Singleton
order_service = OrderService()
