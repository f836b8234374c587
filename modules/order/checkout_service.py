"""
Order Module - Checkout Orchestrator
=======================================
Turns a validated checkout form into exactly one order-creation call.

Flow:
  1. Re-check preconditions (cart not empty, contact + shipping present)
  2. Recompute subtotal and shipping server-side
  3. Resolve billing (same as shipping, or the explicit billing address)
  4. order_service.create_order(...) once; no retry
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from config.settings import PAYMENT_METHOD, TAX_RATE
from common.exceptions import InsufficientInventoryError, WallDecoratorError
from common.helpers import clean_optional
from modules.order.pricing import calculate_subtotal, calculate_shipping
from modules.order.schemas import CheckoutForm
from modules.order.service import order_service, CreateOrderParams, OrderLine

logger = logging.getLogger("walldecorator.checkout")

MSG_EMPTY_CART = "Your cart is empty"
MSG_MISSING_FIELDS = "Missing required fields"
MSG_OUT_OF_STOCK = "Some items in your cart are no longer available in the requested quantity."
MSG_FAILED = "Failed to create order. Please try again."
MSG_SUCCESS = "Order placed successfully!"


@dataclass
class CheckoutResult:
    success: bool
    order_id: Optional[str] = None
    order_number: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    status_code: int = 200

    def as_response(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "orderId": self.order_id,
            "orderNumber": self.order_number,
            "message": self.message,
        }


class CheckoutService:

    def __init__(self, orders=None):
        self.orders = orders or order_service

    def create_order(
        self,
        db: Session,
        form: CheckoutForm,
        ip_address: str = None,
        user_agent: str = None,
    ) -> CheckoutResult:
        if not form.items:
            return CheckoutResult(success=False, error=MSG_EMPTY_CART, status_code=400)
        if not (form.email and form.full_name and form.phone and form.shipping_address):
            return CheckoutResult(success=False, error=MSG_MISSING_FIELDS, status_code=400)

        subtotal = calculate_subtotal(form.items)
        shipping_cost = calculate_shipping(subtotal)

        params = CreateOrderParams(
            customer_email=form.email,
            customer_name=form.full_name,
            customer_phone=form.phone,
            shipping_address=form.shipping_address.to_record(),
            billing_address=form.billing_record(),
            cart_items=[
                OrderLine(variant_id=it.variant_id, quantity=it.quantity, price=it.price)
                for it in form.items
            ],
            payment_intent_id=None,
            payment_method=PAYMENT_METHOD,
            shipping_cost=shipping_cost,
            discount_amount=0,
            tax_rate=TAX_RATE,
            subtotal=subtotal,
            notes=clean_optional(form.order_notes),
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            order = self.orders.create_order(db, params)
        except InsufficientInventoryError as e:
            logger.warning(f"Checkout rejected for {form.email}: {e.message}")
            return CheckoutResult(success=False, error=MSG_OUT_OF_STOCK, status_code=409)
        except WallDecoratorError as e:
            logger.error(f"Order creation error for {form.email}: {e.message}")
            return CheckoutResult(success=False, error=MSG_FAILED, status_code=500)
        except Exception:
            logger.exception(f"Unexpected checkout failure for {form.email}")
            return CheckoutResult(success=False, error=MSG_FAILED, status_code=500)

        logger.info(f"Checkout complete: {order.order_number} subtotal={subtotal} shipping={shipping_cost}")
        return CheckoutResult(
            success=True,
            order_id=order.id,
            order_number=order.order_number,
            message=MSG_SUCCESS,
        )


# Singleton
checkout_service = CheckoutService()
