"""
Notification Module - Order Confirmation Dispatcher
=====================================================
Reacts to order row-change events and emails the customer once, on the
transition into "confirmed".

Event shape (database webhook):
    {"type": "UPDATE", "table": "orders", "record": {...}, "old_record": {...}}
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from config.settings import SUPABASE_WEBHOOK_SECRET, SITE_URL, SUPPORT_EMAIL
from common.helpers import format_long_date, now_utc
from common.mailer import Mailer, mailer as default_mailer
from common.security import verify_bearer
from common.templating import render_template
from modules.order.models import OrderStatus
from modules.order.service import order_service

logger = logging.getLogger("walldecorator.notification")

TEMPLATE = "emails/order_confirmation.html"


@dataclass
class ConfirmationResult:
    """Result of OrderConfirmationService.handle_event()."""
    success: bool
    message: Optional[str] = None
    email_id: Optional[str] = None
    error: Optional[str] = None
    status_code: int = 200

    def as_response(self) -> dict:
        if not self.success:
            return {"error": self.error}
        body = {"success": True, "message": self.message}
        if self.email_id is not None:
            body["emailId"] = self.email_id
        return body


def should_send(payload: dict) -> bool:
    """UPDATE events moving status into "confirmed" from anything else."""
    if not isinstance(payload, dict) or payload.get("type") != "UPDATE":
        return False
    record = payload.get("record") or {}
    old_record = payload.get("old_record") or {}
    if not isinstance(record, dict) or not isinstance(old_record, dict):
        return False
    confirmed = OrderStatus.CONFIRMED.value
    return record.get("status") == confirmed and old_record.get("status") != confirmed


def _parse_date(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _amount(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class OrderConfirmationService:

    def __init__(self, mailer: Mailer = None, webhook_secret: str = None):
        self.mailer = mailer or default_mailer
        self.webhook_secret = SUPABASE_WEBHOOK_SECRET if webhook_secret is None else webhook_secret

    def is_authorized(self, authorization: Optional[str]) -> bool:
        return verify_bearer(authorization, self.webhook_secret)

    def handle_event(self, db: Session, payload: dict) -> ConfirmationResult:
        order_number = ""
        try:
            if not should_send(payload):
                return ConfirmationResult(success=True, message="No email needed")

            order = payload["record"]
            order_number = order.get("order_number", "")
            try:
                items = order_service.get_order_items(db, order.get("id"))
            except SQLAlchemyError as e:
                logger.error(f"Error fetching order items for {order_number}: {e}")
                return ConfirmationResult(success=False, error="Failed to fetch order items", status_code=500)

            html = self.render(order, items)
            result = self.mailer.send(
                to=order.get("customer_email"),
                subject=f"Order Confirmed - {order_number}",
                html=html,
            )
            if not result.success:
                logger.error(f"Error sending confirmation for {order_number}: {result.error_message}")
                return ConfirmationResult(success=False, error="Failed to send email", status_code=500)

        except Exception:
            logger.exception(f"Webhook error for order {order_number}")
            return ConfirmationResult(success=False, error="Internal server error", status_code=500)

        logger.info(f"Order confirmation email sent for {order_number} ({result.email_id})")
        return ConfirmationResult(
            success=True,
            message=f"Email sent to {order.get('customer_email')}",
            email_id=result.email_id,
        )

    def render(self, order: dict, items) -> str:
        """Render the confirmation email body for an order record and its items."""
        order_number = order.get("order_number", "")
        return render_template(
            TEMPLATE,
            order_number=order_number,
            customer_name=order.get("customer_name", ""),
            order_date=format_long_date(_parse_date(order.get("created_at"))),
            items=[{
                "name": it.product_name,
                "material": it.variant_description or "Standard",
                "quantity": it.quantity,
                "unit_price": _amount(it.unit_price),
                "total_price": _amount(it.total_price),
            } for it in items],
            subtotal=_amount(order.get("subtotal")),
            shipping_cost=_amount(order.get("shipping_cost")),
            tax_amount=_amount(order.get("tax_amount")),
            total=_amount(order.get("total_amount")),
            shipping_address=order.get("shipping_address") or {},
            tracking_url=f"{SITE_URL}/orders/track?order={order_number}",
            site_url=SITE_URL,
            support_email=SUPPORT_EMAIL,
            year=now_utc().year,
        )


# Singleton
order_confirmation_service = OrderConfirmationService()
