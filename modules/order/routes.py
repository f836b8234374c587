"""
Order Module - Routes
========================
Cash-on-delivery checkout and the order confirmation lookup.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from config.settings import (
    PAKISTAN_PROVINCES, DEFAULT_COUNTRY, FREE_SHIPPING_THRESHOLD, SHIPPING_COST, PAYMENT_METHOD,
)
from common.helpers import get_real_ip
from modules.order.schemas import CheckoutForm
from modules.order.checkout_service import checkout_service
from modules.order.service import order_service

router = APIRouter(prefix="/api", tags=["order"])


# ==========================================
# 🧾 Checkout
# ==========================================

@router.post("/checkout")
async def checkout(
    request: Request,
    form: CheckoutForm,
    db: Session = Depends(get_db),
):
    result = checkout_service.create_order(
        db, form,
        ip_address=get_real_ip(request),
        user_agent=request.headers.get("user-agent", ""),
    )
    return JSONResponse(result.as_response(), status_code=result.status_code)


# ==========================================
# ✅ Confirmation
# ==========================================

@router.get("/orders/{order_id}")
async def order_confirmation(order_id: str, db: Session = Depends(get_db)):
    summary = order_service.get_confirmation(db, order_id)
    if not summary:
        raise HTTPException(status_code=404, detail="Order not found")
    return summary


@router.get("/checkout/options")
async def checkout_options():
    """Static values the checkout form needs (province list, shipping rule)."""
    return {
        "provinces": PAKISTAN_PROVINCES,
        "country": DEFAULT_COUNTRY,
        "freeShippingThreshold": FREE_SHIPPING_THRESHOLD,
        "shippingCost": SHIPPING_COST,
        "paymentMethod": PAYMENT_METHOD,
    }
