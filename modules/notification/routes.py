"""
Notification Module - Routes
===============================
Database webhook endpoint for order status changes.
"""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.database import get_db
from modules.notification.service import order_confirmation_service

logger = logging.getLogger("walldecorator.notification")

router = APIRouter(prefix="/api", tags=["notification"])


@router.post("/send-order-confirmation")
async def send_order_confirmation(
    request: Request,
    authorization: str = Header(None),
    db: Session = Depends(get_db),
):
    if not order_confirmation_service.is_authorized(authorization):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    result = order_confirmation_service.handle_event(db, payload)
    return JSONResponse(result.as_response(), status_code=result.status_code)
