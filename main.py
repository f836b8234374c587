"""
WallDecorator - Application Entry Point
=========================================
FastAPI app initialization, middleware, and router registration.
"""

import logging
import os
import time as _time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse

from config import settings
from config.database import Base, engine
from common.exceptions import WallDecoratorError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("walldecorator.app")

# ==========================================
# Import ALL models so Alembic/Base can see them
# ==========================================
from modules.catalog.models import (  # noqa: F401
    Category, Product, ProductAttribute, ProductAttributeValue, ProductVariant,
    Inventory, ProductImage, HomepageConfig,
)
from modules.review.models import Review  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401
from modules.newsletter.models import NewsletterSubscriber  # noqa: F401
from modules.custom_order.models import CustomOrderRequest  # noqa: F401

# ==========================================
# Import routers
# ==========================================
from modules.catalog.routes import router as catalog_router
from modules.order.routes import router as order_router
from modules.notification.routes import router as notification_router
from modules.newsletter.routes import router as newsletter_router
from modules.custom_order.routes import router as custom_order_router


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)
    logger.info("WallDecorator API started")
    yield


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="WallDecorator",
    description="Wall art storefront API",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ==========================================
# Static Files (local object storage)
# ==========================================
os.makedirs(settings.STORAGE_ROOT, exist_ok=True)
app.mount("/static/uploads", StaticFiles(directory=settings.STORAGE_ROOT), name="uploads")


# ==========================================
# Business errors -> JSON
# ==========================================
@app.exception_handler(WallDecoratorError)
async def business_error_handler(request: Request, exc: WallDecoratorError):
    return JSONResponse({"success": False, "error": exc.message}, status_code=exc.status_code)


# ==========================================
# Middleware: Request log
# ==========================================
_SKIP_PATHS = ("/static/", "/health", "/favicon.ico")


@app.middleware("http")
async def request_logger(request: Request, call_next):
    """Log method, path, status and timing for every API request."""
    path = request.url.path
    if any(path.startswith(p) for p in _SKIP_PATHS):
        return await call_next(request)

    start = _time.time()
    response = await call_next(request)
    elapsed_ms = int((_time.time() - start) * 1000)
    logger.info(f"{request.method} {path} -> {response.status_code} ({elapsed_ms} ms)")
    return response


# ==========================================
# Register Routers
# ==========================================
app.include_router(catalog_router)
app.include_router(order_router)
app.include_router(notification_router)
app.include_router(newsletter_router)
app.include_router(custom_order_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
