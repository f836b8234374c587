"""
WallDecorator - Centralized Configuration
==========================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ==========================================
# 🗄️ Database
# ==========================================
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME")

if os.getenv("DATABASE_URL"):
    DATABASE_URL = os.getenv("DATABASE_URL")
elif all([DB_USER, DB_PASSWORD, DB_HOST, DB_NAME]):
    DATABASE_URL = f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
else:
    # Local development fallback
    DATABASE_URL = "sqlite:///./walldecorator.db"


# ==========================================
# 🔐 Webhooks
# ==========================================
# Shared secret sent by the database webhook as "Authorization: Bearer <secret>"
SUPABASE_WEBHOOK_SECRET = os.getenv("SUPABASE_WEBHOOK_SECRET", "")


# ==========================================
# ✉️ Email (Resend)
# ==========================================
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", "WallDecorator <orders@walldecorator.pk>")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@walldecorator.pk")
EMAIL_TIMEOUT = 10  # seconds


# ==========================================
# ⚡ Cache (Redis)
# ==========================================
# Empty -> in-memory fallback (development only)
REDIS_URL = os.getenv("REDIS_URL", "")

CACHE_TTL_HOMEPAGE = 1800
CACHE_TTL_CATEGORIES = 3600
CACHE_TTL_FEATURED = 1800
CACHE_TTL_BESTSELLERS = 3600
CACHE_TTL_PRODUCTS = 300
CACHE_TTL_PRODUCT_CATEGORIES = 3600
CACHE_TTL_ATTRIBUTES = 600
CACHE_TTL_PRODUCT_DETAIL = 600
CACHE_TTL_REVIEWS = 900
CACHE_TTL_RELATED = 600


# ==========================================
# 📁 Storage & Upload
# ==========================================
SITE_URL = os.getenv("SITE_URL", "http://127.0.0.1:8000")
STORAGE_ROOT = os.getenv("STORAGE_ROOT", "static/uploads")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", f"{SITE_URL}/static/uploads")
PLACEHOLDER_IMAGE_URL = "/placeholder.jpg"

PRODUCT_IMAGES_BUCKET = "product-images"
CUSTOM_ORDERS_BUCKET = "custom-orders"

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


# ==========================================
# 🖼️ Image Processing
# ==========================================
IMAGE_VARIANTS = {
    "thumbnail": {"width": 150, "height": 150, "folder": "thumbnail"},
    "medium": {"width": 600, "height": 600, "folder": "medium"},
    "large": {"width": 1200, "height": 1200, "folder": "large"},
}
IMAGE_VARIANT_QUALITY = 85
BLURHASH_BOX_SIZE = 32
BLURHASH_COMPONENTS = (4, 3)  # (x, y)


# ==========================================
# 🛒 Shop
# ==========================================
FREE_SHIPPING_THRESHOLD = 5000  # Rs
SHIPPING_COST = 200             # Rs flat fee below threshold
TAX_RATE = 0
PAYMENT_METHOD = "cash_on_delivery"
DEFAULT_COUNTRY = "Pakistan"
CURRENCY_LABEL = "Rs"

PAKISTAN_PROVINCES = [
    "Punjab",
    "Sindh",
    "Khyber Pakhtunkhwa",
    "Balochistan",
    "Gilgit-Baltistan",
    "Azad Kashmir",
    "Islamabad Capital Territory",
]

PRODUCTS_PER_PAGE = 24


# ==========================================
# 🔧 App
# ==========================================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
