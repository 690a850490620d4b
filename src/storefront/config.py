"""Configuration constants for storefront."""

import os
from decimal import Decimal
from pathlib import Path

# Centralized storage location
# Can be overridden via STOREFRONT_DATA_DIR environment variable
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("STOREFRONT_DATA_DIR", _default_data_dir))

ADMIN_USER = os.environ.get("STOREFRONT_ADMIN_USER", "admin")
ADMIN_PASSWORD = os.environ.get("STOREFRONT_ADMIN_PASSWORD", "admin123")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "STOREFRONT_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]

# Pricing
SHIPPING_FEE = Decimal("29.90")
FREE_SHIPPING_THRESHOLD = Decimal("500")
MAX_DISCOUNT_PERCENT = Decimal("90")

# Orders
ORDER_CODE_PREFIX = "ORD-"
ORDER_CODE_LENGTH = 8
DEFAULT_ORDER_STATUS = "paid"

# Accounts
MIN_PASSWORD_LENGTH = 6

DEFAULT_CATEGORIES = [
    {"id": "cases", "label": "Cases"},
    {"id": "screen-protectors", "label": "Screen Protectors"},
    {"id": "chargers", "label": "Chargers"},
    {"id": "cables", "label": "Cables"},
    {"id": "powerbanks", "label": "Power Banks"},
    {"id": "headphones", "label": "Headphones"},
]
