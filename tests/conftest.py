"""Pytest fixtures for storefront tests."""

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from storefront.catalog_store import CatalogStore
from storefront.comment_store import CommentStore
from storefront.config import DEFAULT_CATEGORIES
from storefront.models import Product
from storefront.order_store import OrderStore
from storefront.session_store import InMemoryCartStore
from storefront.user_store import UserStore

# Reference time for expiry checks
FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)

VALID_VISA = "4111 1111 1111 1111"


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def catalog_store(temp_dir):
    """Catalog with the default categories seeded and no products."""
    store = CatalogStore(temp_dir)
    store.ensure_default_categories(DEFAULT_CATEGORIES)
    return store


@pytest.fixture
def seeded_catalog(catalog_store):
    """Catalog with a handful of products across two categories."""
    catalog_store.create_product(
        name="Leather Case", category="cases", price="100", stock=5, discount_percent=20,
        images=["https://img.example/case-1.jpg", "https://img.example/case-2.jpg"],
    )
    catalog_store.create_product(
        name="Fast Charger", category="chargers", price="250", stock=3,
        description="65W USB-C wall charger",
    )
    catalog_store.create_product(
        name="Silicone Case", category="cases", price="49.90", stock=0,
    )
    return catalog_store


@pytest.fixture
def order_store(temp_dir):
    return OrderStore(temp_dir)


@pytest.fixture
def comment_store(temp_dir):
    return CommentStore(temp_dir)


@pytest.fixture
def user_store(temp_dir):
    return UserStore(temp_dir)


@pytest.fixture
def cart_store():
    return InMemoryCartStore()


@pytest.fixture
def valid_form_data():
    """Checkout form fields that pass validation at FIXED_NOW."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "card_number": VALID_VISA,
        "exp": "12/30",
        "cvc": "123",
    }


class FakeCatalog:
    """In-memory product lookup."""

    def __init__(self, products=None):
        self.products = {p.id: p for p in (products or [])}

    def get_product(self, product_id):
        return self.products.get(product_id)


def make_product(product_id, price, discount=0, stock=10, name=None, category="cases"):
    return Product(
        id=product_id,
        name=name or f"Product {product_id}",
        category=category,
        price=Decimal(str(price)),
        stock=stock,
        discount_percent=Decimal(str(discount)),
    )
