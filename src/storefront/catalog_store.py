"""Catalog storage (products and categories) for storefront."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import (
    CategoryExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidCategoryError,
    InvalidProductError,
    ProductNotFoundError,
)
from .json_store import SCHEMA_VERSION, JsonFileStore
from .models import Category, Product
from .pricing import clamp_discount
from .utils import slugify

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


def _validated_fields(
    name: str,
    category: str,
    price: Any,
    stock: Any,
    categories: list[Category],
) -> tuple[str, Decimal, int]:
    """
    Check the fields an admin submits for a product.

    Returns:
        Tuple of (trimmed name, price, stock).

    Raises:
        InvalidProductError: If any field is missing or out of range.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidProductError("name is required")

    if not any(c.id == category for c in categories):
        raise InvalidProductError(f"unknown category '{category}'")

    try:
        price_value = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise InvalidProductError("price must be a number")
    if not price_value.is_finite() or price_value <= 0:
        raise InvalidProductError("price must be greater than 0")

    try:
        stock_value = int(stock)
    except (TypeError, ValueError):
        raise InvalidProductError("stock must be an integer")
    if stock_value < 0:
        raise InvalidProductError("stock must be 0 or more")

    return name, price_value, stock_value


class CatalogStore(JsonFileStore):
    """Manages products and categories.

    Implements the product lookup the cart and checkout depend on.
    """

    FILENAME = "catalog.json"

    def empty_document(self) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "next_product_id": 1,
            "products": [],
            "categories": [],
        }

    # --- Products ---

    def list_products(self) -> list[Product]:
        """List all products, newest first."""
        data = self._load_data()
        products = [Product.from_dict(p) for p in data.get("products", [])]
        products.sort(key=lambda p: p.id, reverse=True)
        return products

    def filter_products(
        self, category: str = ALL_CATEGORIES, search: str = ""
    ) -> list[Product]:
        """
        List products matching a category and a search term.

        Args:
            category: Category ID, or "all" for every category.
            search: Case-insensitive substring of name or description.
        """
        needle = (search or "").strip().lower()
        results = []
        for product in self.list_products():
            if category and category != ALL_CATEGORIES and product.category != category:
                continue
            haystack = f"{product.name}\n{product.description}".lower()
            if needle and needle not in haystack:
                continue
            results.append(product)
        return results

    def featured(self, limit: int = 4) -> list[Product]:
        """Newest products for the home page."""
        return self.list_products()[:limit]

    def related(self, product: Product, limit: int = 4) -> list[Product]:
        """Other products in the same category."""
        same_category = self.filter_products(category=product.category)
        return [p for p in same_category if p.id != product.id][:limit]

    def get_product(self, product_id: int) -> Product | None:
        """Get a product by ID, or None if it doesn't exist."""
        data = self._load_data()
        for p in data.get("products", []):
            if p["id"] == product_id:
                return Product.from_dict(p)
        return None

    def require_product(self, product_id: int) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist.
        """
        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def create_product(
        self,
        name: str,
        category: str,
        price: Any,
        stock: Any = 0,
        description: str = "",
        images: list[str] | None = None,
        discount_percent: Any = 0,
    ) -> Product:
        """
        Add a product to the catalog.

        The discount is clamped to [0, 90] before it is stored.

        Raises:
            InvalidProductError: If a field is missing or out of range.
        """
        with self.transaction() as data:
            categories = [Category.from_dict(c) for c in data.get("categories", [])]
            name, price_value, stock_value = _validated_fields(
                name, category, price, stock, categories
            )
            product = Product(
                id=self._next_id(data, "next_product_id"),
                name=name,
                description=(description or "").strip(),
                category=category,
                stock=stock_value,
                price=price_value,
                discount_percent=clamp_discount(discount_percent),
                images=list(images or []),
            )
            data["products"].append(product.to_dict())

        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update_product(
        self,
        product_id: int,
        name: str,
        category: str,
        price: Any,
        stock: Any = 0,
        description: str = "",
        images: list[str] | None = None,
        discount_percent: Any = 0,
    ) -> Product:
        """
        Replace a product's editable fields.

        Raises:
            ProductNotFoundError: If product doesn't exist.
            InvalidProductError: If a field is missing or out of range.
        """
        with self.transaction() as data:
            products = data.get("products", [])
            index = next(
                (i for i, p in enumerate(products) if p["id"] == product_id), None
            )
            if index is None:
                raise ProductNotFoundError(product_id)

            categories = [Category.from_dict(c) for c in data.get("categories", [])]
            name, price_value, stock_value = _validated_fields(
                name, category, price, stock, categories
            )
            existing = Product.from_dict(products[index])
            product = Product(
                id=product_id,
                name=name,
                description=(description or "").strip(),
                category=category,
                stock=stock_value,
                price=price_value,
                discount_percent=clamp_discount(discount_percent),
                images=list(images or []),
                created_at=existing.created_at,
            )
            products[index] = product.to_dict()

        return product

    def delete_product(self, product_id: int) -> Product:
        """
        Remove a product from the catalog.

        Carts that still reference it drop the line at the next totals pass.

        Raises:
            ProductNotFoundError: If product doesn't exist.
        """
        with self.transaction() as data:
            products = data.get("products", [])
            for i, p in enumerate(products):
                if p["id"] == product_id:
                    removed = Product.from_dict(products.pop(i))
                    break
            else:
                raise ProductNotFoundError(product_id)

        logger.info("Deleted product %s", product_id)
        return removed

    def get_stats(self) -> dict[str, int]:
        """Product count, total stock, and number of categories in use."""
        products = self.list_products()
        return {
            "total_products": len(products),
            "total_stock": sum(p.stock for p in products),
            "total_categories": len({p.category for p in products}),
        }

    # --- Categories ---

    def list_categories(self) -> list[Category]:
        """List categories sorted by label."""
        data = self._load_data()
        categories = [Category.from_dict(c) for c in data.get("categories", [])]
        categories.sort(key=lambda c: c.label.lower())
        return categories

    def is_valid_category(self, category_id: str) -> bool:
        return any(c.id == category_id for c in self.list_categories())

    def ensure_default_categories(self, defaults: list[dict[str, Any]]) -> int:
        """
        Insert any default category that doesn't exist yet.

        Returns:
            Number of categories added.
        """
        added = 0
        with self.transaction() as data:
            existing = {c["id"] for c in data.get("categories", [])}
            for cat in defaults:
                if not cat.get("id") or not cat.get("label") or cat["id"] in existing:
                    continue
                data["categories"].append(
                    Category(
                        id=cat["id"], label=cat["label"], image_url=cat.get("image_url")
                    ).to_dict()
                )
                existing.add(cat["id"])
                added += 1
        return added

    def create_category(
        self, label: str, slug: str | None = None, image_url: str | None = None
    ) -> Category:
        """
        Add a category. The slug defaults to slugify(label).

        Raises:
            InvalidCategoryError: If label or slug is empty, or the slug is "all".
            CategoryExistsError: If the slug is taken.
        """
        label = (label or "").strip()
        category_id = (slug or "").strip().lower() or slugify(label)
        if not label or not category_id:
            raise InvalidCategoryError("label is required")
        if category_id == ALL_CATEGORIES:
            raise InvalidCategoryError(f"'{ALL_CATEGORIES}' is reserved")

        with self.transaction() as data:
            if any(c["id"] == category_id for c in data.get("categories", [])):
                raise CategoryExistsError(category_id)
            category = Category(id=category_id, label=label, image_url=image_url or None)
            data["categories"].append(category.to_dict())

        return category

    def delete_category(self, category_id: str) -> Category:
        """
        Delete a category that no product uses.

        Raises:
            CategoryNotFoundError: If category doesn't exist.
            CategoryInUseError: If products still reference it.
        """
        with self.transaction() as data:
            categories = data.get("categories", [])
            index = next(
                (i for i, c in enumerate(categories) if c["id"] == category_id), None
            )
            if index is None:
                raise CategoryNotFoundError(category_id)

            in_use = sum(1 for p in data.get("products", []) if p["category"] == category_id)
            if in_use:
                raise CategoryInUseError(category_id, in_use)

            return Category.from_dict(categories.pop(index))

