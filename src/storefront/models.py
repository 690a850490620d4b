"""Data models for storefront."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _to_decimal(value: Any, default: str = "0") -> Decimal:
    """Parse a stored money/percent value, falling back to default."""
    if value is None or value == "":
        return Decimal(default)
    return Decimal(str(value))


@dataclass
class Product:
    """A catalog product."""

    id: int
    name: str
    category: str
    price: Decimal
    stock: int = 0
    description: str = ""
    discount_percent: Decimal = Decimal("0")
    images: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=_utc_now)

    @property
    def image_url(self) -> str | None:
        """Primary image (first in the list)."""
        return self.images[0] if self.images else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "stock": self.stock,
            "price": str(self.price),
            "discount_percent": str(self.discount_percent),
            "images": list(self.images),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description") or "",
            category=data["category"],
            stock=int(data.get("stock", 0)),
            price=_to_decimal(data.get("price")),
            discount_percent=_to_decimal(data.get("discount_percent")),
            images=list(data.get("images") or []),
            created_at=data.get("created_at", ""),
        )


@dataclass
class Category:
    """A product category, keyed by slug."""

    id: str
    label: str
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "image_url": self.image_url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return cls(
            id=data["id"],
            label=data["label"],
            image_url=data.get("image_url"),
        )


@dataclass
class Comment:
    """A customer comment on a product, optionally answered by an admin."""

    id: int
    product_id: int
    author_name: str
    content: str
    admin_reply: str | None = None
    user_id: int | None = None
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "author_name": self.author_name,
            "content": self.content,
            "admin_reply": self.admin_reply,
            "user_id": self.user_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            id=data["id"],
            product_id=data["product_id"],
            author_name=data["author_name"],
            content=data["content"],
            admin_reply=data.get("admin_reply"),
            user_id=data.get("user_id"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class User:
    """A registered customer account."""

    id: int
    name: str
    email: str  # lower-cased
    password_hash: str
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "created_at": self.created_at,
        }

    def to_public_dict(self) -> dict[str, Any]:
        """Account fields safe to return to a client."""
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            created_at=data.get("created_at", ""),
        )


# Models for the session cart


@dataclass
class CartLine:
    """A session cart entry.

    The snapshot fields are informational only; totals are always recomputed
    from the current product.
    """

    product_id: int
    quantity: int = 1
    name: str = ""
    unit_price: Decimal | None = None
    original_price: Decimal | None = None
    discount_percent: Decimal = Decimal("0")
    thumbnail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.product_id,
            "qty": self.quantity,
            "name": self.name,
            "price": None if self.unit_price is None else str(self.unit_price),
            "original_price": (
                None if self.original_price is None else str(self.original_price)
            ),
            "discount_percent": str(self.discount_percent),
            "image_url": self.thumbnail,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartLine":
        price = data.get("price")
        original = data.get("original_price")
        return cls(
            product_id=data["id"],
            quantity=data.get("qty", 1),
            name=data.get("name", ""),
            unit_price=None if price is None else _to_decimal(price),
            original_price=None if original is None else _to_decimal(original),
            discount_percent=_to_decimal(data.get("discount_percent")),
            thumbnail=data.get("image_url"),
        )


@dataclass(frozen=True)
class CartItem:
    """A cart line resolved against the current catalog."""

    product_id: int
    name: str
    quantity: int
    unit_price: Decimal
    original_price: Decimal
    discount_percent: Decimal
    thumbnail: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.product_id,
            "name": self.name,
            "qty": self.quantity,
            "price": str(self.unit_price),
            "original_price": str(self.original_price),
            "discount_percent": str(self.discount_percent),
            "image_url": self.thumbnail,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartItem":
        return cls(
            product_id=data["id"],
            name=data["name"],
            quantity=data["qty"],
            unit_price=_to_decimal(data["price"]),
            original_price=_to_decimal(data["original_price"]),
            discount_percent=_to_decimal(data.get("discount_percent")),
            thumbnail=data.get("image_url"),
        )


@dataclass(frozen=True)
class CartTotals:
    """Result of pricing a cart against the catalog."""

    items: list[CartItem]
    total_amount: Decimal
    shipping: Decimal
    payable: Decimal
    total_items: int
    dropped: int = 0  # stale lines pruned because the product is gone


# Models for checkout results


@dataclass(frozen=True)
class Order:
    """A completed checkout. Never holds the card number or CVC."""

    code: str
    customer_name: str
    customer_email: str | None
    total_amount: Decimal
    shipping_amount: Decimal
    payable_amount: Decimal
    items: list[CartItem]
    card_brand: str
    card_last4: str
    status: str = "paid"
    created_at: str = field(default_factory=_utc_now)
    id: int | None = None

    @property
    def masked_card(self) -> str:
        return f"{self.card_brand.upper()} •••• {self.card_last4}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "total_amount": str(self.total_amount),
            "shipping_amount": str(self.shipping_amount),
            "payable_amount": str(self.payable_amount),
            "items": [item.to_dict() for item in self.items],
            "card_brand": self.card_brand,
            "card_last4": self.card_last4,
            "status": self.status,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data.get("id"),
            code=data["code"],
            customer_name=data["customer_name"],
            customer_email=data.get("customer_email"),
            total_amount=_to_decimal(data["total_amount"]),
            shipping_amount=_to_decimal(data["shipping_amount"]),
            payable_amount=_to_decimal(data["payable_amount"]),
            items=[CartItem.from_dict(i) for i in data.get("items", [])],
            card_brand=data.get("card_brand", "card"),
            card_last4=data.get("card_last4", ""),
            status=data.get("status", "paid"),
            created_at=data.get("created_at", ""),
        )
