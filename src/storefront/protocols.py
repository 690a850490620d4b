"""Protocols for the stores the checkout core depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import CartLine, Order, Product


class ProductLookup(Protocol):
    """Read access to the current catalog.

    Implementations must return live price, discount and stock. Callers
    never rely on cached product data.
    """

    def get_product(self, product_id: int) -> Product | None:
        """Return the product, or None if it no longer exists."""
        ...


class OrderSink(Protocol):
    """Durable record of completed checkouts."""

    def create_order(self, order: Order) -> int:
        """Persist an order and return its numeric ID.

        Raises:
            DuplicateOrderCodeError: If order.code is already taken.
            OrderPersistenceError: If the order could not be written.
        """
        ...


class SessionCartStore(Protocol):
    """Per-session ordered list of cart lines."""

    def get_cart(self, session_id: str) -> list[CartLine]:
        """Return a copy of the session's cart (empty if none)."""
        ...

    def save_cart(self, session_id: str, lines: list[CartLine]) -> None:
        """Replace the session's cart."""
        ...

    def clear_cart(self, session_id: str) -> None:
        """Empty the session's cart."""
        ...
