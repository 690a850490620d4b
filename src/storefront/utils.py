"""Utility functions for storefront."""

import re
import unicodedata
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Order
    from .pricing import PricedProduct


def slugify(text: str) -> str:
    """
    Turn a label into a URL-safe slug.

    Accents are stripped, everything else that isn't [a-z0-9] collapses to a
    single dash, and leading/trailing dashes are removed.

    Examples:
        "Şarj & Kablo" -> "sarj-kablo"
        "  Power Banks " -> "power-banks"
    """
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = re.sub(r"[^a-z0-9]+", "-", stripped.lower().strip())
    return slug.strip("-")


def parse_image_urls(text: str | None) -> list[str]:
    """Split a newline-separated list of image URLs, dropping blank lines."""
    if not text:
        return []
    return [line.strip() for line in re.split(r"\r?\n", text) if line.strip()]


def format_money(amount: Decimal) -> str:
    """Format an amount with two decimals."""
    return f"{amount:.2f}"


def format_product(priced: "PricedProduct", verbose: bool = False) -> str:
    """Format a priced product for display."""
    product = priced.product
    price_str = format_money(priced.sale_price)
    if priced.on_sale:
        price_str = (
            f"{price_str} (was {format_money(product.price)}, "
            f"-{priced.discount_percent.normalize():f}%)"
        )
    result = f"{product.id:>5}  {product.name} [{product.category}]  {price_str}  stock={product.stock}"

    if verbose:
        if product.description:
            result += f"\n       Description: {product.description}"
        for url in product.images:
            result += f"\n       Image: {url}"

    return result


def format_order(order: "Order") -> str:
    """Format an order for display."""
    email = f" <{order.customer_email}>" if order.customer_email else ""
    return (
        f"{order.code}  {order.customer_name}{email}  "
        f"{format_money(order.payable_amount)} ({order.masked_card})  {order.status}"
    )
