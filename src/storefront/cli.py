"""Command-line interface for storefront."""

import argparse
import json
import logging
import sys

from . import __version__, config
from .catalog_store import CatalogStore
from .errors import StorefrontError
from .order_store import OrderStore
from .pricing import with_pricing
from .utils import format_order, format_product, parse_image_urls


def cmd_init(args: argparse.Namespace) -> int:
    """Create the data directory and seed the default categories."""
    try:
        store = CatalogStore()
        added = store.ensure_default_categories(config.DEFAULT_CATEGORIES)

        print(f"Initialized storefront at {store.data_dir}")
        print(f"Default categories added: {added}")
        return 0

    except (StorefrontError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_products_list(args: argparse.Namespace) -> int:
    """List products."""
    try:
        store = CatalogStore()
        products = store.filter_products(category=args.category, search=args.search)

        if not products:
            print("No products found.")
            return 0

        if args.json:
            data = [with_pricing(p).to_dict() for p in products]
            print(json.dumps(data, indent=2))
        else:
            print(f"Products ({len(products)}):")
            print()
            for product in products:
                print(format_product(with_pricing(product), verbose=args.details))

        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_products_add(args: argparse.Namespace) -> int:
    """Add a product."""
    try:
        store = CatalogStore()
        product = store.create_product(
            name=args.name,
            category=args.category,
            price=args.price,
            stock=args.stock,
            description=args.description or "",
            images=parse_image_urls("\n".join(args.image or [])),
            discount_percent=args.discount,
        )

        print(f"Added product: {product.id}")
        print(f"  {format_product(with_pricing(product))}")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_products_remove(args: argparse.Namespace) -> int:
    """Remove a product."""
    try:
        store = CatalogStore()
        product = store.delete_product(args.product_id)

        print(f"Removed product: {product.id} ({product.name})")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_categories_list(args: argparse.Namespace) -> int:
    """List categories."""
    try:
        store = CatalogStore()
        categories = store.list_categories()

        if not categories:
            print("No categories found.")
            print("Seed the defaults with: storefront init")
            return 0

        if args.json:
            print(json.dumps([c.to_dict() for c in categories], indent=2))
        else:
            print(f"Categories ({len(categories)}):")
            for c in categories:
                print(f"  {c.id:<20} {c.label}")

        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_categories_add(args: argparse.Namespace) -> int:
    """Add a category."""
    try:
        store = CatalogStore()
        category = store.create_category(
            label=args.label, slug=args.slug, image_url=args.image_url
        )

        print(f"Added category: {category.id} ({category.label})")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_categories_remove(args: argparse.Namespace) -> int:
    """Remove a category that has no products."""
    try:
        store = CatalogStore()
        category = store.delete_category(args.category_id)

        print(f"Removed category: {category.id}")
        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders_list(args: argparse.Namespace) -> int:
    """List orders, newest first."""
    try:
        store = OrderStore()
        orders = store.list_orders(limit=args.limit)

        if not orders:
            print("No orders found.")
            return 0

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
        else:
            print(f"Orders ({len(orders)}):")
            print()
            for order in orders:
                print(f"  {format_order(order)}")

        return 0

    except StorefrontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    try:
        import uvicorn

        store = CatalogStore()
        if not store.exists():
            print("Warning: catalog not initialized. Run 'storefront init' first.", file=sys.stderr)
            print("Starting server anyway...", file=sys.stderr)

        print("Starting storefront API server...")
        print(f"Data directory: {store.data_dir}")
        print(f"API docs: http://{args.host}:{args.port}/docs")
        print()

        # When reload is enabled, uvicorn requires the app as an import string
        app_target = "storefront.api:app" if args.reload else None
        if app_target is None:
            from .api import app
            app_target = app

        uvicorn.run(
            app_target,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1,  # session carts live in process memory
        )
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="storefront",
        description="Manage the storefront catalog and orders, and serve the API.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init
    subparsers.add_parser("init", help="Create the data directory and seed categories")

    # products (subcommand group)
    products_parser = subparsers.add_parser("products", help="Manage products")
    products_subparsers = products_parser.add_subparsers(dest="products_command")

    # products list
    products_list_parser = products_subparsers.add_parser("list", help="List products")
    products_list_parser.add_argument(
        "--category", "-c", default="all", help="Category ID (default: all)"
    )
    products_list_parser.add_argument("--search", "-s", default="", help="Search term")
    products_list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    products_list_parser.add_argument(
        "--details", "-d", action="store_true", help="Show description and images"
    )

    # products add
    products_add_parser = products_subparsers.add_parser("add", help="Add a product")
    products_add_parser.add_argument("name", help="Product name")
    products_add_parser.add_argument("--category", "-c", required=True, help="Category ID")
    products_add_parser.add_argument("--price", "-p", required=True, help="List price")
    products_add_parser.add_argument("--stock", "-s", type=int, default=0, help="Units in stock")
    products_add_parser.add_argument("--description", help="Description")
    products_add_parser.add_argument(
        "--discount", default="0", help="Discount percent, clamped to 0-90 (default: 0)"
    )
    products_add_parser.add_argument(
        "--image", action="append", help="Image URL (repeatable, first is primary)"
    )

    # products remove
    products_remove_parser = products_subparsers.add_parser("remove", help="Remove a product")
    products_remove_parser.add_argument("product_id", type=int, help="Product ID")

    # categories (subcommand group)
    categories_parser = subparsers.add_parser("categories", help="Manage categories")
    categories_subparsers = categories_parser.add_subparsers(dest="categories_command")

    # categories list
    categories_list_parser = categories_subparsers.add_parser("list", help="List categories")
    categories_list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # categories add
    categories_add_parser = categories_subparsers.add_parser("add", help="Add a category")
    categories_add_parser.add_argument("label", help="Display label")
    categories_add_parser.add_argument("--slug", help="Category ID (defaults to a slug of the label)")
    categories_add_parser.add_argument("--image-url", help="Category image URL")

    # categories remove
    categories_remove_parser = categories_subparsers.add_parser(
        "remove", help="Remove an unused category"
    )
    categories_remove_parser.add_argument("category_id", help="Category ID")

    # orders (subcommand group)
    orders_parser = subparsers.add_parser("orders", help="Inspect orders")
    orders_subparsers = orders_parser.add_subparsers(dest="orders_command")

    # orders list
    orders_list_parser = orders_subparsers.add_parser("list", help="List orders")
    orders_list_parser.add_argument("--limit", "-n", type=int, help="Maximum orders to show")
    orders_list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", "-p", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    return parser


GROUP_COMMANDS = {
    "products": ("products_command", {
        "list": cmd_products_list,
        "add": cmd_products_add,
        "remove": cmd_products_remove,
    }),
    "categories": ("categories_command", {
        "list": cmd_categories_list,
        "add": cmd_categories_add,
        "remove": cmd_categories_remove,
    }),
    "orders": ("orders_command", {
        "list": cmd_orders_list,
    }),
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    # Handle subcommand groups
    if args.command in GROUP_COMMANDS:
        dest, handlers = GROUP_COMMANDS[args.command]
        sub_command = getattr(args, dest, None)
        if not sub_command:
            parser.parse_args([args.command, "--help"])
            return 0
        return handlers[sub_command](args)

    commands = {
        "init": cmd_init,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
