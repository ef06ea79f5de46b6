#!/usr/bin/env python3
"""
Command-line front end for the cart engine.

Usage:
    storefront-cart show
    storefront-cart set ITEM_ID QTY
    storefront-cart add PRODUCT_ID SIZE [QTY]
    storefront-cart remove ITEM_ID
    storefront-cart coupon CODE

Connection settings come from STOREFRONT_API_BASE_URL / STOREFRONT_API_TOKEN.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from storefront.config import get_settings
from storefront.features.cart.presenter import CartPresenter
from storefront.features.cart.service import CartService, create_cart_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront-cart", description="Inspect and edit the storefront cart.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="show the cart with offers and totals")

    set_cmd = sub.add_parser("set", help="set a line's quantity")
    set_cmd.add_argument("item_id")
    set_cmd.add_argument("quantity", type=int)

    add_cmd = sub.add_parser("add", help="add a product to the cart")
    add_cmd.add_argument("product_id")
    add_cmd.add_argument("size")
    add_cmd.add_argument("quantity", type=int, nargs="?", default=1)

    remove_cmd = sub.add_parser("remove", help="remove a line from the cart")
    remove_cmd.add_argument("item_id")

    coupon_cmd = sub.add_parser("coupon", help="apply a coupon code")
    coupon_cmd.add_argument("code")
    return parser


async def run_command(args: argparse.Namespace, service: CartService, presenter: CartPresenter) -> int:
    loaded = await service.load()
    if not loaded["success"]:
        print(f"Error: {loaded['error']}", file=sys.stderr)
        return 1

    result = None
    if args.command == "set":
        result = await service.update_quantity(args.item_id, args.quantity)
    elif args.command == "add":
        result = await service.add_item(args.product_id, args.size, args.quantity)
    elif args.command == "remove":
        result = await service.remove_item(args.item_id)
    elif args.command == "coupon":
        result = await service.apply_coupon(args.code)

    if result is not None and not result["success"]:
        print(f"Error: {result['error']}", file=sys.stderr)

    # A failed update schedules a resync; wait so the printed cart is current
    await service.drain()
    summary = presenter.format_cart(service.view, service.offers, service.line_states())
    print(presenter.format_text(summary))
    return 0 if result is None or result["success"] else 1


async def _main(args: argparse.Namespace) -> int:
    settings = get_settings()
    service = create_cart_service(settings)
    presenter = CartPresenter(currency=settings.currency, global_cap=settings.max_quantity)
    try:
        return await run_command(args, service, presenter)
    finally:
        await service.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
