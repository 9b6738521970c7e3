from __future__ import annotations

import argparse
import logging
import random
from datetime import date

from cart_pricing.sale import SaleSimulator
from cart_pricing.services import CartError, CartService, InventoryService
from cart_pricing.store import Store


def parse_item(value: str) -> tuple[str, int]:
    product_id, _, qty = value.partition(":")
    try:
        return product_id, int(qty) if qty else 1
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad item {value!r}, expected ID[:QTY]")


def main() -> None:
    # максимально простые логи без "шумных" префиксов
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    p = argparse.ArgumentParser(description="Fill a cart from the demo catalog and print the computed totals.")
    p.add_argument("--add", type=parse_item, action="append", default=[], metavar="ID[:QTY]")
    p.add_argument("--date", type=date.fromisoformat, default=None, help="Дата расчёта, YYYY-MM-DD (по умолчанию сегодня)")
    p.add_argument("--tuesday", action="store_true", help="Считать, что сегодня вторник")
    p.add_argument("--seed", type=int, default=None, help="Seed для симулятора распродаж")
    p.add_argument("--simulate-seconds", type=float, default=0.0, help="Сколько секунд распродаж прогнать до расчёта")
    args = p.parse_args()

    store = Store()
    store.load_catalog()

    if args.simulate_seconds > 0:
        now = [0.0]
        sim = SaleSimulator(store, rng=random.Random(args.seed), clock=lambda: now[0])
        sim.start()
        now[0] = args.simulate_seconds
        sim.tick()

    today = args.date or date.today()
    if args.tuesday:
        today = 2
    cart = CartService(store, clock=lambda: today)

    for product_id, qty in args.add:
        try:
            cart.add_to_cart(product_id, qty)
        except CartError as e:
            print(f"skip {product_id}: {e}")

    totals = cart.summary()

    print("\n=== RESULT ===")
    for line in store.cart_lines():
        print(f"  {line.product.name} x{line.quantity} @ {line.product.val}")
    for notice in totals.item_discounts:
        print(f"  {notice.name} (10+): {notice.discount_percent}% off")
    print("total:", totals.cart_total)
    print("discount:", totals.discount_label or "-")
    print("points:", totals.loyalty_points, "|", ", ".join(totals.loyalty.details) or "-")
    report = InventoryService(store).stock_report()
    if report:
        print("stock:")
        for message in report:
            print("  " + message)


if __name__ == "__main__":
    main()
