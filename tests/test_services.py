"""Tests for inventory and cart operations over the store."""
import logging

import pytest

from cart_pricing import rules
from cart_pricing.models import Product
from cart_pricing.services import (
    CartError,
    CartService,
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
    adjust_stock,
    apply_sale_status,
    can_add_to_cart,
    get_stock_status_report,
)
from cart_pricing.store import Store

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

INITIAL_STOCK = {"keyboard": 50, "mouse": 30, "monitor-arm": 20, "laptop-pouch": 0, "speaker": 10}


def _assert_stock_paired(store: Store) -> None:
    for product_id, initial in INITIAL_STOCK.items():
        assert store.products[product_id].q + store.cart.get(product_id, 0) == initial


def _product(q: int) -> Product:
    return Product(id="keyboard", name="Keyboard", val=10000, original_val=10000, q=q)


def test_can_add_to_cart():
    assert can_add_to_cart(_product(3)) is True
    assert can_add_to_cart(_product(3), 3) is True
    assert can_add_to_cart(_product(3), 4) is False
    assert can_add_to_cart(_product(0)) is False


def test_adjust_stock_never_goes_negative():
    product = _product(3)

    assert adjust_stock(product, -2).q == 1
    assert adjust_stock(product, -10).q == 0
    assert adjust_stock(product, 5).q == 8
    assert product.q == 3  # original untouched


def test_apply_sale_status_merges_only_given_fields():
    product = _product(3)

    updated = apply_sale_status(product, val=8000, on_sale=True)
    assert (updated.val, updated.on_sale, updated.suggest_sale) == (8000, True, False)
    assert updated.original_val == 10000

    updated = apply_sale_status(updated, suggest_sale=True)
    assert (updated.val, updated.on_sale, updated.suggest_sale) == (8000, True, True)

    updated = apply_sale_status(updated, on_sale=False)
    assert updated.on_sale is False
    assert updated.suggest_sale is True


def test_stock_status_report_thresholds():
    products = [
        Product(id="a", name="A", val=1, original_val=1, q=0),
        Product(id="b", name="B", val=1, original_val=1, q=4),
        Product(id="c", name="C", val=1, original_val=1, q=5),
        Product(id="d", name="D", val=1, original_val=1, q=1),
    ]

    assert get_stock_status_report(products) == [
        "A: out of stock",
        "B: low stock (4 left)",
        "D: low stock (1 left)",
    ]


def test_add_to_cart_moves_stock(store, cart):
    assert cart.add_to_cart("keyboard") == 1
    assert cart.add_to_cart("keyboard", 4) == 5

    assert store.cart == {"keyboard": 5}
    assert store.products["keyboard"].q == 45
    assert store.last_selected == "keyboard"
    assert any("added to cart: keyboard qty=4" in l for l in store.logs)
    _assert_stock_paired(store)


def test_add_beyond_stock_leaves_state_unchanged(store, cart):
    cart.add_to_cart("speaker", 8)

    with pytest.raises(InsufficientStockError):
        cart.add_to_cart("speaker", 3)

    assert store.cart["speaker"] == 8
    assert store.products["speaker"].q == 2
    assert any("insufficient stock: speaker" in l for l in store.logs)
    _assert_stock_paired(store)


def test_add_out_of_stock_product(store, cart):
    with pytest.raises(InsufficientStockError):
        cart.add_to_cart("laptop-pouch")

    assert "laptop-pouch" not in store.cart
    assert store.last_selected is None


def test_unknown_product_is_not_found(cart):
    with pytest.raises(ProductNotFoundError):
        cart.add_to_cart("gizmo")
    with pytest.raises(CartError):
        cart.change_quantity("gizmo", 1)


def test_add_requires_positive_qty(store, cart):
    with pytest.raises(InvalidQuantityError):
        cart.add_to_cart("keyboard", 0)
    with pytest.raises(CartError):
        cart.add_to_cart("keyboard", -3)

    assert store.cart == {}
    assert store.products["keyboard"].q == 50


def test_legacy_id_resolves_to_catalog_product(store, cart):
    cart.add_to_cart("p2", 2)

    assert store.cart == {"mouse": 2}
    assert cart.quantity_of("p2") == 2
    assert cart.quantity_of("mouse") == 2


def test_change_quantity_up_and_down(store, cart):
    cart.add_to_cart("mouse", 3)

    assert cart.change_quantity("mouse", 2) == 5
    assert store.products["mouse"].q == 25

    assert cart.change_quantity("mouse", -4) == 1
    assert store.products["mouse"].q == 29
    _assert_stock_paired(store)

    assert cart.change_quantity("mouse", -1) == 0
    assert "mouse" not in store.cart
    assert store.products["mouse"].q == 30


def test_change_quantity_below_zero_returns_only_what_was_in_cart(store, cart):
    cart.add_to_cart("monitor-arm", 2)

    assert cart.change_quantity("monitor-arm", -5) == 0
    assert store.products["monitor-arm"].q == 20
    _assert_stock_paired(store)


def test_change_quantity_increase_needs_stock(store, cart):
    cart.add_to_cart("speaker", 10)

    with pytest.raises(InsufficientStockError):
        cart.change_quantity("speaker", 1)
    assert store.cart["speaker"] == 10
    assert store.products["speaker"].q == 0


def test_decrease_product_not_in_cart(cart):
    with pytest.raises(CartError):
        cart.change_quantity("keyboard", -1)


def test_remove_and_clear_restore_stock(store, cart):
    cart.add_to_cart("keyboard", 7)
    cart.add_to_cart("mouse", 2)
    cart.add_to_cart("speaker", 1)

    cart.remove_from_cart("keyboard")
    assert "keyboard" not in store.cart
    assert store.products["keyboard"].q == 50

    cart.remove_from_cart("keyboard")  # уже удалён: ничего не происходит

    cart.clear_cart()
    assert store.cart == {}
    assert store.item_count() == 0
    _assert_stock_paired(store)


def test_cart_lines_skip_products_missing_from_catalog(store, cart):
    cart.add_to_cart("keyboard", 2)
    cart.add_to_cart("mouse", 1)
    del store.products["mouse"]

    lines = store.cart_lines()
    assert [(l.product.id, l.quantity) for l in lines] == [("keyboard", 2)]
    assert cart.summary().cart_total == 20000

    cart.remove_from_cart("mouse")
    assert "mouse" not in store.cart


def test_cart_lines_follow_current_prices(store, cart, inventory):
    cart.add_to_cart("keyboard", 5)
    inventory.update_sale_status("keyboard", val=8000, on_sale=True)

    assert store.cart_lines()[0].product.val == 8000
    assert cart.summary().cart_total == 40000


def test_summary_uses_injected_clock(store, tuesday):
    cart = CartService(store, clock=lambda: tuesday)
    cart.add_to_cart("speaker", 10)

    summary = cart.summary()

    assert summary.cart_total == 168750
    assert summary.tuesday_applied is True


def test_inventory_adjust_and_report(store, inventory):
    assert inventory.stock_report() == ["Laptop Pouch: out of stock"]

    inventory.adjust("speaker", -7)
    assert inventory.stock_report() == ["Laptop Pouch: out of stock", "Speaker: low stock (3 left)"]

    inventory.adjust("laptop-pouch", 6)
    assert inventory.stock_report() == ["Speaker: low stock (3 left)"]
    assert any("stock adjusted: speaker delta=-7 (q=3)" in l for l in store.logs)

    with pytest.raises(ProductNotFoundError):
        inventory.adjust("gizmo", 1)


def test_total_stock_warning(store, inventory):
    assert store.total_stock() == 110
    assert store.stock_warning() is False

    inventory.adjust("keyboard", -50)
    inventory.adjust("mouse", -20)
    assert store.total_stock() == 40
    assert store.stock_warning() is True


def test_load_default_catalog():
    store = Store()
    store.load_catalog()

    assert list(store.products) == [row["id"] for row in rules.DEFAULT_CATALOG]
    assert all(p.val == p.original_val for p in store.products.values())
    assert store.products["laptop-pouch"].q == 0
