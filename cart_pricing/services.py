from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, List, Optional

from cart_pricing import rules
from cart_pricing.models import CartTotals, Money, Product
from cart_pricing.pricing import compute_cart_totals
from cart_pricing.store import Store


class CartError(ValueError):
    pass


class ProductNotFoundError(CartError):
    pass


class InsufficientStockError(CartError):
    pass


class InvalidQuantityError(CartError):
    pass


def can_add_to_cart(product: Product, requested_qty: int = 1) -> bool:
    return product.q >= requested_qty


def adjust_stock(product: Product, delta: int) -> Product:
    return replace(product, q=max(0, product.q + delta))


def apply_sale_status(
    product: Product,
    val: Optional[Money] = None,
    on_sale: Optional[bool] = None,
    suggest_sale: Optional[bool] = None,
) -> Product:
    """Возвращает копию товара, в которой заменены только переданные поля."""
    changes = {}
    if val is not None:
        changes["val"] = val
    if on_sale is not None:
        changes["on_sale"] = on_sale
    if suggest_sale is not None:
        changes["suggest_sale"] = suggest_sale
    return replace(product, **changes)


def stock_status_message(product: Product) -> Optional[str]:
    if product.q <= rules.OUT_OF_STOCK:
        return f"{product.name}: out of stock"
    if product.q < rules.LOW_STOCK:
        return f"{product.name}: low stock ({product.q} left)"
    return None


def get_stock_status_report(products: Iterable[Product]) -> List[str]:
    messages = []
    for product in products:
        message = stock_status_message(product)
        if message:
            messages.append(message)
    return messages


class InventoryService:
    def __init__(self, store: Store):
        self.store = store

    def require(self, product_id: str) -> Product:
        product = self.store.get_product(product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    def adjust(self, product_id: str, delta: int) -> Product:
        product = adjust_stock(self.require(product_id), delta)
        self.store.products[product.id] = product
        self.store.log(f"stock adjusted: {product.id} delta={delta} (q={product.q})")
        return product

    def update_sale_status(
        self,
        product_id: str,
        val: Optional[Money] = None,
        on_sale: Optional[bool] = None,
        suggest_sale: Optional[bool] = None,
    ) -> Product:
        product = apply_sale_status(self.require(product_id), val=val, on_sale=on_sale, suggest_sale=suggest_sale)
        self.store.products[product.id] = product
        self.store.log(
            f"sale status: {product.id} val={product.val} on_sale={product.on_sale} suggest_sale={product.suggest_sale}"
        )
        return product

    def stock_report(self) -> List[str]:
        return get_stock_status_report(self.store.products.values())


class CartService:
    """
    Операции пользователя над корзиной.

    Каждая операция читает снимок один раз, проверяет условия и только потом
    записывает и склад, и корзину. Если проверка не прошла, состояние не меняется.
    """

    def __init__(self, store: Store, clock: Callable[[], date] = date.today):
        self.store = store
        self.clock = clock
        self.inventory = InventoryService(store)

    def quantity_of(self, product_id: str) -> int:
        product = self.store.get_product(product_id)
        return self.store.cart.get(product.id if product else product_id, 0)

    def add_to_cart(self, product_id: str, qty: int = 1) -> int:
        if qty <= 0:
            raise InvalidQuantityError("qty must be > 0")
        product = self.inventory.require(product_id)
        if not can_add_to_cart(product, qty):
            self.store.log(f"insufficient stock: {product.id} have={product.q}, need={qty}")
            raise InsufficientStockError(f"Insufficient stock for {product.id}: have={product.q}, need={qty}")

        new_product = adjust_stock(product, -qty)
        new_qty = self.store.cart.get(product.id, 0) + qty

        self.store.products[product.id] = new_product
        self.store.cart[product.id] = new_qty
        self.store.last_selected = product.id
        self.store.log(f"added to cart: {product.id} qty={qty} (in_cart={new_qty}, q={new_product.q})")
        return new_qty

    def change_quantity(self, product_id: str, delta: int) -> int:
        product = self.inventory.require(product_id)
        current = self.store.cart.get(product.id, 0)
        if delta == 0:
            return current
        if delta > 0:
            return self.add_to_cart(product.id, delta)
        if current == 0:
            raise CartError(f"Product {product.id} is not in cart")

        new_qty = max(0, current + delta)
        returned = current - new_qty
        new_product = adjust_stock(product, returned)

        self.store.products[product.id] = new_product
        if new_qty == 0:
            del self.store.cart[product.id]
        else:
            self.store.cart[product.id] = new_qty
        self.store.log(f"quantity changed: {product.id} delta={delta} (in_cart={new_qty}, q={new_product.q})")
        return new_qty

    def remove_from_cart(self, product_id: str) -> None:
        product = self.store.get_product(product_id)
        key = product.id if product else product_id
        qty = self.store.cart.get(key)
        if qty is None:
            return

        del self.store.cart[key]
        if product:
            new_product = adjust_stock(product, qty)
            self.store.products[product.id] = new_product
            self.store.log(f"removed from cart: {key} qty={qty} (q={new_product.q})")
        else:
            self.store.log(f"removed from cart: {key} qty={qty} (product missing from catalog)")

    def clear_cart(self) -> None:
        for product_id in list(self.store.cart):
            self.remove_from_cart(product_id)

    def summary(self) -> CartTotals:
        return compute_cart_totals(self.store.cart_lines(), self.clock())
